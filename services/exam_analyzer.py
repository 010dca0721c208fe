"""
Output audit for the Exam Extractor

Checks generated tables for the mistakes extraction heuristics tend to make:
exams with the wrong number of questions, questions with no answer marked
correct, questions with no answers, and answers whose question is missing.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from models.exam import CORRECT_MARKER
from services.tabular_serializer import ANSWER_FIELDS, QUESTION_FIELDS, parse_records
from utils.exceptions import DocumentReadError, TableFormatError

logger = logging.getLogger(__name__)


@dataclass
class ExamCount:
    """Question count of an exam that differs from the expected count"""
    exam_number: int
    question_count: int
    missing_numbers: List[int] = field(default_factory=list)

    def difference(self, expected: int) -> int:
        return self.question_count - expected


@dataclass
class QuestionIssue:
    exam_number: int
    question_number: int
    answers: List[Tuple[int, str, bool]] = field(default_factory=list)


@dataclass
class AnalysisReport:
    """Findings of an audit run"""
    expected_questions: int
    question_counts: Dict[int, int] = field(default_factory=dict)
    miscounted_exams: List[ExamCount] = field(default_factory=list)
    without_correct_answer: List[QuestionIssue] = field(default_factory=list)
    without_answers: List[QuestionIssue] = field(default_factory=list)
    orphan_answers: List[Tuple[int, int, int]] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(
            self.miscounted_exams or self.without_correct_answer
            or self.without_answers or self.orphan_answers
        )


def _require_columns(rows: List[Dict[str, str]], columns: Sequence[str], table: str) -> None:
    if not rows:
        return
    missing = [c for c in columns if c not in rows[0]]
    if missing:
        raise TableFormatError(
            f"{table} table is missing columns: {', '.join(missing)}",
            table=table,
            missing_columns=missing
        )


def _to_int(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


class ExamAnalyzer:
    """
    Audits question and answer rows.
    """

    def __init__(self, expected_questions: int = 24):
        self.expected_questions = expected_questions

    def analyze(self, question_rows: List[Dict[str, str]], answer_rows: List[Dict[str, str]]) -> AnalysisReport:
        """
        Audit rows as produced by the questions and answers tables.

        Args:
            question_rows: Rows keyed by the question table columns
            answer_rows: Rows keyed by the answer table columns

        Returns:
            AnalysisReport with every finding
        """
        _require_columns(question_rows, QUESTION_FIELDS[:2], "questions")
        _require_columns(answer_rows, ANSWER_FIELDS, "answers")

        report = AnalysisReport(expected_questions=self.expected_questions)

        numbers_by_exam: Dict[int, List[int]] = defaultdict(list)
        for row in question_rows:
            exam_number = _to_int(row["examNumber"])
            question_number = _to_int(row["questionNumber"])
            if exam_number < 0 or question_number < 0:
                logger.warning(f"Ignoring question row with invalid key: {row}")
                continue
            numbers_by_exam[exam_number].append(question_number)

        answers_by_question: Dict[Tuple[int, int], List[Tuple[int, str, bool]]] = defaultdict(list)
        for row in answer_rows:
            key = (_to_int(row["examNumber"]), _to_int(row["questionNumber"]))
            is_correct = row["isCorrect"].strip().lower() == CORRECT_MARKER
            answers_by_question[key].append((_to_int(row["answerNumber"]), row["answer"], is_correct))

        for exam_number in sorted(numbers_by_exam):
            numbers = numbers_by_exam[exam_number]
            report.question_counts[exam_number] = len(numbers)
            if len(numbers) != self.expected_questions:
                present = set(numbers)
                missing = [n for n in range(1, self.expected_questions + 1) if n not in present]
                report.miscounted_exams.append(ExamCount(exam_number, len(numbers), missing))

        question_keys = set()
        for exam_number in sorted(numbers_by_exam):
            for question_number in sorted(set(numbers_by_exam[exam_number])):
                key = (exam_number, question_number)
                question_keys.add(key)
                answers = answers_by_question.get(key, [])
                if not answers:
                    report.without_answers.append(QuestionIssue(exam_number, question_number))
                elif not any(correct for _, _, correct in answers):
                    report.without_correct_answer.append(QuestionIssue(exam_number, question_number, answers))

        for key in sorted(answers_by_question):
            if key not in question_keys:
                for answer_number, _, _ in answers_by_question[key]:
                    report.orphan_answers.append((key[0], key[1], answer_number))

        logger.info(
            f"Analyzed {len(question_rows)} questions and {len(answer_rows)} answers: "
            f"{len(report.miscounted_exams)} miscounted exams, "
            f"{len(report.without_correct_answer)} questions without a correct answer"
        )
        return report

    def analyze_files(self, questions_path: str, answers_path: str, encoding: str = "utf-8") -> AnalysisReport:
        """
        Audit table files on disk.

        Raises:
            DocumentReadError: If either file cannot be read
            TableFormatError: If a table lacks required columns
        """
        return self.analyze(
            self._read_rows(questions_path, encoding),
            self._read_rows(answers_path, encoding)
        )

    @staticmethod
    def _read_rows(path: str, encoding: str) -> List[Dict[str, str]]:
        try:
            text = Path(path).read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(
                f"Failed to read table {path}: {e}",
                source_path=str(path),
                original_exception=e
            )
        return parse_records(text)


def format_report(report: AnalysisReport) -> str:
    """Human-readable audit report"""
    expected = report.expected_questions
    lines = ["QUESTION COUNT PER EXAM:", "=" * 24]

    for exam_number, count in report.question_counts.items():
        status = "OK " if count == expected else "BAD"
        lines.append(f"{status} Exam {exam_number}: {count} questions")

    for exam in report.miscounted_exams:
        diff = exam.difference(expected)
        detail = f"missing {-diff}" if diff < 0 else f"{diff} extra"
        lines.append(f"Exam {exam.exam_number}: {exam.question_count} questions ({detail})")
        if exam.missing_numbers:
            lines.append(f"  Missing question numbers: {', '.join(map(str, exam.missing_numbers))}")

    lines.append("")
    lines.append("QUESTIONS WITHOUT CORRECT ANSWERS:")
    lines.append("=" * 34)
    if not report.without_correct_answer:
        lines.append("All questions with answers have a correct answer marked.")
    for issue in report.without_correct_answer:
        lines.append(f"Exam {issue.exam_number} question {issue.question_number}:")
        for answer_number, text, _ in issue.answers:
            lines.append(f"  {answer_number}. {text}")

    if report.without_answers:
        lines.append("")
        lines.append("QUESTIONS WITHOUT ANSWERS:")
        for issue in report.without_answers:
            lines.append(f"Exam {issue.exam_number} question {issue.question_number}")

    if report.orphan_answers:
        lines.append("")
        lines.append("ANSWERS WITHOUT A QUESTION:")
        for exam_number, question_number, answer_number in report.orphan_answers:
            lines.append(f"Exam {exam_number} question {question_number} answer {answer_number}")

    total = sum(report.question_counts.values())
    lines.append("")
    lines.append(f"Total exams analyzed: {len(report.question_counts)}")
    lines.append(f"Total questions: {total} (expected {len(report.question_counts) * expected})")

    return "\n".join(lines)
