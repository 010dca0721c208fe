"""
Question/answer record building for the Exam Extractor

A single left-to-right pass over a document's normalized lines. The parser
state is an immutable value; each transition takes a state and returns a new
one, plus the question it completed (if any), so every line type can be
exercised on its own.

Text before the first answer line of a question continues the stem; text
after it is the explanatory reference.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple

from models.exam import AnswerOption, ParsedExam, Question
from services.line_classifier import (
    LineKind, classify_line, looks_like_unnumbered_question
)

logger = logging.getLogger(__name__)


class ParserPhase(str, Enum):
    """Where the parser is within the current question block"""
    SEEKING_QUESTION = "seeking_question"
    IN_QUESTION_STEM = "in_question_stem"
    IN_ANSWER_LIST = "in_answer_list"
    IN_REFERENCE = "in_reference"


@dataclass(frozen=True)
class AnswerDraft:
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class QuestionDraft:
    """A question still being accumulated"""
    question_number: int
    text: str
    reference: str = ""
    answers: Tuple[AnswerDraft, ...] = ()

    @property
    def next_answer_number(self) -> int:
        return len(self.answers) + 1


@dataclass(frozen=True)
class ParserOptions:
    """Optional recovery heuristics"""
    recover_unnumbered_questions: bool = False


@dataclass(frozen=True)
class ParserState:
    exam_number: int
    phase: ParserPhase = ParserPhase.SEEKING_QUESTION
    current: Optional[QuestionDraft] = None
    next_question_number: int = 1
    seen_numbered_question: bool = False
    used_numbers: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class StepResult:
    state: ParserState
    completed: Optional[QuestionDraft] = None


def _join(existing: str, addition: str) -> str:
    return f"{existing} {addition}" if existing else addition


def start_question(state: ParserState, number: int, text: str, explicit: bool = True) -> StepResult:
    """
    Open a new question, completing the current one.

    Explicit numbers resynchronize the running counter to ``number + 1``.
    A number already used in this document is moved past the highest one
    seen so two questions never share a key.
    """
    if number in state.used_numbers:
        renumbered = max(state.used_numbers) + 1
        logger.warning(
            f"Exam {state.exam_number}: question number {number} repeated, "
            f"storing it as {renumbered}"
        )
        number = renumbered

    new_state = replace(
        state,
        phase=ParserPhase.IN_QUESTION_STEM,
        current=QuestionDraft(question_number=number, text=text.strip()),
        next_question_number=number + 1,
        seen_numbered_question=state.seen_numbered_question or explicit,
        used_numbers=state.used_numbers | {number},
    )
    return StepResult(state=new_state, completed=state.current)


def add_answer(state: ParserState, text: str, is_correct: bool) -> StepResult:
    """Append an answer option to the current question; blank options are dropped"""
    if state.current is None:
        logger.debug(f"Exam {state.exam_number}: answer line before any question ignored: {text[:50]}")
        return StepResult(state=state)

    current = state.current
    text = text.strip()
    if text:
        current = replace(current, answers=current.answers + (AnswerDraft(text, is_correct),))

    return StepResult(state=replace(state, phase=ParserPhase.IN_ANSWER_LIST, current=current))


def continue_text(state: ParserState, text: str) -> StepResult:
    """Attach a plain line to the stem or, once answers began, to the reference"""
    if state.current is None:
        logger.debug(f"Exam {state.exam_number}: unparseable line ignored: {text[:50]}")
        return StepResult(state=state)

    current = state.current
    if state.phase == ParserPhase.IN_QUESTION_STEM:
        current = replace(current, text=_join(current.text, text))
        return StepResult(state=replace(state, current=current))

    current = replace(current, reference=_join(current.reference, text))
    return StepResult(state=replace(state, phase=ParserPhase.IN_REFERENCE, current=current))


def step(state: ParserState, line: str, options: ParserOptions = ParserOptions()) -> StepResult:
    """
    Process one normalized line.

    Args:
        state: Current parser state
        line: Trimmed, non-empty line
        options: Optional recovery heuristics

    Returns:
        StepResult with the new state and any question completed by this line
    """
    classified = classify_line(line)

    if classified.kind == LineKind.NUMBERED_QUESTION:
        return start_question(state, classified.number, classified.text, explicit=True)

    if classified.kind == LineKind.ANSWER_OPTION:
        if classified.looks_like_question and not state.seen_numbered_question:
            logger.info(
                f"Exam {state.exam_number}: treating '{classified.text[:50]}' as question "
                f"{state.next_question_number}"
            )
            return start_question(state, state.next_question_number, classified.text, explicit=False)
        return add_answer(state, classified.text, classified.is_correct)

    if (
        options.recover_unnumbered_questions
        and state.phase != ParserPhase.IN_QUESTION_STEM
        and looks_like_unnumbered_question(classified.text)
    ):
        logger.info(
            f"Exam {state.exam_number}: numbering unnumbered question '{classified.text[:50]}' "
            f"as {state.next_question_number}"
        )
        return start_question(state, state.next_question_number, classified.text, explicit=False)

    return continue_text(state, classified.text)


def finish(state: ParserState) -> Optional[QuestionDraft]:
    """The question still open at end of document"""
    return state.current


class RecordBuilder:
    """
    Builds Question and AnswerOption records from normalized lines.
    """

    def __init__(self, options: Optional[ParserOptions] = None):
        self.options = options or ParserOptions()

    def build(self, lines: Iterable[str], exam_number: int, source: str = "<memory>") -> ParsedExam:
        """
        Run the parser over one document.

        Args:
            lines: Normalized lines in document order
            exam_number: Exam the document belongs to
            source: Path of the source document, for reporting

        Returns:
            ParsedExam with questions and answers in document order
        """
        state = ParserState(exam_number=exam_number)
        drafts: List[QuestionDraft] = []

        for line in lines:
            line = line.strip()
            if not line:
                continue
            result = step(state, line, self.options)
            if result.completed is not None:
                drafts.append(result.completed)
            state = result.state

        last = finish(state)
        if last is not None:
            drafts.append(last)

        return self._to_exam(drafts, exam_number, source)

    @staticmethod
    def _to_exam(drafts: List[QuestionDraft], exam_number: int, source: str) -> ParsedExam:
        questions: List[Question] = []
        answers: List[AnswerOption] = []

        for draft in drafts:
            questions.append(Question(
                exam_number=exam_number,
                question_number=draft.question_number,
                text=draft.text,
                reference=draft.reference,
            ))
            for answer_number, answer in enumerate(draft.answers, 1):
                answers.append(AnswerOption(
                    exam_number=exam_number,
                    question_number=draft.question_number,
                    answer_number=answer_number,
                    text=answer.text,
                    is_correct=answer.is_correct,
                ))

        return ParsedExam(exam_number=exam_number, source=source, questions=questions, answers=answers)
