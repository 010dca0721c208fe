"""
Batch processing service for the Exam Extractor

Orchestrates the complete extraction pipeline over a directory of exams:
1. Document discovery (exam number from the filename)
2. Normalization into lines
3. Question/answer record building
4. CSV rendering and writing

A document that cannot be read is reported and skipped; the tables are
written once, at the end, from the accumulated records.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from config import settings
from models.exam import AnswerOption, ParsedExam, Question
from services.document_normalizer import DocumentNormalizer
from services.record_builder import ParserOptions, RecordBuilder
from services.tabular_serializer import (
    ANSWER_FIELDS, QUESTION_FIELDS, serialize_records, write_tables
)
from utils.exceptions import (
    DocumentReadError, EmptyBatchError, ValidationError, create_empty_batch_error
)
from utils.logging import log_performance_metric, log_processing_step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamSource:
    """A source document and the exam number parsed from its name"""
    exam_number: int
    path: Path


@dataclass
class DocumentResult:
    """Result of processing a single document"""
    source: ExamSource
    success: bool
    exam: Optional[ParsedExam] = None
    lines: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.source.path.name


@dataclass
class BatchResult:
    """Result of a batch run"""
    questions: List[Question] = field(default_factory=list)
    answers: List[AnswerOption] = field(default_factory=list)
    documents: List[DocumentResult] = field(default_factory=list)
    failed_documents: List[str] = field(default_factory=list)
    processing_time_seconds: float = 0.0
    empty_batch: bool = False
    output_files: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_documents

    @property
    def documents_processed(self) -> int:
        return sum(1 for d in self.documents if d.success)

    @property
    def correct_answer_count(self) -> int:
        return sum(1 for a in self.answers if a.is_correct)


def discover_documents(directory: str, pattern: str) -> List[ExamSource]:
    """
    Find exam documents in a directory.

    Args:
        directory: Directory to scan
        pattern: Filename regex whose first group is the exam number

    Returns:
        Sources sorted by exam number, then filename

    Raises:
        ValidationError: If the pattern is invalid or captures no exam number
        EmptyBatchError: If the directory is missing or nothing matches
    """
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise ValidationError(
            f"Invalid document pattern: {e}",
            field_name="pattern",
            field_value=pattern,
            original_exception=e
        )
    if regex.groups < 1:
        raise ValidationError(
            "Document pattern must capture the exam number",
            field_name="pattern",
            field_value=pattern
        )

    base = Path(directory)
    if not base.is_dir():
        raise create_empty_batch_error(str(directory), pattern)

    candidates = []
    for path in base.iterdir():
        match = regex.match(path.name)
        if match and path.is_file():
            try:
                exam_number = int(match.group(1))
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    f"Document pattern captured a non-numeric exam number from {path.name}",
                    field_name="pattern",
                    field_value=pattern,
                    original_exception=e
                )
            candidates.append(ExamSource(exam_number=exam_number, path=path))

    candidates.sort(key=lambda s: (s.exam_number, s.path.name))

    sources: List[ExamSource] = []
    seen: Dict[int, ExamSource] = {}
    for source in candidates:
        if source.exam_number in seen:
            logger.warning(
                f"Skipping {source.path.name}: exam {source.exam_number} "
                f"already provided by {seen[source.exam_number].path.name}"
            )
            continue
        seen[source.exam_number] = source
        sources.append(source)

    if not sources:
        raise create_empty_batch_error(str(directory), pattern)

    return sources


class ExamBatchService:
    """
    Service for running the extraction pipeline over a batch of exams.
    """

    def __init__(
        self,
        normalizer: Optional[DocumentNormalizer] = None,
        record_builder: Optional[RecordBuilder] = None,
        encoding: Optional[str] = None
    ):
        """
        Initialize the batch service.

        Args:
            normalizer: Document normalizer instance
            record_builder: Record builder instance
            encoding: Encoding for written files
        """
        self.encoding = encoding or settings.file_encoding
        self.normalizer = normalizer or DocumentNormalizer(encoding=self.encoding)
        self.record_builder = record_builder or RecordBuilder(
            ParserOptions(recover_unnumbered_questions=settings.recover_unnumbered_questions)
        )

    def process_document(self, source: ExamSource) -> DocumentResult:
        """
        Normalize and parse a single document.

        Read and record-building failures are captured in the result rather than raised.
        """
        filename = source.path.name
        try:
            lines = self.normalizer.normalize_document(str(source.path))
        except DocumentReadError as e:
            logger.error(f"Skipping {filename}: {e}")
            return DocumentResult(source=source, success=False, error_message=str(e))

        try:
            exam = self.record_builder.build(lines, source.exam_number, source=str(source.path))
        except ValueError as e:
            logger.error(f"Skipping {filename}: records could not be built: {e}")
            return DocumentResult(source=source, success=False, lines=lines, error_message=str(e))

        logger.info(
            f"Exam {source.exam_number} ({filename}): {exam.question_count} questions, "
            f"{exam.answer_count} answers, {exam.correct_answer_count} correct"
        )
        return DocumentResult(source=source, success=True, exam=exam, lines=lines)

    def process_batch(self, sources: List[ExamSource]) -> BatchResult:
        """
        Process documents one after another and merge their records.

        Args:
            sources: Documents to process

        Returns:
            BatchResult with records sorted by exam, question and answer number
        """
        start_time = datetime.now()
        result = BatchResult()

        log_processing_step("process_batch", {"documents": len(sources)})

        for source in sources:
            document = self.process_document(source)
            result.documents.append(document)

            if not document.success:
                result.failed_documents.append(str(source.path))
                continue

            result.questions.extend(document.exam.questions)
            result.answers.extend(document.exam.answers)

        result.questions.sort(key=lambda q: (q.exam_number, q.question_number))
        result.answers.sort(key=lambda a: (a.exam_number, a.question_number, a.answer_number))
        result.processing_time_seconds = (datetime.now() - start_time).total_seconds()

        log_performance_metric(
            "process_batch",
            int(result.processing_time_seconds * 1000),
            {"documents": len(sources), "failed": len(result.failed_documents)}
        )
        return result

    def run(self, input_dir: str, output_dir: str, pattern: Optional[str] = None) -> BatchResult:
        """
        Extract every exam in a directory and write both tables.

        Args:
            input_dir: Directory holding exam documents
            output_dir: Directory for questions.csv and answers.csv
            pattern: Filename pattern, defaults to the .docx pattern

        Returns:
            BatchResult for the run
        """
        pattern = pattern or settings.document_pattern

        try:
            sources = discover_documents(input_dir, pattern)
        except EmptyBatchError as e:
            logger.warning(f"{e}; writing empty tables")
            sources = []

        result = self.process_batch(sources)
        result.empty_batch = not sources

        questions_csv = serialize_records((q.to_row() for q in result.questions), QUESTION_FIELDS)
        answers_csv = serialize_records((a.to_row() for a in result.answers), ANSWER_FIELDS)

        questions_path = Path(output_dir) / settings.questions_filename
        answers_path = Path(output_dir) / settings.answers_filename
        write_tables({questions_path: questions_csv, answers_path: answers_csv}, encoding=self.encoding)
        result.output_files = [str(questions_path), str(answers_path)]

        logger.info(
            f"Batch complete: {result.documents_processed}/{len(sources)} documents, "
            f"{len(result.questions)} questions, {len(result.answers)} answers, "
            f"{result.correct_answer_count} correct"
        )
        return result

    def convert_documents(self, input_dir: str, text_dir: str, pattern: Optional[str] = None) -> BatchResult:
        """
        Write one normalized text file per readable document.

        The text files can be reviewed or hand-corrected and then extracted
        with the text pattern.
        """
        pattern = pattern or settings.document_pattern

        try:
            sources = discover_documents(input_dir, pattern)
        except EmptyBatchError as e:
            logger.warning(str(e))
            return BatchResult(empty_batch=True)

        result = self.process_batch(sources)

        outputs = {}
        for document in result.documents:
            if document.success:
                target = Path(text_dir) / f"{document.source.path.stem}.txt"
                outputs[target] = DocumentNormalizer.render_text(document.lines)

        write_tables(outputs, encoding=self.encoding)
        result.output_files = [str(path) for path in outputs]

        logger.info(f"Converted {len(outputs)}/{len(sources)} documents into {text_dir}")
        return result


def format_summary(result: BatchResult) -> str:
    """Human-readable per-document audit of a batch run"""
    lines = []

    if result.empty_batch:
        lines.append("No exam documents found.")

    for document in result.documents:
        if document.success:
            exam = document.exam
            lines.append(
                f"Exam {exam.exam_number} ({document.filename}): "
                f"{exam.question_count} questions, {exam.answer_count} answers, "
                f"{exam.correct_answer_count} correct"
            )
        else:
            lines.append(f"FAILED {document.filename}: {document.error_message}")

    lines.append("=" * 60)
    lines.append(f"Documents processed: {result.documents_processed}/{len(result.documents)}")
    lines.append(f"Questions: {len(result.questions)}")
    lines.append(f"Answers: {len(result.answers)}")
    lines.append(f"Correct answers marked: {result.correct_answer_count}")
    if result.failed_documents:
        lines.append(f"Failed documents: {', '.join(result.failed_documents)}")
    for path in result.output_files:
        lines.append(f"Wrote {path}")

    return "\n".join(lines)
