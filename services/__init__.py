"""
Service layer for the Exam Extractor
"""
from .docx_reader import DocxMarkupReader
from .document_normalizer import DocumentNormalizer, EMPHASIS_MARKER
from .line_classifier import LineKind, ClassifiedLine, classify_line
from .record_builder import (
    ParserPhase, ParserState, ParserOptions, QuestionDraft, AnswerDraft, StepResult, RecordBuilder
)
from .tabular_serializer import (
    QUESTION_FIELDS, ANSWER_FIELDS, serialize_records, parse_records, write_tables
)
from .exam_batch_service import (
    ExamBatchService, ExamSource, DocumentResult, BatchResult, discover_documents, format_summary
)
from .exam_analyzer import ExamAnalyzer, AnalysisReport, format_report

__all__ = [
    'DocxMarkupReader',
    'DocumentNormalizer', 'EMPHASIS_MARKER',
    'LineKind', 'ClassifiedLine', 'classify_line',
    'ParserPhase', 'ParserState', 'ParserOptions', 'QuestionDraft', 'AnswerDraft', 'StepResult',
    'RecordBuilder',
    'QUESTION_FIELDS', 'ANSWER_FIELDS', 'serialize_records', 'parse_records', 'write_tables',
    'ExamBatchService', 'ExamSource', 'DocumentResult', 'BatchResult', 'discover_documents',
    'format_summary',
    'ExamAnalyzer', 'AnalysisReport', 'format_report'
]
