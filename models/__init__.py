"""
Data models for the Exam Extractor
"""

from .exam import Question, AnswerOption, ParsedExam, CORRECT_MARKER

__all__ = [
    "Question",
    "AnswerOption",
    "ParsedExam",
    "CORRECT_MARKER",
]
