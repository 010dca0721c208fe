"""
Line classification for the Exam Extractor

Every normalized line is one of three shapes: a numbered question
(``12. What is ...``), an answer option (``- Paris`` / ``- **Paris**``), or
plain text that continues whatever came before it.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from services.document_normalizer import EMPHASIS_MARKER


class LineKind(str, Enum):
    """Shape of a normalized line"""
    NUMBERED_QUESTION = "numbered_question"
    ANSWER_OPTION = "answer_option"
    PLAIN = "plain"


LIST_MARKERS = ('-', '–', '•')

# Stray emphasis around the digits comes from bolded question numbers
NUMBERED_QUESTION_PATTERN = re.compile(r'^(?:\*\*)?(\d+)\.(?:\*\*)?\s*(.+)$')

QUESTION_WORDS_PATTERN = re.compile(
    r'^(What|When|Where|Who|Which|How|Why|Is|Are|Does|Do|Can|Should|The)\b',
    re.IGNORECASE
)


@dataclass(frozen=True)
class ClassifiedLine:
    """A line together with the fields its shape yields"""
    kind: LineKind
    raw: str
    text: str
    number: Optional[int] = None
    is_correct: bool = False
    looks_like_question: bool = False


def strip_emphasis(text: str) -> str:
    return text.replace(EMPHASIS_MARKER, '').strip()


def classify_line(line: str) -> ClassifiedLine:
    """
    Classify a single normalized line.

    Args:
        line: A trimmed, non-empty line

    Returns:
        ClassifiedLine describing the line's shape and content
    """
    line = line.strip()

    match = NUMBERED_QUESTION_PATTERN.match(line)
    if match:
        stem = strip_emphasis(match.group(2))
        if stem:
            return ClassifiedLine(
                kind=LineKind.NUMBERED_QUESTION,
                raw=line,
                text=stem,
                number=int(match.group(1))
            )

    if line.startswith(LIST_MARKERS):
        remainder = line[1:].strip()
        is_correct = EMPHASIS_MARKER in remainder
        text = strip_emphasis(remainder)
        return ClassifiedLine(
            kind=LineKind.ANSWER_OPTION,
            raw=line,
            text=text,
            is_correct=is_correct,
            looks_like_question=is_correct and text.endswith('?')
        )

    return ClassifiedLine(kind=LineKind.PLAIN, raw=line, text=line)


def looks_like_unnumbered_question(text: str) -> bool:
    """
    True for plain lines that read as a question whose number was lost:
    ending in a question mark, unemphasized, and opening with a question word.
    """
    return (
        text.endswith('?')
        and EMPHASIS_MARKER not in text
        and QUESTION_WORDS_PATTERN.match(text) is not None
    )
