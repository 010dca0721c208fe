"""
Document normalization for the Exam Extractor

Turns rendered document markup into plain-text lines, one per paragraph or
list item. Bold is the only signal that an answer option is correct, so on
answer lines it survives as a ``**`` marker; on question and explanatory
lines it is dropped.
"""
import html
import logging
import re
from pathlib import Path
from typing import List, Optional

from services.docx_reader import DocxMarkupReader
from utils.exceptions import (
    DocumentReadError, create_document_not_found_error, create_unsupported_document_error
)

logger = logging.getLogger(__name__)


EMPHASIS_MARKER = "**"

# Bold wrapped around a question number, or around a whole numbered stem
_NUMBER_EMPHASIS_FIXES = [
    (re.compile(r'<(strong|b)>(\d+)\.</\1>'), r'\2.'),
    (re.compile(r'<(strong|b)>(\d+\.[^<]+)</\1>'), r'\2'),
    (re.compile(r'<(strong|b)>(\d+)\.\s*'), r'\2. '),
]

_BLOCK_SPLIT = re.compile(r'(<p[^>]*>|</p>|<ul[^>]*>|</ul>|<ol[^>]*>|</ol>|<li[^>]*>|</li>)')
_TAG_ONLY = re.compile(r'^<[^>]*>$')
_NUMBERED = re.compile(r'^(\d+)\.\s*(.+)')
_BOLD_SPAN = re.compile(r'<(strong|b)>(.*?)</\1>', re.DOTALL)
_BOLD_TAG = re.compile(r'</?(strong|b)>')
_IMAGE = re.compile(r'!\[[^\]]*\]\([^)]*\)|<img[^>]*>')
_ANY_TAG = re.compile(r'<[^>]*>')


class DocumentNormalizer:
    """
    Normalizes exam documents into line streams for the record builder.
    """

    def __init__(self, reader: Optional[DocxMarkupReader] = None, encoding: str = "utf-8"):
        self.reader = reader or DocxMarkupReader()
        self.encoding = encoding

    def normalize_document(self, file_path: str) -> List[str]:
        """
        Produce normalized lines for a source document.

        ``.docx`` files are rendered and normalized; ``.txt`` files are taken
        to be normalized already (the output of a previous conversion run).

        Raises:
            DocumentReadError: If the document cannot be read
        """
        path = Path(file_path)
        suffix = path.suffix.lower()

        if suffix == ".docx":
            markup = self.reader.read_markup(str(path))
            lines = self.normalize_markup(markup)
        elif suffix == ".txt":
            lines = self._read_text_lines(path)
        else:
            raise create_unsupported_document_error(str(file_path), [".docx", ".txt"])

        logger.info(f"Normalized {path.name} into {len(lines)} lines")
        return lines

    def normalize_markup(self, markup: str) -> List[str]:
        """
        Convert document markup into trimmed, non-empty plain-text lines.

        Args:
            markup: HTML-like markup with paragraph, list and bold elements

        Returns:
            Ordered list of lines
        """
        for pattern, replacement in _NUMBER_EMPHASIS_FIXES:
            markup = pattern.sub(replacement, markup)

        sections: List[str] = []
        in_list = False

        for section in _BLOCK_SPLIT.split(markup):
            if _TAG_ONLY.match(section):
                if section.startswith('<ul'):
                    in_list = True
                elif section.startswith('</ul'):
                    in_list = False
                continue

            section = section.strip()
            if not section:
                continue

            sections.append(self._normalize_section(section, in_list))

        text = "\n".join(sections)
        text = _ANY_TAG.sub('', text)
        text = self._decode_entities(text)

        return [line.strip() for line in text.splitlines() if line.strip()]

    def _normalize_section(self, section: str, in_list: bool) -> str:
        plain = _ANY_TAG.sub('', section).strip()

        if _NUMBERED.match(plain):
            logger.debug(f"Question section: {plain[:50]}")
            return _IMAGE.sub('', _BOLD_TAG.sub('', section))

        if in_list or plain.startswith('-') or _IMAGE.search(section):
            section = _BOLD_SPAN.sub(lambda m: f"{EMPHASIS_MARKER}{m.group(2)}{EMPHASIS_MARKER}", section)
            section = _IMAGE.sub('', section).strip()

            if section and not _ANY_TAG.sub('', section).startswith('-'):
                section = '- ' + section

            if EMPHASIS_MARKER in section:
                logger.debug(f"Emphasized answer: {section[:50]}")
            return section

        return _IMAGE.sub('', _BOLD_TAG.sub('', section))

    @staticmethod
    def _decode_entities(text: str) -> str:
        return html.unescape(text).replace('\xa0', ' ')

    def _read_text_lines(self, path: Path) -> List[str]:
        if not path.exists():
            raise create_document_not_found_error(str(path))

        try:
            content = path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(
                f"Failed to read {path}: {e}",
                source_path=str(path),
                original_exception=e
            )

        return [line.strip() for line in content.splitlines() if line.strip()]

    @staticmethod
    def render_text(lines: List[str]) -> str:
        """Normalized text file form of a line stream"""
        return "\n".join(lines)
