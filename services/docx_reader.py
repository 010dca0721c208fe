"""
Word document reader for the Exam Extractor

Renders a .docx file into a small HTML-like markup that keeps the three
signals the normalizer needs: paragraph boundaries, list membership and bold
runs. Embedded pictures and OLE objects are kept as ``![](media/...)``
placeholders so the normalizer can recognise and drop them.
"""
import html
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from docx import Document
from docx.oxml.ns import qn

from utils.exceptions import (
    DocumentReadError, create_document_not_found_error, create_unsupported_document_error
)

logger = logging.getLogger(__name__)


IMAGE_TAGS = (qn('w:drawing'), qn('w:pict'), qn('w:object'))


class DocxMarkupReader:
    """
    Reads exam documents with python-docx and renders them to markup.
    """

    supported_extensions = ('.docx',)

    def read_markup(self, file_path: str) -> str:
        """
        Render a Word document to markup.

        Args:
            file_path: Path to the .docx file

        Returns:
            Markup with <p>, <ul>/<ol>, <li> and <strong> elements

        Raises:
            DocumentReadError: If the file is missing, not a .docx, or corrupt
        """
        path = Path(file_path)
        if not path.exists():
            raise create_document_not_found_error(str(file_path))

        if path.suffix.lower() not in self.supported_extensions:
            raise create_unsupported_document_error(str(file_path), list(self.supported_extensions))

        try:
            document = Document(str(path))
        except Exception as e:
            raise DocumentReadError(
                f"Failed to open {file_path}: {e}",
                source_path=str(file_path),
                original_exception=e
            )

        try:
            markup = self._render(document)
        except Exception as e:
            raise DocumentReadError(
                f"Failed to render {file_path}: {e}",
                source_path=str(file_path),
                original_exception=e
            )

        logger.info(f"Rendered {len(document.paragraphs)} paragraphs from {path.name}")
        return markup

    def _render(self, document) -> str:
        parts: List[str] = []
        open_list: Optional[str] = None
        image_counter = [0]

        for paragraph in document.paragraphs:
            list_tag = self._list_tag(document, paragraph)

            if list_tag != open_list:
                if open_list:
                    parts.append(f"</{open_list}>")
                if list_tag:
                    parts.append(f"<{list_tag}>")
                open_list = list_tag

            content = self._render_runs(paragraph, image_counter)
            if list_tag:
                parts.append(f"<li>{content}</li>")
            else:
                parts.append(f"<p>{content}</p>")

        if open_list:
            parts.append(f"</{open_list}>")

        return "\n".join(parts)

    def _render_runs(self, paragraph, image_counter: List[int]) -> str:
        """Render runs, merging neighbours with the same emphasis"""
        segments: List[Tuple[bool, str]] = []

        for run in paragraph.runs:
            if any(True for _ in run._element.iter(*IMAGE_TAGS)):
                image_counter[0] += 1
                ext = "png" if run._element.find('.//' + qn('w:drawing')) is not None else "wmf"
                segments.append((False, f"![](media/image{image_counter[0]}.{ext})"))

            text = run.text.replace("\n", " ").replace("\t", " ")
            if not text:
                continue

            # whitespace-only bold runs would become an empty correct-answer marker
            bold = bool(self._is_bold(run)) and bool(text.strip())
            escaped = html.escape(text, quote=True)

            if segments and segments[-1][0] == bold:
                segments[-1] = (bold, segments[-1][1] + escaped)
            else:
                segments.append((bold, escaped))

        return "".join(
            f"<strong>{text}</strong>" if bold else text
            for bold, text in segments
        )

    @staticmethod
    def _is_bold(run) -> Optional[bool]:
        if run.bold is not None:
            return run.bold
        if run.style is not None and run.style.font is not None:
            return run.style.font.bold
        return None

    def _list_tag(self, document, paragraph) -> Optional[str]:
        """``ul`` for bulleted paragraphs, ``ol`` for numbered ones, else None"""
        p_pr = paragraph._p.pPr
        num_pr = p_pr.numPr if p_pr is not None else None

        if num_pr is not None and num_pr.numId is not None and num_pr.numId.val != 0:
            ilvl = num_pr.ilvl.val if num_pr.ilvl is not None else 0
            num_format = self._numbering_format(document, num_pr.numId.val, ilvl)
            return "ol" if num_format not in (None, "bullet") else "ul"

        style_name = paragraph.style.name if paragraph.style is not None else ""
        if style_name.startswith("List Number"):
            return "ol"
        if style_name.startswith("List"):
            return "ul"
        return None

    @staticmethod
    def _numbering_format(document, num_id: int, ilvl: int) -> Optional[str]:
        try:
            numbering = document.part.numbering_part.element
        except (KeyError, NotImplementedError):
            return None

        abstract_ids = numbering.xpath(f'./w:num[@w:numId="{num_id}"]/w:abstractNumId/@w:val')
        if not abstract_ids:
            return None

        formats = numbering.xpath(
            f'./w:abstractNum[@w:abstractNumId="{abstract_ids[0]}"]'
            f'/w:lvl[@w:ilvl="{ilvl}"]/w:numFmt/@w:val'
        )
        return formats[0] if formats else None
