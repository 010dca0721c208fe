"""
Tests for Word document rendering
"""
import os
import shutil
import tempfile

import pytest
from docx import Document

from services.docx_reader import DocxMarkupReader
from services.document_normalizer import DocumentNormalizer
from utils.exceptions import DocumentReadError, ErrorCode


def make_exam_document(path):
    """Create a small exam document the way the source files are laid out"""
    document = Document()
    document.add_paragraph("1. What is the capital?")
    document.add_paragraph("London", style="List Bullet")
    correct = document.add_paragraph(style="List Bullet")
    correct.add_run("Paris").bold = True
    document.add_paragraph("Berlin", style="List Bullet")
    document.add_paragraph("Paris is the capital & largest city.")

    stem = document.add_paragraph()
    stem.add_run("2. Who wrote").bold = True
    stem.add_run(" Hamlet?")
    document.add_paragraph("Shakespeare", style="List Bullet").runs[0].bold = True
    document.add_paragraph("Dickens", style="List Bullet")

    document.save(path)


class TestDocxMarkupReader:
    """Test python-docx rendering to markup"""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.reader = DocxMarkupReader()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_render_paragraphs_lists_and_bold(self):
        """Test list membership and bold runs survive rendering"""
        path = os.path.join(self.temp_dir, "Exam_1.docx")
        make_exam_document(path)

        markup = self.reader.read_markup(path)

        assert "<p>1. What is the capital?</p>" in markup
        assert "<ul>" in markup
        assert "<li>London</li>" in markup
        assert "<li><strong>Paris</strong></li>" in markup
        assert "<p>Paris is the capital &amp; largest city.</p>" in markup
        assert markup.count("<ul>") == markup.count("</ul>") == 2

    def test_whitespace_bold_run_is_not_emphasis(self):
        path = os.path.join(self.temp_dir, "Exam_2.docx")
        document = Document()
        paragraph = document.add_paragraph(style="List Bullet")
        paragraph.add_run("Answer")
        paragraph.add_run("  ").bold = True
        document.save(path)

        assert "<strong>" not in self.reader.read_markup(path)

    def test_numbered_list_style(self):
        path = os.path.join(self.temp_dir, "Exam_3.docx")
        document = Document()
        document.add_paragraph("First", style="List Number")
        document.save(path)

        markup = self.reader.read_markup(path)
        assert markup == "<ol>\n<li>First</li>\n</ol>"

    def test_missing_document(self):
        with pytest.raises(DocumentReadError) as exc_info:
            self.reader.read_markup(os.path.join(self.temp_dir, "Exam_404.docx"))
        assert exc_info.value.error_code == ErrorCode.DOCUMENT_NOT_FOUND

    def test_corrupt_document(self):
        """Test a file that is not a Word package is reported as unreadable"""
        path = os.path.join(self.temp_dir, "Exam_5.docx")
        with open(path, "wb") as f:
            f.write(b"this is not a zip archive")

        with pytest.raises(DocumentReadError) as exc_info:
            self.reader.read_markup(path)
        assert exc_info.value.error_code == ErrorCode.DOCUMENT_READ_FAILED
        assert exc_info.value.original_exception is not None

    def test_unsupported_extension(self):
        path = os.path.join(self.temp_dir, "Exam_6.doc")
        with open(path, "wb") as f:
            f.write(b"legacy")

        with pytest.raises(DocumentReadError) as exc_info:
            self.reader.read_markup(path)
        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_DOCUMENT_TYPE


class TestDocxNormalization:
    """Test a Word document all the way to normalized lines"""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_normalize_docx(self):
        path = os.path.join(self.temp_dir, "Exam_1.docx")
        make_exam_document(path)

        lines = DocumentNormalizer().normalize_document(path)

        assert lines == [
            "1. What is the capital?",
            "- London",
            "- **Paris**",
            "- Berlin",
            "Paris is the capital & largest city.",
            "2. Who wrote Hamlet?",
            "- **Shakespeare**",
            "- Dickens",
        ]
