"""
Tests for line classification
"""
import pytest

from services.line_classifier import (
    LineKind, classify_line, looks_like_unnumbered_question, strip_emphasis
)


class TestClassifyLine:
    """Test the three line shapes"""

    def test_numbered_question(self):
        """Test a digit-period prefix yields a numbered question"""
        line = classify_line("1. What is the capital?")
        assert line.kind == LineKind.NUMBERED_QUESTION
        assert line.number == 1
        assert line.text == "What is the capital?"

    def test_numbered_question_without_space(self):
        """Test content may follow the period directly"""
        line = classify_line("14.Which flag is this?")
        assert line.kind == LineKind.NUMBERED_QUESTION
        assert line.number == 14
        assert line.text == "Which flag is this?"

    def test_emphasized_number_is_not_a_correctness_signal(self):
        """Test emphasis around the number is cosmetic"""
        line = classify_line("**12.** Which flag is this?")
        assert line.kind == LineKind.NUMBERED_QUESTION
        assert line.number == 12
        assert line.text == "Which flag is this?"
        assert line.is_correct is False

    def test_fully_emphasized_question(self):
        """Test emphasis around the whole stem is stripped"""
        line = classify_line("**3. Who wrote Hamlet?**")
        assert line.kind == LineKind.NUMBERED_QUESTION
        assert line.number == 3
        assert line.text == "Who wrote Hamlet?"

    def test_number_without_content_is_plain(self):
        """Test a bare number is not a question"""
        assert classify_line("7.").kind == LineKind.PLAIN

    def test_plain_answer(self):
        """Test an unemphasized list line is an incorrect answer"""
        line = classify_line("- London")
        assert line.kind == LineKind.ANSWER_OPTION
        assert line.text == "London"
        assert line.is_correct is False

    def test_emphasized_answer(self):
        """Test an emphasized list line is a correct answer with the marker stripped"""
        line = classify_line("- **Paris**")
        assert line.kind == LineKind.ANSWER_OPTION
        assert line.text == "Paris"
        assert line.is_correct is True
        assert line.looks_like_question is False

    def test_partial_emphasis_marks_correct(self):
        """Test the marker anywhere in the answer counts"""
        line = classify_line("-The **Magna Carta** of 1215")
        assert line.is_correct is True
        assert line.text == "The Magna Carta of 1215"

    @pytest.mark.parametrize("marker", ["-", "–", "•"])
    def test_list_markers(self, marker):
        """Test supported list markers"""
        line = classify_line(f"{marker} Option")
        assert line.kind == LineKind.ANSWER_OPTION
        assert line.text == "Option"

    def test_empty_answer(self):
        """Test an answer that is only markers has no text"""
        line = classify_line("- ****")
        assert line.kind == LineKind.ANSWER_OPTION
        assert line.text == ""

    def test_answer_shaped_question(self):
        """Test an emphasized list line ending in a question mark looks like a question"""
        line = classify_line("- **What is the flag called?**")
        assert line.kind == LineKind.ANSWER_OPTION
        assert line.looks_like_question is True
        assert line.text == "What is the flag called?"

    def test_unemphasized_question_mark_is_not_question_shaped(self):
        """Test only emphasized lines are misplaced-question candidates"""
        assert classify_line("- Is it this one?").looks_like_question is False

    def test_plain_line(self):
        """Test other lines are plain"""
        line = classify_line("This is because the referendum occurred in 2019.")
        assert line.kind == LineKind.PLAIN
        assert line.text == "This is because the referendum occurred in 2019."


class TestHelpers:
    """Test helper predicates"""

    def test_strip_emphasis(self):
        assert strip_emphasis(" **Paris** ") == "Paris"

    @pytest.mark.parametrize("text, expected", [
        ("What is the name of the flag?", True),
        ("the year was?", True),
        ("Which TWO are correct?", True),
        ("The answer follows.", False),
        ("**What is it?**", False),
        ("Paris?", False),
    ])
    def test_looks_like_unnumbered_question(self, text, expected):
        assert looks_like_unnumbered_question(text) is expected
