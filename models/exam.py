"""
Exam-related data models for the Exam Extractor
"""
from typing import Dict, List
from pydantic import BaseModel, Field, field_validator, ConfigDict


CORRECT_MARKER = "yes"


class Question(BaseModel):
    """A question extracted from an exam document"""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "exam_number": 1,
                "question_number": 2,
                "text": "When is the vote?",
                "reference": "This is because the referendum occurred in 2019."
            }
        }
    )

    exam_number: int = Field(..., ge=0, description="Exam the question belongs to, taken from the filename")
    question_number: int = Field(..., ge=0, description="Question number, unique within the exam")
    text: str = Field(..., description="Question stem")
    reference: str = Field(default="", description="Explanatory text trailing the answer list")

    @field_validator('text', 'reference')
    @classmethod
    def strip_text(cls, v):
        """Surrounding whitespace is never significant"""
        return v.strip()

    @property
    def key(self) -> tuple:
        return (self.exam_number, self.question_number)

    def to_row(self) -> Dict[str, str]:
        """Row for the questions table"""
        return {
            "examNumber": str(self.exam_number),
            "questionNumber": str(self.question_number),
            "question": self.text,
            "reference": self.reference,
        }


class AnswerOption(BaseModel):
    """One answer option of a question"""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "exam_number": 1,
                "question_number": 1,
                "answer_number": 2,
                "text": "Paris",
                "is_correct": True
            }
        }
    )

    exam_number: int = Field(..., ge=0, description="Exam the answer belongs to")
    question_number: int = Field(..., ge=0, description="Question the answer belongs to")
    answer_number: int = Field(..., ge=1, description="1-based position of the answer within its question")
    text: str = Field(..., min_length=1, description="Answer text without emphasis markers")
    is_correct: bool = Field(default=False, description="Whether the answer was emphasized in the source")

    @field_validator('text')
    @classmethod
    def validate_answer_text(cls, v):
        """Validate answer text is not blank"""
        stripped = v.strip()
        if not stripped:
            raise ValueError('Answer text cannot be empty or only whitespace')
        return stripped

    @property
    def question_key(self) -> tuple:
        return (self.exam_number, self.question_number)

    def to_row(self) -> Dict[str, str]:
        """Row for the answers table; ``isCorrect`` is ``yes`` or empty"""
        return {
            "examNumber": str(self.exam_number),
            "questionNumber": str(self.question_number),
            "answerNumber": str(self.answer_number),
            "answer": self.text,
            "isCorrect": CORRECT_MARKER if self.is_correct else "",
        }


class ParsedExam(BaseModel):
    """Questions and answers extracted from a single exam document"""

    exam_number: int = Field(..., ge=0, description="Exam number parsed from the filename")
    source: str = Field(..., min_length=1, description="Path of the source document")
    questions: List[Question] = Field(default_factory=list)
    answers: List[AnswerOption] = Field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def answer_count(self) -> int:
        return len(self.answers)

    @property
    def correct_answer_count(self) -> int:
        return sum(1 for answer in self.answers if answer.is_correct)

    def answers_for(self, question_number: int) -> List[AnswerOption]:
        """Answers of one question, in answer-number order"""
        return [a for a in self.answers if a.question_number == question_number]
