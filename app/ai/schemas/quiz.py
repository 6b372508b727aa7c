from enum import Enum
from typing import Literal
from uuid import UUID

from pydantic import Field, model_validator

from app.core.config import settings
from app.core.schemas import CamelModel


class QuizDifficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuizGenerateRequest(CamelModel):
    course_id: UUID | None = None
    lecture_id: UUID | None = None
    num_questions: int = Field(5, ge=1, le=settings.QUIZ_MAX_QUESTIONS)

    @model_validator(mode="after")
    def require_source(self) -> "QuizGenerateRequest":
        if self.course_id is None and self.lecture_id is None:
            raise ValueError("Either courseId or lectureId is required")
        return self


class QuizQuestion(CamelModel):
    question: str
    options: list[str]
    answer: str
    difficulty: QuizDifficulty = QuizDifficulty.MEDIUM
    taxonomy_level: str = "Understand"


class QuizData(CamelModel):
    questions: list[QuizQuestion]
    source: Literal["lecture", "course"]
    title: str
    total_questions: int


class QuizResponse(CamelModel):
    success: bool = True
    data: QuizData
