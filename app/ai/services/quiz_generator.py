"""Orchestrator: fetch lecture or course -> build prompt -> call AI -> validate questions."""

import json
import logging
import re
from typing import Any

import anthropic
from sqlalchemy.orm import Session, selectinload

from app.ai.schemas.quiz import (
    QuizData,
    QuizDifficulty,
    QuizGenerateRequest,
    QuizQuestion,
)
from app.ai.services.anthropic_service import call_anthropic
from app.ai.services.quiz_prompt_builder import (
    SYSTEM_PROMPT,
    build_quiz_prompt,
    course_context,
    lecture_context,
)
from app.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.courses.models.course import Course, Lecture

logger = logging.getLogger(__name__)

_DIFFICULTIES = {level.value.lower(): level for level in QuizDifficulty}


class QuizParseError(ValueError):
    pass


def _extract_json_from_response(text: str) -> Any:
    """Extract JSON from AI response, handling markdown code blocks."""
    json_match = re.search(r"```json\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    if json_match:
        return json.loads(json_match.group(1))

    code_match = re.search(r"```\s*\n?(.*?)\n?\s*```", text, re.DOTALL)
    if code_match:
        try:
            return json.loads(code_match.group(1))
        except json.JSONDecodeError:
            pass

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Outermost array, then outermost object
    for opening, closing in (("[", "]"), ("{", "}")):
        first = text.find(opening)
        last = text.rfind(closing)
        if first != -1 and last > first:
            try:
                return json.loads(text[first : last + 1])
            except json.JSONDecodeError:
                continue

    raise QuizParseError("Could not extract valid JSON from AI response")


def _coerce_difficulty(value: Any) -> QuizDifficulty:
    return _DIFFICULTIES.get(str(value).strip().lower(), QuizDifficulty.MEDIUM)


def parse_questions(text: str) -> list[QuizQuestion]:
    """Validate every question in the response; one bad question fails the batch."""
    try:
        data = _extract_json_from_response(text)
    except json.JSONDecodeError as e:
        raise QuizParseError(str(e)) from e

    if not isinstance(data, list):
        raise QuizParseError("AI response was not an array")

    questions: list[QuizQuestion] = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            raise QuizParseError(f"Question {index} is not an object")
        if not item.get("question") or not item.get("options") or not item.get("answer"):
            raise QuizParseError(f"Question {index} is missing required fields")
        if not isinstance(item["options"], list):
            raise QuizParseError(f"Question {index} options must be a list")

        questions.append(
            QuizQuestion(
                question=str(item["question"]),
                options=[str(option) for option in item["options"]],
                answer=str(item["answer"]),
                difficulty=_coerce_difficulty(item.get("difficulty")),
                taxonomy_level=str(item.get("taxonomyLevel") or "Understand"),
            )
        )
    return questions


class QuizGenerator:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _lecture_source(self, lecture_id: Any) -> tuple[str, str]:
        lecture = self.db.get(Lecture, lecture_id)
        if lecture is None:
            raise NotFoundError("Lecture not found", resource="Lecture")
        return lecture.title, lecture_context(lecture)

    def _course_source(self, course_id: Any) -> tuple[str, str]:
        course = (
            self.db.query(Course)
            .options(selectinload(Course.lectures))
            .filter(Course.id == course_id)
            .first()
        )
        if course is None:
            raise NotFoundError("Course not found", resource="Course")
        return course.title, course_context(course)

    def generate(self, request: QuizGenerateRequest) -> QuizData:
        # A lecture id takes precedence when both are given
        if request.lecture_id is not None:
            source = "lecture"
            title, content = self._lecture_source(request.lecture_id)
        else:
            source = "course"
            title, content = self._course_source(request.course_id)

        prompt = build_quiz_prompt(title, content, request.num_questions)

        try:
            response_text, tokens_used, model = call_anthropic(
                system_prompt=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error("Quiz generation failed at provider: %s", e)
            raise ExternalServiceError("Quiz generation failed", service="anthropic") from e

        logger.info(
            "Quiz generated",
            extra={"source": source, "model": model, "tokens_used": tokens_used},
        )

        try:
            questions = parse_questions(response_text)
        except QuizParseError as e:
            logger.warning("Unparseable quiz response: %s", response_text[:500])
            raise ValidationError(
                f"Failed to parse quiz data. Please try again. Error: {e}"
            ) from e

        return QuizData(
            questions=questions,
            source=source,
            title=title,
            total_questions=len(questions),
        )
