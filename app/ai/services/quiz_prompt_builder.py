"""Assembles prompts for quiz generation from course and lecture context."""

from app.courses.models.course import Course, Lecture

SYSTEM_PROMPT = (
    "You are an assistant that writes multiple-choice quiz questions for online "
    "course students. You always answer with a JSON array and nothing else."
)

_REQUIREMENTS = """Requirements:
- Return ONLY valid JSON array format
- Each question object must have:
  * question (string)
  * options (array of 4 strings)
  * answer (string matching one option exactly)
  * difficulty ("Easy", "Medium", or "Hard")
  * taxonomyLevel (Bloom's taxonomy)
- Example format:
[
  {
    "question": "...",
    "options": ["...", "...", "...", "..."],
    "answer": "...",
    "difficulty": "Medium",
    "taxonomyLevel": "Understand"
  }
]"""


def lecture_context(lecture: Lecture) -> str:
    return f"Lecture: {lecture.title}"


def course_context(course: Course) -> str:
    lines = [
        f"Course: {course.title}",
        f"Subtitle: {course.subtitle or 'No subtitle'}",
        f"Description: {course.description or 'No description'}",
        "Lectures:",
    ]
    lines.extend(f"- {lecture.title}" for lecture in course.lectures)
    return "\n".join(lines)


def build_quiz_prompt(title: str, content: str, num_questions: int) -> str:
    return "\n\n".join(
        [
            f"Generate {num_questions} quiz questions in valid JSON format based on:",
            f"Title: {title}\nContent:\n{content}",
            _REQUIREMENTS,
        ]
    )
