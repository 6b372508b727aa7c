"""Course catalog models."""

from app.courses.models.course import Course, Lecture

__all__ = [
    "Course",
    "Lecture",
]
