"""
Database base module - imports all models for Alembic migration detection.

While the imports appear unused, they register every table on
``Base.metadata`` for autogenerate and for ``create_all`` in tests.
"""

from app.auth.models.user import User
from app.courses.models.course import Course, Lecture
from app.db.session import Base
from app.forum.models.discussion import Discussion
from app.forum.models.discussion_tag import DiscussionTag
from app.forum.models.reply import Reply, ReplyVote

__all__ = [
    "Base",
    "User",
    "Course",
    "Lecture",
    "Discussion",
    "DiscussionTag",
    "Reply",
    "ReplyVote",
]
