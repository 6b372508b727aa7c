import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utcnow
from app.db.session import Base


class DiscussionCategory(str, enum.Enum):
    PROGRAMMING = "Programming"
    WEB_DESIGN = "Web Design"
    CAREER = "Career"
    GENERAL = "General"


class DiscussionSort(str, enum.Enum):
    RECENT = "recent"
    REPLIES = "replies"
    VIEWS = "views"
    OLDEST = "oldest"


class Discussion(Base):
    __tablename__ = "discussions"
    __table_args__ = (
        Index("ix_discussions_category_created", "category", "created_at"),
        Index("ix_discussions_author", "author_id"),
        Index("ix_discussions_course", "course_id"),
        Index("ix_discussions_pinned_activity", "is_pinned", "last_activity"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    title: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    content: Mapped[str] = mapped_column(Text)
    author_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    course_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"))
    category: Mapped[str] = mapped_column(String(20))

    views: Mapped[int] = mapped_column(Integer, default=0)
    is_answered: Mapped[bool] = mapped_column(Boolean, default=False)
    has_instructor_reply: Mapped[bool] = mapped_column(Boolean, default=False)
    is_pinned: Mapped[bool] = mapped_column(Boolean, default=False)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)
    last_activity: Mapped[datetime] = mapped_column(default=utcnow)
    replies_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="joined")
    course = relationship("Course", lazy="joined")
    tag_rows = relationship(
        "DiscussionTag",
        back_populates="discussion",
        order_by="DiscussionTag.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [row.name for row in self.tag_rows]

    def __repr__(self) -> str:
        return f"<Discussion(id={self.id}, slug={self.slug})>"
