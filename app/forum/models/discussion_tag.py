import uuid

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

TAG_MAX_LENGTH = 50


class DiscussionTag(Base):
    """One tag of a discussion. ``position`` keeps the order the author gave."""

    __tablename__ = "discussion_tags"
    __table_args__ = (Index("ix_discussion_tags_name", "name"),)

    discussion_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("discussions.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(TAG_MAX_LENGTH), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    discussion = relationship("Discussion", back_populates="tag_rows")
