import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.datetime_utils import utcnow
from app.db.session import Base


class VoteType(str, enum.Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    REMOVE = "remove"


class Reply(Base):
    __tablename__ = "replies"
    __table_args__ = (
        Index("ix_replies_discussion_parent", "discussion_id", "parent_reply_id"),
        Index("ix_replies_author", "author_id"),
        Index("ix_replies_parent", "parent_reply_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    content: Mapped[str] = mapped_column(Text)
    author_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    discussion_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("discussions.id", ondelete="CASCADE")
    )
    # Deeper descendants outlive a deleted grandparent and surface as top-level replies
    parent_reply_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("replies.id", ondelete="SET NULL"), nullable=True, default=None
    )
    is_instructor_reply: Mapped[bool] = mapped_column(Boolean, default=False)
    is_accepted_answer: Mapped[bool] = mapped_column(Boolean, default=False)
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False)
    edited_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    author = relationship("User", lazy="joined")
    votes = relationship(
        "ReplyVote",
        back_populates="reply",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    @property
    def upvote_count(self) -> int:
        return sum(1 for vote in self.votes if vote.vote_type == VoteType.UPVOTE.value)

    @property
    def downvote_count(self) -> int:
        return sum(1 for vote in self.votes if vote.vote_type == VoteType.DOWNVOTE.value)

    def vote_of(self, user_id: uuid.UUID | None) -> str | None:
        if user_id is None:
            return None
        for vote in self.votes:
            if vote.user_id == user_id:
                return vote.vote_type
        return None

    def __repr__(self) -> str:
        return f"<Reply(id={self.id}, discussion_id={self.discussion_id})>"


class ReplyVote(Base):
    """A user's vote on a reply. One row per (reply, user), so a user sits in one vote set."""

    __tablename__ = "reply_votes"
    __table_args__ = (Index("ix_reply_votes_user", "user_id"),)

    reply_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("replies.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    vote_type: Mapped[str] = mapped_column(String(10))
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    reply = relationship("Reply", back_populates="votes")
