"""Persistence for forum replies: two-level listing, votes, accepted answers, cascades."""

from collections import defaultdict
from uuid import UUID

from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.repository import BaseRepository
from app.forum.models.reply import Reply, ReplyVote, VoteType


class ReplyRepository(BaseRepository[Reply]):
    resource_name = "Reply"

    def __init__(self, db: Session) -> None:
        super().__init__(db, Reply)

    def list_top_level(
        self, discussion_id: UUID, page: int = 1, limit: int = 20
    ) -> tuple[list[Reply], int]:
        """Top-level replies, accepted answer first, then oldest first."""
        query = self.db.query(Reply).filter(
            Reply.discussion_id == discussion_id,
            Reply.parent_reply_id.is_(None),
        )
        total = query.count()
        rows = (
            query.order_by(Reply.is_accepted_answer.desc(), Reply.created_at.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def list_thread(self, discussion_id: UUID) -> list[Reply]:
        """Every top-level reply of a discussion in creation order."""
        return (
            self.db.query(Reply)
            .filter(
                Reply.discussion_id == discussion_id,
                Reply.parent_reply_id.is_(None),
            )
            .order_by(Reply.created_at.asc())
            .all()
        )

    def children_by_parent(self, parent_ids: list[UUID]) -> dict[UUID, list[Reply]]:
        """Direct children of the given replies, grouped by parent, oldest first."""
        grouped: dict[UUID, list[Reply]] = defaultdict(list)
        if not parent_ids:
            return grouped
        children = (
            self.db.query(Reply)
            .filter(Reply.parent_reply_id.in_(parent_ids))
            .order_by(Reply.created_at.asc())
            .all()
        )
        for child in children:
            grouped[child.parent_reply_id].append(child)
        return grouped

    def get_in_discussion(self, reply_id: UUID, discussion_id: UUID) -> Reply | None:
        return (
            self.db.query(Reply)
            .filter(Reply.id == reply_id, Reply.discussion_id == discussion_id)
            .first()
        )

    def delete_with_children(self, reply: Reply) -> tuple[int, bool]:
        """Delete a reply and its direct children.

        Returns the number of replies removed and whether one of them was
        the accepted answer.
        """
        child_rows = (
            self.db.query(Reply.id, Reply.is_accepted_answer)
            .filter(Reply.parent_reply_id == reply.id)
            .all()
        )
        doomed = [reply.id, *(row.id for row in child_rows)]
        accepted_removed = reply.is_accepted_answer or any(
            row.is_accepted_answer for row in child_rows
        )

        # Grandchildren survive and move up to the top level
        child_ids = doomed[1:]
        if child_ids:
            self.db.query(Reply).filter(Reply.parent_reply_id.in_(child_ids)).update(
                {Reply.parent_reply_id: None}, synchronize_session="fetch"
            )

        self.db.query(ReplyVote).filter(ReplyVote.reply_id.in_(doomed)).delete(
            synchronize_session=False
        )
        self.db.query(Reply).filter(Reply.parent_reply_id == reply.id).delete(
            synchronize_session=False
        )
        self.db.query(Reply).filter(Reply.id == reply.id).delete(synchronize_session=False)
        self.db.flush()
        return len(doomed), accepted_removed

    def get_vote(self, reply_id: UUID, user_id: UUID) -> ReplyVote | None:
        return (
            self.db.query(ReplyVote)
            .filter(ReplyVote.reply_id == reply_id, ReplyVote.user_id == user_id)
            .first()
        )

    def set_vote(self, reply: Reply, user_id: UUID, vote_type: VoteType) -> None:
        """Replace the user's vote in place, or drop it for ``VoteType.REMOVE``."""
        reply_id = reply.id
        existing = self.get_vote(reply_id, user_id)
        if existing is not None:
            if vote_type == VoteType.REMOVE:
                self.db.delete(existing)
            else:
                existing.vote_type = vote_type.value
            self.db.flush()
        elif vote_type != VoteType.REMOVE:
            try:
                self.db.add(ReplyVote(reply_id=reply_id, user_id=user_id, vote_type=vote_type.value))
                self.db.flush()
            except IntegrityError:
                # A concurrent request stored this user's vote first
                self.db.rollback()
                self.db.query(ReplyVote).filter(
                    ReplyVote.reply_id == reply_id, ReplyVote.user_id == user_id
                ).update({ReplyVote.vote_type: vote_type.value}, synchronize_session=False)
                self.db.flush()
        self.db.expire(reply, ["votes"])

    def clear_accepted(self, discussion_id: UUID) -> int:
        return (
            self.db.query(Reply)
            .filter(
                Reply.discussion_id == discussion_id,
                Reply.is_accepted_answer == True,  # noqa: E712
            )
            .update({Reply.is_accepted_answer: False}, synchronize_session="fetch")
        )

    def has_accepted(self, discussion_id: UUID) -> bool:
        return bool(
            self.db.query(
                exists().where(
                    Reply.discussion_id == discussion_id,
                    Reply.is_accepted_answer == True,  # noqa: E712
                )
            ).scalar()
        )
