"""Reply operations for forum discussions."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.core.schemas import PaginationMeta
from app.forum.models.reply import Reply, VoteType
from app.forum.repositories.discussion_repository import DiscussionRepository
from app.forum.repositories.reply_repository import ReplyRepository
from app.forum.schemas.reply import ReplyListResponse, ReplyResponse, VoteResponse
from app.forum.services.discussion_service import build_author, ensure_author_or_instructor
from app.forum.services.propagator import ConsistencyPropagator

logger = logging.getLogger(__name__)


class ReplyService:
    """Service for discussion reply operations."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.discussions = DiscussionRepository(db)
        self.replies = ReplyRepository(db)
        self.propagator = ConsistencyPropagator(db)

    def list_replies(
        self,
        discussion_id: UUID,
        page: int = 1,
        limit: int = 20,
        viewer: User | None = None,
    ) -> ReplyListResponse:
        """Paginate top-level replies; each carries its direct children."""
        if not self.discussions.exists(discussion_id):
            raise NotFoundError("Discussion not found", resource="Discussion")

        limit = max(1, min(limit, settings.FORUM_MAX_PAGE_SIZE))
        page = max(1, page)
        top_level, total = self.replies.list_top_level(discussion_id, page, limit)
        return ReplyListResponse(
            replies=self._with_children(top_level, viewer),
            pagination=PaginationMeta.from_query(total, page, limit),
        )

    def get_thread(self, discussion_id: UUID, viewer: User | None = None) -> list[ReplyResponse]:
        """All top-level replies in creation order, each with its direct children."""
        return self._with_children(self.replies.list_thread(discussion_id), viewer)

    def create_reply(
        self,
        discussion_id: UUID,
        author: User,
        content: str,
        parent_reply_id: UUID | None = None,
    ) -> Reply:
        if not content or not content.strip():
            raise ValidationError("Reply content is required", field="content")

        discussion = self.discussions.get_or_404(discussion_id)
        if discussion.is_locked:
            raise ForbiddenError("Cannot reply to locked discussion")

        if parent_reply_id is not None:
            if self.replies.get_in_discussion(parent_reply_id, discussion_id) is None:
                raise NotFoundError("Parent reply not found", resource="Reply")

        reply = Reply(
            content=content,
            author_id=author.id,
            discussion_id=discussion_id,
            parent_reply_id=parent_reply_id,
            is_instructor_reply=author.is_instructor,
            created_at=utcnow(),
        )
        self.replies.add(reply)
        self.db.commit()

        self.propagator.on_reply_created(
            discussion_id, by_instructor=reply.is_instructor_reply, at=reply.created_at
        )
        self.db.refresh(reply)
        return reply

    def update_reply(self, reply_id: UUID, user: User, content: str) -> Reply:
        if not content or not content.strip():
            raise ValidationError("Reply content is required", field="content")

        reply = self.replies.get_or_404(reply_id)
        ensure_author_or_instructor(reply.author_id, user, "Not authorized to update this reply")

        reply.content = content
        reply.is_edited = True
        reply.edited_at = utcnow()
        self.db.commit()
        self.db.refresh(reply)
        return reply

    def delete_reply(self, reply_id: UUID, user: User) -> None:
        """Delete a reply together with its direct children."""
        reply = self.replies.get_or_404(reply_id)
        ensure_author_or_instructor(reply.author_id, user, "Not authorized to delete this reply")

        discussion_id = reply.discussion_id
        removed, accepted_removed = self.replies.delete_with_children(reply)
        self.db.commit()
        logger.info(
            "Reply deleted",
            extra={
                "reply_id": str(reply_id),
                "discussion_id": str(discussion_id),
                "replies_removed": removed,
            },
        )

        self.propagator.on_replies_deleted(discussion_id, removed, accepted_removed)

    def vote(self, reply_id: UUID, user: User, vote_type: VoteType) -> VoteResponse:
        reply = self.replies.get_or_404(reply_id)
        self.replies.set_vote(reply, user.id, vote_type)
        self.db.commit()
        self.db.refresh(reply)
        return VoteResponse(
            upvote_count=reply.upvote_count,
            downvote_count=reply.downvote_count,
            user_vote=None if vote_type == VoteType.REMOVE else vote_type.value,
        )

    def mark_accepted(self, reply_id: UUID, user: User) -> Reply:
        reply = self.replies.get_or_404(reply_id)
        discussion = self.discussions.get_or_404(reply.discussion_id)
        ensure_author_or_instructor(
            discussion.author_id,
            user,
            "Only the discussion author or instructors can mark accepted answers",
        )

        # Clear every accepted answer in the discussion before setting this one
        self.replies.clear_accepted(discussion.id)
        reply.is_accepted_answer = True
        discussion.is_answered = True
        self.db.commit()
        self.db.refresh(reply)
        logger.info(
            "Accepted answer set",
            extra={"reply_id": str(reply.id), "discussion_id": str(discussion.id)},
        )
        return reply

    def unmark_accepted(self, reply_id: UUID, user: User) -> Reply:
        reply = self.replies.get_or_404(reply_id)
        discussion = self.discussions.get_or_404(reply.discussion_id)
        ensure_author_or_instructor(
            discussion.author_id,
            user,
            "Only the discussion author or instructors can remove accepted answers",
        )

        reply.is_accepted_answer = False
        self.db.flush()
        discussion.is_answered = self.replies.has_accepted(discussion.id)
        self.db.commit()
        self.db.refresh(reply)
        return reply

    @staticmethod
    def build_response(
        reply: Reply,
        viewer: User | None = None,
        children: list[ReplyResponse] | None = None,
    ) -> ReplyResponse:
        return ReplyResponse(
            id=reply.id,
            content=reply.content,
            author=build_author(reply.author),
            discussion=reply.discussion_id,
            parent_reply=reply.parent_reply_id,
            is_instructor_reply=reply.is_instructor_reply,
            is_accepted_answer=reply.is_accepted_answer,
            upvote_count=reply.upvote_count,
            downvote_count=reply.downvote_count,
            user_vote=reply.vote_of(viewer.id) if viewer else None,
            is_edited=reply.is_edited,
            edited_at=reply.edited_at,
            created_at=reply.created_at,
            updated_at=reply.updated_at,
            replies=children or [],
        )

    def _with_children(self, top_level: list[Reply], viewer: User | None) -> list[ReplyResponse]:
        children = self.replies.children_by_parent([reply.id for reply in top_level])
        return [
            self.build_response(
                reply,
                viewer,
                children=[self.build_response(child, viewer) for child in children.get(reply.id, [])],
            )
            for reply in top_level
        ]
