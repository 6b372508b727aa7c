"""Keeps the denormalized counters on a discussion in step with its replies.

Each hook runs after the reply write has been committed and commits on its
own. A failure here leaves the reply in place and the counters stale; it is
logged and not re-raised.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.datetime_utils import utcnow
from app.forum.repositories.discussion_repository import DiscussionRepository
from app.forum.repositories.reply_repository import ReplyRepository

logger = logging.getLogger(__name__)


class ConsistencyPropagator:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.discussions = DiscussionRepository(db)
        self.replies = ReplyRepository(db)

    def on_reply_created(
        self, discussion_id: UUID, by_instructor: bool, at: datetime | None = None
    ) -> None:
        """Bump the reply count and activity time; flag instructor participation.

        ``has_instructor_reply`` is only ever set here, never cleared.
        """
        try:
            self.discussions.record_reply_added(discussion_id, at or utcnow(), by_instructor)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to propagate reply creation to discussion %s", discussion_id
            )

    def on_replies_deleted(
        self, discussion_id: UUID, removed: int, accepted_removed: bool = False
    ) -> None:
        """Subtract removed replies; re-derive ``is_answered`` if an accepted one went."""
        try:
            self.discussions.record_replies_removed(discussion_id, removed)
            if accepted_removed:
                self.discussions.set_answered(
                    discussion_id, self.replies.has_accepted(discussion_id)
                )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to propagate deletion of %d replies to discussion %s",
                removed,
                discussion_id,
            )
