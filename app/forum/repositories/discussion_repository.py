"""Persistence for forum discussions: filtered listing, slugs, counters, stats."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy import case, exists, func, or_, select
from sqlalchemy.orm import Query, Session

from app.core.repository import BaseRepository
from app.forum.models.discussion import Discussion, DiscussionSort
from app.forum.models.discussion_tag import DiscussionTag
from app.forum.models.reply import Reply, ReplyVote

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify_title(title: str) -> str:
    """Lowercase, collapse every non-alphanumeric run to one hyphen, trim hyphens."""
    slug = _NON_ALNUM.sub("-", title.lower()).strip("-")
    return slug or "discussion"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class DiscussionFilters:
    search: str | None = None
    category: str | None = None
    course_id: UUID | None = None
    tags: list[str] = field(default_factory=list)
    unanswered: bool = False


class DiscussionRepository(BaseRepository[Discussion]):
    resource_name = "Discussion"

    def __init__(self, db: Session) -> None:
        super().__init__(db, Discussion)

    def list_discussions(
        self,
        filters: DiscussionFilters,
        sort: DiscussionSort = DiscussionSort.RECENT,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Discussion], int]:
        query = self._filtered_query(filters)
        total = query.count()
        rows = (
            query.order_by(*self._ordering(sort))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def increment_views(self, discussion_id: UUID) -> bool:
        updated = (
            self.db.query(Discussion)
            .filter(Discussion.id == discussion_id)
            .update({Discussion.views: Discussion.views + 1}, synchronize_session=False)
        )
        return bool(updated)

    def slug_exists(self, slug: str) -> bool:
        return bool(self.db.query(exists().where(Discussion.slug == slug)).scalar())

    def generate_unique_slug(self, title: str) -> str:
        """Probe ``base``, ``base-1``, ``base-2`` … until a free slug is found."""
        base = slugify_title(title)
        slug = base
        suffix = 1
        while self.slug_exists(slug):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def replace_tags(self, discussion: Discussion, tags: list[str]) -> None:
        # Flush the removals first; a kept tag is re-inserted under the same key
        discussion.tag_rows.clear()
        self.db.flush()
        discussion.tag_rows.extend(
            DiscussionTag(name=name, position=position) for position, name in enumerate(tags)
        )
        self.db.flush()

    def delete_with_replies(self, discussion: Discussion) -> int:
        """Delete every reply of the discussion, then the discussion itself.

        Returns the number of replies removed.
        """
        reply_ids = select(Reply.id).where(Reply.discussion_id == discussion.id)
        self.db.query(ReplyVote).filter(ReplyVote.reply_id.in_(reply_ids)).delete(
            synchronize_session=False
        )
        removed = (
            self.db.query(Reply)
            .filter(Reply.discussion_id == discussion.id)
            .delete(synchronize_session=False)
        )
        self.db.delete(discussion)
        self.db.flush()
        return removed

    # Denormalized counters, written by the consistency propagator

    def record_reply_added(self, discussion_id: UUID, at: datetime, by_instructor: bool) -> bool:
        values: dict = {
            Discussion.replies_count: Discussion.replies_count + 1,
            Discussion.last_activity: at,
        }
        if by_instructor:
            values[Discussion.has_instructor_reply] = True
        updated = (
            self.db.query(Discussion)
            .filter(Discussion.id == discussion_id)
            .update(values, synchronize_session=False)
        )
        return bool(updated)

    def record_replies_removed(self, discussion_id: UUID, removed: int) -> bool:
        remaining = Discussion.replies_count - removed
        updated = (
            self.db.query(Discussion)
            .filter(Discussion.id == discussion_id)
            .update(
                {Discussion.replies_count: case((remaining < 0, 0), else_=remaining)},
                synchronize_session=False,
            )
        )
        return bool(updated)

    def set_answered(self, discussion_id: UUID, answered: bool) -> None:
        self.db.query(Discussion).filter(Discussion.id == discussion_id).update(
            {Discussion.is_answered: answered}, synchronize_session=False
        )

    # Aggregates

    def count_answered(self) -> int:
        return (
            self.db.query(func.count(Discussion.id))
            .filter(Discussion.is_answered == True)  # noqa: E712
            .scalar()
            or 0
        )

    def category_counts(self) -> list[tuple[str, int]]:
        rows = (
            self.db.query(Discussion.category, func.count(Discussion.id))
            .group_by(Discussion.category)
            .order_by(func.count(Discussion.id).desc(), Discussion.category)
            .all()
        )
        return [(str(category), int(count)) for category, count in rows]

    def popular_tags(self, limit: int) -> list[tuple[str, int]]:
        rows = (
            self.db.query(DiscussionTag.name, func.count(DiscussionTag.discussion_id))
            .group_by(DiscussionTag.name)
            .order_by(func.count(DiscussionTag.discussion_id).desc(), DiscussionTag.name)
            .limit(limit)
            .all()
        )
        return [(str(name), int(count)) for name, count in rows]

    def _filtered_query(self, filters: DiscussionFilters) -> Query:
        query = self.db.query(Discussion)

        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            tag_match = exists().where(
                DiscussionTag.discussion_id == Discussion.id,
                DiscussionTag.name.ilike(pattern, escape="\\"),
            )
            query = query.filter(
                or_(
                    Discussion.title.ilike(pattern, escape="\\"),
                    Discussion.content.ilike(pattern, escape="\\"),
                    tag_match,
                )
            )
        if filters.category:
            query = query.filter(Discussion.category == filters.category)
        if filters.course_id:
            query = query.filter(Discussion.course_id == filters.course_id)
        if filters.tags:
            query = query.filter(
                exists().where(
                    DiscussionTag.discussion_id == Discussion.id,
                    DiscussionTag.name.in_(filters.tags),
                )
            )
        if filters.unanswered:
            query = query.filter(Discussion.is_answered == False)  # noqa: E712
        return query

    @staticmethod
    def _ordering(sort: DiscussionSort) -> list:
        if sort == DiscussionSort.REPLIES:
            return [Discussion.replies_count.desc(), Discussion.last_activity.desc()]
        if sort == DiscussionSort.VIEWS:
            return [Discussion.views.desc(), Discussion.last_activity.desc()]
        if sort == DiscussionSort.OLDEST:
            return [Discussion.created_at.asc()]
        return [Discussion.is_pinned.desc(), Discussion.last_activity.desc()]
