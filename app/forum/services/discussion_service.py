import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.core.config import settings
from app.core.datetime_utils import utcnow
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.schemas import PaginationMeta
from app.courses.models.course import Course
from app.forum.models.discussion import Discussion, DiscussionCategory, DiscussionSort
from app.forum.repositories.discussion_repository import DiscussionFilters, DiscussionRepository
from app.forum.schemas.discussion import (
    AuthorInfo,
    CategoryCount,
    CourseInfo,
    DiscussionCreate,
    DiscussionListResponse,
    DiscussionResponse,
    DiscussionStatsResponse,
    DiscussionUpdate,
    TagCount,
)

logger = logging.getLogger(__name__)

SLUG_INSERT_ATTEMPTS = 3


def ensure_author_or_instructor(owner_id: UUID, user: User, message: str) -> None:
    if owner_id != user.id and not user.is_instructor:
        raise ForbiddenError(message)


def build_author(user: User) -> AuthorInfo:
    return AuthorInfo(
        id=user.id,
        name=user.name,
        photo_url=user.photo_url,
        role=user.role,
    )


class DiscussionService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.discussions = DiscussionRepository(db)

    def list_discussions(
        self,
        filters: DiscussionFilters,
        sort: DiscussionSort = DiscussionSort.RECENT,
        page: int = 1,
        limit: int = 10,
    ) -> DiscussionListResponse:
        limit = max(1, min(limit, settings.FORUM_MAX_PAGE_SIZE))
        page = max(1, page)
        rows, total = self.discussions.list_discussions(filters, sort, page, limit)
        return DiscussionListResponse(
            discussions=[self.build_response(discussion) for discussion in rows],
            pagination=PaginationMeta.from_query(total, page, limit),
        )

    def get_discussion(self, discussion_id: UUID) -> Discussion:
        """Fetch a discussion for its detail page. Every call counts as a view."""
        if not self.discussions.increment_views(discussion_id):
            raise NotFoundError("Discussion not found", resource="Discussion")
        self.db.commit()
        return self.discussions.get_or_404(discussion_id)

    def create_discussion(self, user: User, data: DiscussionCreate) -> Discussion:
        if not data.title.strip() or not data.content.strip():
            raise ValidationError("Title, content, course, and category are required")

        if self.db.get(Course, data.course) is None:
            raise NotFoundError("Course not found", resource="Course")

        for attempt in range(1, SLUG_INSERT_ATTEMPTS + 1):
            slug = self.discussions.generate_unique_slug(data.title)
            discussion = Discussion(
                title=data.title,
                slug=slug,
                content=data.content,
                author_id=user.id,
                course_id=data.course,
                category=data.category.value,
                last_activity=utcnow(),
            )
            try:
                self.discussions.add(discussion)
                self.discussions.replace_tags(discussion, data.tags)
                self.db.commit()
            except IntegrityError:
                # Another request took the slug between probe and insert
                self.db.rollback()
                logger.warning("Slug collision on %s (attempt %d)", slug, attempt)
                continue

            self.db.refresh(discussion)
            logger.info(
                "Discussion created",
                extra={"discussion_id": str(discussion.id), "slug": slug},
            )
            return discussion

        raise ConflictError("A discussion with this title already exists", resource="Discussion")

    def update_discussion(
        self, discussion_id: UUID, user: User, data: DiscussionUpdate
    ) -> Discussion:
        discussion = self.discussions.get_or_404(discussion_id)
        ensure_author_or_instructor(
            discussion.author_id, user, "Not authorized to update this discussion"
        )

        # The slug stays as created so existing links keep working
        if data.title is not None:
            if not data.title:
                raise ValidationError("Title cannot be empty", field="title")
            discussion.title = data.title
        if data.content is not None:
            if not data.content.strip():
                raise ValidationError("Content cannot be empty", field="content")
            discussion.content = data.content
        if data.category is not None:
            discussion.category = data.category.value
        if data.tags is not None:
            self.discussions.replace_tags(discussion, data.tags)

        discussion.last_activity = utcnow()
        self.db.commit()
        self.db.refresh(discussion)
        return discussion

    def delete_discussion(self, discussion_id: UUID, user: User) -> None:
        discussion = self.discussions.get_or_404(discussion_id)
        ensure_author_or_instructor(
            discussion.author_id, user, "Not authorized to delete this discussion"
        )

        removed = self.discussions.delete_with_replies(discussion)
        self.db.commit()
        logger.info(
            "Discussion deleted",
            extra={"discussion_id": str(discussion_id), "replies_removed": removed},
        )

    def toggle_pin(self, discussion_id: UUID, user: User) -> Discussion:
        if not user.is_instructor:
            raise ForbiddenError("Only instructors can pin discussions")
        discussion = self.discussions.get_or_404(discussion_id)
        discussion.is_pinned = not discussion.is_pinned
        self.db.commit()
        self.db.refresh(discussion)
        return discussion

    def toggle_lock(self, discussion_id: UUID, user: User) -> Discussion:
        if not user.is_instructor:
            raise ForbiddenError("Only instructors can lock discussions")
        discussion = self.discussions.get_or_404(discussion_id)
        discussion.is_locked = not discussion.is_locked
        self.db.commit()
        self.db.refresh(discussion)
        return discussion

    def get_stats(self) -> DiscussionStatsResponse:
        total = self.discussions.count()
        answered = self.discussions.count_answered()
        return DiscussionStatsResponse(
            total=total,
            answered=answered,
            unanswered=total - answered,
            by_category=[
                CategoryCount(category=category, count=count)
                for category, count in self.discussions.category_counts()
            ],
            popular_tags=[
                TagCount(tag=tag, count=count)
                for tag, count in self.discussions.popular_tags(settings.STATS_TOP_TAGS_LIMIT)
            ],
        )

    def get_popular_tags(self, limit: int | None = None) -> list[str]:
        rows = self.discussions.popular_tags(limit or settings.POPULAR_TAGS_LIMIT)
        return [tag for tag, _ in rows]

    @staticmethod
    def get_categories() -> list[str]:
        return [category.value for category in DiscussionCategory]

    @staticmethod
    def build_response(discussion: Discussion) -> DiscussionResponse:
        return DiscussionResponse(
            id=discussion.id,
            title=discussion.title,
            slug=discussion.slug,
            content=discussion.content,
            author=build_author(discussion.author),
            course=CourseInfo(id=discussion.course.id, title=discussion.course.title),
            category=discussion.category,
            tags=discussion.tags,
            views=discussion.views,
            is_answered=discussion.is_answered,
            has_instructor_reply=discussion.has_instructor_reply,
            is_pinned=discussion.is_pinned,
            is_locked=discussion.is_locked,
            last_activity=discussion.last_activity,
            replies_count=discussion.replies_count,
            created_at=discussion.created_at,
            updated_at=discussion.updated_at,
        )
