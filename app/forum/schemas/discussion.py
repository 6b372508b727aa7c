from uuid import UUID

from pydantic import Field, field_validator

from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel, PaginationMeta
from app.forum.models.discussion import DiscussionCategory
from app.forum.models.discussion_tag import TAG_MAX_LENGTH


def _normalize_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    seen: list[str] = []
    for tag in tags:
        cleaned = str(tag).strip().lower()
        if len(cleaned) > TAG_MAX_LENGTH:
            raise ValueError(f"Tags must be at most {TAG_MAX_LENGTH} characters")
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class DiscussionCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    course: UUID
    category: DiscussionCategory
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str) -> str:
        return value.strip()

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str]) -> list[str]:
        return _normalize_tags(value) or []


class DiscussionUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    content: str | None = Field(None, min_length=1)
    category: DiscussionCategory | None = None
    tags: list[str] | None = Field(None, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_tags(value)


class AuthorInfo(CamelModel):
    id: UUID
    name: str
    photo_url: str | None = None
    role: str


class CourseInfo(CamelModel):
    id: UUID
    title: str


class DiscussionResponse(CamelModel):
    id: UUID
    title: str
    slug: str
    content: str
    author: AuthorInfo
    course: CourseInfo
    category: str
    tags: list[str] = Field(default_factory=list)
    views: int
    is_answered: bool
    has_instructor_reply: bool
    is_pinned: bool
    is_locked: bool
    last_activity: UTCDatetime
    replies_count: int
    created_at: UTCDatetime
    updated_at: UTCDatetime


class DiscussionListResponse(CamelModel):
    discussions: list[DiscussionResponse]
    pagination: PaginationMeta


class CategoryCount(CamelModel):
    category: str
    count: int


class TagCount(CamelModel):
    tag: str
    count: int


class DiscussionStatsResponse(CamelModel):
    total: int
    answered: int
    unanswered: int
    by_category: list[CategoryCount]
    popular_tags: list[TagCount]
