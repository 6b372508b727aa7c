from uuid import UUID

from pydantic import Field, field_validator

from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel, PaginationMeta
from app.forum.models.reply import VoteType
from app.forum.schemas.discussion import AuthorInfo, DiscussionResponse


class ReplyCreate(CamelModel):
    content: str = Field(..., max_length=10000)
    parent_reply: UUID | None = None

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Reply content is required")
        return value


class ReplyUpdate(CamelModel):
    content: str = Field(..., max_length=10000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Reply content is required")
        return value


class VoteRequest(CamelModel):
    vote_type: VoteType


class VoteResponse(CamelModel):
    upvote_count: int
    downvote_count: int
    user_vote: str | None = None


class ReplyResponse(CamelModel):
    id: UUID
    content: str
    author: AuthorInfo
    discussion: UUID
    parent_reply: UUID | None = None
    is_instructor_reply: bool
    is_accepted_answer: bool
    upvote_count: int = 0
    downvote_count: int = 0
    user_vote: str | None = None
    is_edited: bool
    edited_at: UTCDatetime | None = None
    created_at: UTCDatetime
    updated_at: UTCDatetime
    replies: list["ReplyResponse"] = Field(default_factory=list)


class ReplyListResponse(CamelModel):
    replies: list[ReplyResponse]
    pagination: PaginationMeta


class DiscussionDetailResponse(CamelModel):
    discussion: DiscussionResponse
    replies: list[ReplyResponse]


ReplyResponse.model_rebuild()
