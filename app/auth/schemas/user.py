from uuid import UUID

from pydantic import Field, field_validator

from app.core.datetime_utils import UTCDatetime
from app.core.schemas import CamelModel


class ForumActivity(CamelModel):
    discussions_count: int = 0
    replies_count: int = 0
    accepted_answers_count: int = 0


class UserProfileResponse(CamelModel):
    id: UUID
    email: str
    name: str
    role: str
    photo_url: str | None = None
    created_at: UTCDatetime
    activity: ForumActivity


class UserProfileUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    photo_url: str | None = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        if not stripped:
            raise ValueError("Name cannot be empty")
        return stripped
