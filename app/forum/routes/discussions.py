from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_optional_user
from app.auth.models.user import User
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.schemas import ErrorResponse, MessageResponse
from app.db.session import get_db
from app.forum.models.discussion import DiscussionSort
from app.forum.repositories.discussion_repository import DiscussionFilters
from app.forum.schemas.discussion import (
    DiscussionCreate,
    DiscussionListResponse,
    DiscussionResponse,
    DiscussionStatsResponse,
    DiscussionUpdate,
)
from app.forum.schemas.reply import DiscussionDetailResponse
from app.forum.services.discussion_service import DiscussionService
from app.forum.services.reply_service import ReplyService

router = APIRouter()

ALL = "All"

_not_found = {404: {"model": ErrorResponse}}
_forbidden = {403: {"model": ErrorResponse}}


def _parse_course(course: str | None) -> UUID | None:
    if not course or course == ALL:
        return None
    try:
        return UUID(course)
    except ValueError:
        raise ValidationError("Invalid course id", field="course") from None


def _parse_tags(tags: list[str] | None) -> list[str]:
    """Accept both ``?tags=a&tags=b`` and ``?tags=a,b``."""
    parsed: list[str] = []
    for raw in tags or []:
        for tag in raw.split(","):
            cleaned = tag.strip().lower()
            if cleaned and cleaned not in parsed:
                parsed.append(cleaned)
    return parsed


@router.get("/discussions", response_model=DiscussionListResponse)
def list_discussions(
    search: str | None = None,
    category: str | None = None,
    course: str | None = None,
    tags: list[str] | None = Query(None),
    sort: DiscussionSort = DiscussionSort.RECENT,
    unanswered: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.FORUM_DEFAULT_PAGE_SIZE, ge=1, le=settings.FORUM_MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> DiscussionListResponse:
    filters = DiscussionFilters(
        search=search.strip() if search and search.strip() else None,
        category=category if category and category != ALL else None,
        course_id=_parse_course(course),
        tags=_parse_tags(tags),
        unanswered=unanswered,
    )
    service = DiscussionService(db)
    return service.list_discussions(filters, sort=sort, page=page, limit=limit)


@router.get("/discussions/stats", response_model=DiscussionStatsResponse)
def get_discussion_stats(db: Session = Depends(get_db)) -> DiscussionStatsResponse:
    return DiscussionService(db).get_stats()


@router.get(
    "/discussions/{discussion_id}",
    response_model=DiscussionDetailResponse,
    responses=_not_found,
)
def get_discussion(
    discussion_id: UUID,
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> DiscussionDetailResponse:
    service = DiscussionService(db)
    discussion = service.get_discussion(discussion_id)
    replies = ReplyService(db).get_thread(discussion_id, viewer)
    return DiscussionDetailResponse(
        discussion=service.build_response(discussion),
        replies=replies,
    )


@router.post(
    "/discussions",
    response_model=DiscussionResponse,
    status_code=201,
    responses=_not_found,
)
def create_discussion(
    data: DiscussionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DiscussionResponse:
    service = DiscussionService(db)
    discussion = service.create_discussion(current_user, data)
    return service.build_response(discussion)


@router.put(
    "/discussions/{discussion_id}",
    response_model=DiscussionResponse,
    responses={**_not_found, **_forbidden},
)
def update_discussion(
    discussion_id: UUID,
    data: DiscussionUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DiscussionResponse:
    service = DiscussionService(db)
    discussion = service.update_discussion(discussion_id, current_user, data)
    return service.build_response(discussion)


@router.delete(
    "/discussions/{discussion_id}",
    response_model=MessageResponse,
    responses={**_not_found, **_forbidden},
)
def delete_discussion(
    discussion_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    DiscussionService(db).delete_discussion(discussion_id, current_user)
    return MessageResponse(message="Discussion deleted successfully")


@router.patch(
    "/discussions/{discussion_id}/pin",
    response_model=MessageResponse,
    responses={**_not_found, **_forbidden},
)
def toggle_pin(
    discussion_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    discussion = DiscussionService(db).toggle_pin(discussion_id, current_user)
    state = "pinned" if discussion.is_pinned else "unpinned"
    return MessageResponse(message=f"Discussion {state} successfully")


@router.patch(
    "/discussions/{discussion_id}/lock",
    response_model=MessageResponse,
    responses={**_not_found, **_forbidden},
)
def toggle_lock(
    discussion_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    discussion = DiscussionService(db).toggle_lock(discussion_id, current_user)
    state = "locked" if discussion.is_locked else "unlocked"
    return MessageResponse(message=f"Discussion {state} successfully")


@router.get("/categories")
def get_categories() -> list[str]:
    return DiscussionService.get_categories()


@router.get("/tags")
def get_popular_tags(db: Session = Depends(get_db)) -> list[str]:
    return DiscussionService(db).get_popular_tags()
