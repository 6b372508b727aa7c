from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user, get_optional_user
from app.auth.models.user import User
from app.core.config import settings
from app.core.schemas import ErrorResponse, MessageResponse
from app.db.session import get_db
from app.forum.schemas.reply import (
    ReplyCreate,
    ReplyListResponse,
    ReplyResponse,
    ReplyUpdate,
    VoteRequest,
    VoteResponse,
)
from app.forum.services.reply_service import ReplyService

router = APIRouter()

_errors = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get(
    "/discussions/{discussion_id}/replies",
    response_model=ReplyListResponse,
    responses={404: {"model": ErrorResponse}},
)
def list_replies(
    discussion_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(
        settings.REPLIES_DEFAULT_PAGE_SIZE, ge=1, le=settings.FORUM_MAX_PAGE_SIZE
    ),
    viewer: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> ReplyListResponse:
    return ReplyService(db).list_replies(discussion_id, page=page, limit=limit, viewer=viewer)


@router.post(
    "/discussions/{discussion_id}/replies",
    response_model=ReplyResponse,
    status_code=201,
    responses=_errors,
)
def create_reply(
    discussion_id: UUID,
    data: ReplyCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReplyResponse:
    service = ReplyService(db)
    reply = service.create_reply(
        discussion_id, current_user, data.content, parent_reply_id=data.parent_reply
    )
    return service.build_response(reply, current_user)


@router.put("/replies/{reply_id}", response_model=ReplyResponse, responses=_errors)
def update_reply(
    reply_id: UUID,
    data: ReplyUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReplyResponse:
    service = ReplyService(db)
    reply = service.update_reply(reply_id, current_user, data.content)
    return service.build_response(reply, current_user)


@router.delete("/replies/{reply_id}", response_model=MessageResponse, responses=_errors)
def delete_reply(
    reply_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    ReplyService(db).delete_reply(reply_id, current_user)
    return MessageResponse(message="Reply deleted successfully")


@router.post(
    "/replies/{reply_id}/vote",
    response_model=VoteResponse,
    responses={404: {"model": ErrorResponse}},
)
def vote_reply(
    reply_id: UUID,
    data: VoteRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> VoteResponse:
    return ReplyService(db).vote(reply_id, current_user, data.vote_type)


@router.patch("/replies/{reply_id}/accept", response_model=MessageResponse, responses=_errors)
def accept_reply(
    reply_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    ReplyService(db).mark_accepted(reply_id, current_user)
    return MessageResponse(message="Reply marked as accepted answer")


@router.patch("/replies/{reply_id}/unaccept", response_model=MessageResponse, responses=_errors)
def unaccept_reply(
    reply_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    ReplyService(db).unmark_accepted(reply_id, current_user)
    return MessageResponse(message="Accepted answer removed")
