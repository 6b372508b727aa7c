"""AI-powered quiz generation endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.ai.schemas.quiz import QuizGenerateRequest, QuizResponse
from app.ai.services.quiz_generator import QuizGenerator
from app.auth.dependencies import get_current_user
from app.auth.models.user import User
from app.core.config import settings
from app.core.exceptions import ServiceUnavailableError
from app.core.rate_limit import limiter
from app.core.schemas import ErrorResponse
from app.db.session import get_db

router = APIRouter()


def _check_api_key() -> None:
    if not settings.ANTHROPIC_API_KEY:
        raise ServiceUnavailableError(
            "Anthropic API key is not configured. Set ANTHROPIC_API_KEY in .env"
        )


@router.post(
    "/generate-quiz",
    response_model=QuizResponse,
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
@limiter.limit(settings.QUIZ_RATE_LIMIT)
def generate_quiz(
    request: Request,
    quiz_request: QuizGenerateRequest,
    _current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> QuizResponse:
    """Generate multiple-choice questions for a lecture or a whole course."""
    _check_api_key()
    data = QuizGenerator(db).generate(quiz_request)
    return QuizResponse(data=data)
