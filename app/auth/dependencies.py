import logging
import uuid
from typing import Annotated, cast

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.core import security
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.db.session import get_db

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_access_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    access_token: Annotated[str | None, Cookie()] = None,
) -> str | None:
    """Read the access token from the Authorization header, falling back to the cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    return access_token


def _resolve_user(token: str, db: Session) -> User:
    payload = security.decode_token(token)
    if payload is None or payload.get("type", "access") != "access":
        raise UnauthorizedError("Could not validate credentials")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise UnauthorizedError("Could not validate credentials") from None

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise ForbiddenError("Account is inactive")
    return cast(User, user)


async def get_current_user(
    token: str | None = Depends(get_access_token),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from access token"""
    if not token:
        raise UnauthorizedError()
    return _resolve_user(token, db)


async def get_optional_user(
    token: str | None = Depends(get_access_token),
    db: Session = Depends(get_db),
) -> User | None:
    """Current user when a valid token is supplied; anonymous otherwise"""
    if not token:
        return None
    try:
        return _resolve_user(token, db)
    except (UnauthorizedError, ForbiddenError):
        logger.debug("Ignoring invalid credentials on public endpoint")
        return None
