from typing import Any

import httpx

from app.auth.models.user import User
from app.core.security import create_access_token


def create_token_for(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}


def auth_headers_for(user: User) -> dict[str, str]:
    return create_auth_headers(create_token_for(user))


def set_access_token_cookie(client: httpx.AsyncClient, access_token: str) -> None:
    """Set only the access token cookie on the test client."""
    client.cookies.set("access_token", access_token)


def assert_error_response(data: dict[str, Any], code: str) -> None:
    assert data["success"] is False
    assert data["error"]["code"] == code
    assert data["error"]["message"]
