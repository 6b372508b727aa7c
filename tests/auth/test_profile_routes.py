"""
Tests for the user profile endpoints and token resolution.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from tests.utils.factories import (
    create_discussion_factory,
    create_reply_factory,
    create_user_factory,
)
from tests.utils.helpers import assert_error_response, auth_headers_for, create_auth_headers

PROFILE = "/api/v1/user/profile"


@pytest.mark.asyncio
async def test_profile_includes_forum_activity(
    test_client: AsyncClient, db_session: Session, student, other_student, course
):
    discussion = create_discussion_factory(db_session, other_student, course)
    create_discussion_factory(db_session, student, course)
    create_reply_factory(db_session, discussion, student, is_accepted_answer=True)
    create_reply_factory(db_session, discussion, student)

    response = await test_client.get(PROFILE, headers=auth_headers_for(student))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "student@example.com"
    assert data["role"] == "student"
    assert data["activity"] == {
        "discussionsCount": 1,
        "repliesCount": 2,
        "acceptedAnswersCount": 1,
    }


@pytest.mark.asyncio
async def test_update_profile(test_client: AsyncClient, db_session: Session, student):
    response = await test_client.put(
        PROFILE,
        json={"name": "  Samantha  ", "photoUrl": "https://cdn.example.com/sam.png"},
        headers=auth_headers_for(student),
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Samantha"
    assert response.json()["photoUrl"] == "https://cdn.example.com/sam.png"
    db_session.refresh(student)
    assert student.name == "Samantha"


@pytest.mark.asyncio
async def test_update_profile_rejects_blank_name(test_client: AsyncClient, student):
    response = await test_client.put(
        PROFILE, json={"name": "   "}, headers=auth_headers_for(student)
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_invalid_token(test_client: AsyncClient):
    response = await test_client.get(PROFILE, headers=create_auth_headers("not-a-jwt"))

    assert response.status_code == 401
    assert_error_response(response.json(), "UNAUTHORIZED")


@pytest.mark.asyncio
async def test_token_for_unknown_user(test_client: AsyncClient):
    token = create_access_token({"sub": "00000000-0000-0000-0000-000000000000"})

    response = await test_client.get(PROFILE, headers=create_auth_headers(token))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_is_forbidden(test_client: AsyncClient, db_session: Session):
    inactive = create_user_factory(db_session, is_active=False)

    response = await test_client.get(PROFILE, headers=auth_headers_for(inactive))

    assert response.status_code == 403
