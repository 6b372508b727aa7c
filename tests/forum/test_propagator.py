"""
Tests for ConsistencyPropagator.
"""

import logging
from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.forum.models.discussion import Discussion
from app.forum.models.reply import Reply
from app.forum.repositories.discussion_repository import DiscussionRepository
from app.forum.services.propagator import ConsistencyPropagator
from app.forum.services.reply_service import ReplyService
from tests.utils.factories import create_discussion_factory, create_reply_factory


@pytest.fixture
def discussion(db_session: Session, student, course):
    return create_discussion_factory(db_session, student, course)


def _reload(db_session: Session, discussion: Discussion) -> Discussion:
    db_session.expire_all()
    return db_session.get(Discussion, discussion.id)


def test_reply_created_updates_counters(db_session: Session, discussion):
    at = datetime(2026, 5, 4, 10, 30, 0)

    ConsistencyPropagator(db_session).on_reply_created(discussion.id, by_instructor=False, at=at)

    reloaded = _reload(db_session, discussion)
    assert reloaded.replies_count == 1
    assert reloaded.last_activity == at
    assert reloaded.has_instructor_reply is False


def test_replies_deleted_never_goes_negative(db_session: Session, discussion):
    ConsistencyPropagator(db_session).on_replies_deleted(discussion.id, removed=3)

    assert _reload(db_session, discussion).replies_count == 0


def test_replies_deleted_keeps_answered_when_accepted_remains(
    db_session: Session, discussion, student
):
    create_reply_factory(db_session, discussion, student, is_accepted_answer=True)
    discussion.is_answered = True
    discussion.replies_count = 2
    db_session.commit()

    ConsistencyPropagator(db_session).on_replies_deleted(
        discussion.id, removed=1, accepted_removed=True
    )

    reloaded = _reload(db_session, discussion)
    assert reloaded.replies_count == 1
    assert reloaded.is_answered is True


def test_failure_is_logged_and_reply_survives(
    db_session: Session, discussion, other_student, monkeypatch, caplog
):
    def broken(*args, **kwargs):
        raise OperationalError("UPDATE discussions", {}, Exception("database is locked"))

    monkeypatch.setattr(DiscussionRepository, "record_reply_added", broken)

    with caplog.at_level(logging.ERROR, logger="app.forum.services.propagator"):
        reply = ReplyService(db_session).create_reply(discussion.id, other_student, "Still here")

    assert db_session.get(Reply, reply.id) is not None
    assert _reload(db_session, discussion).replies_count == 0
    assert any("Failed to propagate reply creation" in r.getMessage() for r in caplog.records)
