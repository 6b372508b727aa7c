"""
Unit tests for DiscussionService and DiscussionRepository.
"""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.forum.models.discussion import Discussion, DiscussionCategory, DiscussionSort
from app.forum.models.reply import Reply, ReplyVote, VoteType
from app.forum.repositories.discussion_repository import DiscussionFilters, slugify_title
from app.forum.repositories.reply_repository import ReplyRepository
from app.forum.schemas.discussion import DiscussionCreate, DiscussionUpdate
from app.forum.services.discussion_service import DiscussionService
from tests.utils.factories import (
    create_course_factory,
    create_discussion_factory,
    create_reply_factory,
)


def _create_payload(course, title="Hello, World!", tags=None, category="Programming"):
    return DiscussionCreate(
        title=title,
        content="How do I print hello world?",
        course=course.id,
        category=category,
        tags=tags or [],
    )


class TestSlugGeneration:
    """Tests for slug derivation and collision handling."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Hello, World!", "hello-world"),
            ("  Spaces   everywhere  ", "spaces-everywhere"),
            ("C++ & Rust: a comparison", "c-rust-a-comparison"),
            ("!!!", "discussion"),
        ],
    )
    def test_slugify_title(self, title, expected):
        assert slugify_title(title) == expected

    def test_same_title_twice_gets_numeric_suffix(self, db_session: Session, student, course):
        service = DiscussionService(db_session)

        first = service.create_discussion(student, _create_payload(course))
        second = service.create_discussion(student, _create_payload(course))
        third = service.create_discussion(student, _create_payload(course))

        assert first.slug == "hello-world"
        assert second.slug == "hello-world-1"
        assert third.slug == "hello-world-2"


class TestCreateDiscussion:
    """Tests for create_discussion method."""

    def test_creates_with_defaults(self, db_session: Session, student, course):
        service = DiscussionService(db_session)
        discussion = service.create_discussion(
            student, _create_payload(course, tags=["Python", " python ", "basics", ""])
        )

        assert discussion.author_id == student.id
        assert discussion.course_id == course.id
        assert discussion.category == DiscussionCategory.PROGRAMMING.value
        assert discussion.tags == ["python", "basics"]
        assert discussion.views == 0
        assert discussion.replies_count == 0
        assert discussion.is_answered is False
        assert discussion.has_instructor_reply is False
        assert discussion.is_pinned is False
        assert discussion.is_locked is False
        assert discussion.last_activity is not None

    def test_unknown_course_is_not_found(self, db_session: Session, student, course):
        service = DiscussionService(db_session)
        payload = _create_payload(course)
        payload.course = uuid.uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            service.create_discussion(student, payload)

        assert exc_info.value.message == "Course not found"
        assert db_session.query(Discussion).count() == 0

    def test_build_response_uses_camel_case(self, db_session: Session, student, course):
        service = DiscussionService(db_session)
        discussion = service.create_discussion(student, _create_payload(course))

        data = service.build_response(discussion).model_dump(by_alias=True)

        assert data["slug"] == "hello-world"
        assert data["repliesCount"] == 0
        assert data["hasInstructorReply"] is False
        assert data["author"]["name"] == student.name
        assert data["course"]["title"] == course.title


class TestGetDiscussion:
    """Tests for get_discussion method."""

    def test_each_read_counts_as_a_view(self, db_session: Session, student, course):
        discussion = create_discussion_factory(db_session, student, course)
        service = DiscussionService(db_session)

        service.get_discussion(discussion.id)
        fetched = service.get_discussion(discussion.id)

        assert fetched.views == 2

    def test_missing_discussion(self, db_session: Session):
        with pytest.raises(NotFoundError):
            DiscussionService(db_session).get_discussion(uuid.uuid4())


class TestUpdateDiscussion:
    """Tests for update_discussion method."""

    def test_author_updates_but_slug_stays(self, db_session: Session, student, course):
        service = DiscussionService(db_session)
        discussion = service.create_discussion(student, _create_payload(course))
        before = discussion.last_activity

        updated = service.update_discussion(
            discussion.id,
            student,
            DiscussionUpdate(title="A brand new title", tags=["Loops"], category="Career"),
        )

        assert updated.title == "A brand new title"
        assert updated.slug == "hello-world"
        assert updated.tags == ["loops"]
        assert updated.category == "Career"
        assert updated.last_activity >= before

    def test_other_student_is_forbidden(
        self, db_session: Session, student, other_student, course
    ):
        discussion = create_discussion_factory(db_session, student, course, title="Mine")

        with pytest.raises(ForbiddenError):
            DiscussionService(db_session).update_discussion(
                discussion.id, other_student, DiscussionUpdate(title="Hijacked")
            )

        db_session.refresh(discussion)
        assert discussion.title == "Mine"

    def test_instructor_may_update_any(self, db_session: Session, student, instructor, course):
        discussion = create_discussion_factory(db_session, student, course)

        updated = DiscussionService(db_session).update_discussion(
            discussion.id, instructor, DiscussionUpdate(content="Clarified by staff")
        )

        assert updated.content == "Clarified by staff"

    def test_blank_content_is_rejected(self, db_session: Session, student, course):
        discussion = create_discussion_factory(db_session, student, course, content="Original")

        with pytest.raises(ValidationError, match="Content cannot be empty"):
            DiscussionService(db_session).update_discussion(
                discussion.id, student, DiscussionUpdate(content="   ")
            )

        db_session.refresh(discussion)
        assert discussion.content == "Original"


class TestDeleteDiscussion:
    """Tests for delete_discussion method."""

    def test_removes_replies_and_votes(
        self, db_session: Session, student, other_student, course
    ):
        discussion = create_discussion_factory(db_session, student, course)
        parent = create_reply_factory(db_session, discussion, other_student)
        create_reply_factory(db_session, discussion, student, parent=parent)
        ReplyRepository(db_session).set_vote(parent, student.id, VoteType.UPVOTE)
        db_session.commit()

        DiscussionService(db_session).delete_discussion(discussion.id, student)

        assert db_session.get(Discussion, discussion.id) is None
        assert db_session.query(Reply).count() == 0
        assert db_session.query(ReplyVote).count() == 0

    def test_non_author_student_is_forbidden(
        self, db_session: Session, student, other_student, course
    ):
        discussion = create_discussion_factory(db_session, student, course)

        with pytest.raises(ForbiddenError):
            DiscussionService(db_session).delete_discussion(discussion.id, other_student)

        assert db_session.get(Discussion, discussion.id) is not None


class TestModeration:
    """Tests for toggle_pin and toggle_lock."""

    def test_student_cannot_pin(self, db_session: Session, student, course):
        discussion = create_discussion_factory(db_session, student, course)

        with pytest.raises(ForbiddenError):
            DiscussionService(db_session).toggle_pin(discussion.id, student)

    def test_instructor_toggles_pin_and_lock(
        self, db_session: Session, student, instructor, course
    ):
        discussion = create_discussion_factory(db_session, student, course)
        service = DiscussionService(db_session)

        assert service.toggle_pin(discussion.id, instructor).is_pinned is True
        assert service.toggle_pin(discussion.id, instructor).is_pinned is False
        assert service.toggle_lock(discussion.id, instructor).is_locked is True

    def test_missing_discussion(self, db_session: Session, instructor):
        with pytest.raises(NotFoundError):
            DiscussionService(db_session).toggle_lock(uuid.uuid4(), instructor)


class TestListDiscussions:
    """Tests for list_discussions method."""

    def test_recent_puts_pinned_first_then_latest_activity(
        self, db_session: Session, student, course
    ):
        now = datetime(2026, 1, 10, 12, 0, 0)
        old_pinned = create_discussion_factory(
            db_session, student, course, title="Old pinned",
            last_activity=now - timedelta(days=30), is_pinned=True,
        )
        new_pinned = create_discussion_factory(
            db_session, student, course, title="New pinned",
            last_activity=now - timedelta(days=2), is_pinned=True,
        )
        fresh = create_discussion_factory(
            db_session, student, course, title="Fresh", last_activity=now
        )
        stale = create_discussion_factory(
            db_session, student, course, title="Stale", last_activity=now - timedelta(days=5)
        )

        result = DiscussionService(db_session).list_discussions(
            DiscussionFilters(), sort=DiscussionSort.RECENT
        )

        assert [d.id for d in result.discussions] == [
            new_pinned.id,
            old_pinned.id,
            fresh.id,
            stale.id,
        ]

    def test_sort_by_replies_and_views(self, db_session: Session, student, course):
        busy = create_discussion_factory(db_session, student, course, replies_count=7, views=1)
        popular = create_discussion_factory(db_session, student, course, replies_count=1, views=90)
        service = DiscussionService(db_session)

        by_replies = service.list_discussions(DiscussionFilters(), sort=DiscussionSort.REPLIES)
        by_views = service.list_discussions(DiscussionFilters(), sort=DiscussionSort.VIEWS)

        assert by_replies.discussions[0].id == busy.id
        assert by_views.discussions[0].id == popular.id

    def test_filters(self, db_session: Session, student, course):
        other_course = create_course_factory(db_session, title="Design 101")
        loops = create_discussion_factory(
            db_session, student, course, title="Infinite loops", tags=["python", "loops"],
            category="Programming",
        )
        create_discussion_factory(
            db_session, student, other_course, title="Colour theory", tags=["css"],
            category="Web Design", is_answered=True,
        )
        service = DiscussionService(db_session)

        by_search = service.list_discussions(DiscussionFilters(search="INFINITE"))
        by_tag_search = service.list_discussions(DiscussionFilters(search="loop"))
        by_category = service.list_discussions(DiscussionFilters(category="Web Design"))
        by_course = service.list_discussions(DiscussionFilters(course_id=course.id))
        by_tags = service.list_discussions(DiscussionFilters(tags=["css", "nothing"]))
        unanswered = service.list_discussions(DiscussionFilters(unanswered=True))

        assert [d.id for d in by_search.discussions] == [loops.id]
        assert [d.id for d in by_tag_search.discussions] == [loops.id]
        assert [d.title for d in by_category.discussions] == ["Colour theory"]
        assert [d.id for d in by_course.discussions] == [loops.id]
        assert [d.title for d in by_tags.discussions] == ["Colour theory"]
        assert [d.id for d in unanswered.discussions] == [loops.id]

    def test_search_treats_wildcards_literally(self, db_session: Session, student, course):
        create_discussion_factory(db_session, student, course, title="100% coverage")
        create_discussion_factory(db_session, student, course, title="1000 tests")

        result = DiscussionService(db_session).list_discussions(DiscussionFilters(search="100%"))

        assert [d.title for d in result.discussions] == ["100% coverage"]

    def test_pagination(self, db_session: Session, student, course):
        for _ in range(5):
            create_discussion_factory(db_session, student, course)

        result = DiscussionService(db_session).list_discussions(
            DiscussionFilters(), page=2, limit=2
        )

        assert len(result.discussions) == 2
        assert result.pagination.current == 2
        assert result.pagination.pages == 3
        assert result.pagination.total == 5
        assert result.pagination.limit == 2


class TestStatsAndTags:
    """Tests for get_stats, get_popular_tags and get_categories."""

    def test_stats(self, db_session: Session, student, course):
        create_discussion_factory(
            db_session, student, course, category="Programming", tags=["python"], is_answered=True
        )
        create_discussion_factory(
            db_session, student, course, category="Programming", tags=["python", "loops"]
        )
        create_discussion_factory(db_session, student, course, category="Career", tags=["jobs"])

        stats = DiscussionService(db_session).get_stats()

        assert stats.total == 3
        assert stats.answered == 1
        assert stats.unanswered == 2
        assert stats.by_category[0].category == "Programming"
        assert stats.by_category[0].count == 2
        assert stats.popular_tags[0].tag == "python"
        assert stats.popular_tags[0].count == 2

    def test_popular_tags_most_used_first(self, db_session: Session, student, course):
        create_discussion_factory(db_session, student, course, tags=["sql", "python"])
        create_discussion_factory(db_session, student, course, tags=["python"])

        tags = DiscussionService(db_session).get_popular_tags()

        assert tags == ["python", "sql"]

    def test_categories_are_fixed(self):
        assert DiscussionService.get_categories() == [
            "Programming",
            "Web Design",
            "Career",
            "General",
        ]
