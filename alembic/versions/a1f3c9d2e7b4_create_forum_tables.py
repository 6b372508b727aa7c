"""Create users, courses, lectures and forum tables

Revision ID: a1f3c9d2e7b4
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "a1f3c9d2e7b4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("photo_url", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"])
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "courses",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_courses_id"), "courses", ["id"])

    op.create_table(
        "lectures",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_lectures_id"), "lectures", ["id"])
    op.create_index(op.f("ix_lectures_course_id"), "lectures", ["course_id"])

    op.create_table(
        "discussions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("course_id", sa.Uuid(), nullable=False),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_answered", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "has_instructor_reply", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_activity", sa.DateTime(), nullable=False),
        sa.Column("replies_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_discussions_id"), "discussions", ["id"])
    op.create_index(op.f("ix_discussions_slug"), "discussions", ["slug"], unique=True)
    op.create_index("ix_discussions_category_created", "discussions", ["category", "created_at"])
    op.create_index("ix_discussions_author", "discussions", ["author_id"])
    op.create_index("ix_discussions_course", "discussions", ["course_id"])
    op.create_index(
        "ix_discussions_pinned_activity", "discussions", ["is_pinned", "last_activity"]
    )

    op.create_table(
        "discussion_tags",
        sa.Column("discussion_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["discussion_id"], ["discussions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("discussion_id", "name"),
    )
    op.create_index("ix_discussion_tags_name", "discussion_tags", ["name"])

    op.create_table(
        "replies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=False),
        sa.Column("discussion_id", sa.Uuid(), nullable=False),
        sa.Column("parent_reply_id", sa.Uuid(), nullable=True),
        sa.Column(
            "is_instructor_reply", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "is_accepted_answer", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("is_edited", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("edited_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["discussion_id"], ["discussions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_reply_id"], ["replies.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_replies_id"), "replies", ["id"])
    op.create_index(
        "ix_replies_discussion_parent", "replies", ["discussion_id", "parent_reply_id"]
    )
    op.create_index("ix_replies_author", "replies", ["author_id"])
    op.create_index("ix_replies_parent", "replies", ["parent_reply_id"])

    op.create_table(
        "reply_votes",
        sa.Column("reply_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("vote_type", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["reply_id"], ["replies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("reply_id", "user_id"),
    )
    op.create_index("ix_reply_votes_user", "reply_votes", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_reply_votes_user", table_name="reply_votes")
    op.drop_table("reply_votes")
    op.drop_index("ix_replies_parent", table_name="replies")
    op.drop_index("ix_replies_author", table_name="replies")
    op.drop_index("ix_replies_discussion_parent", table_name="replies")
    op.drop_index(op.f("ix_replies_id"), table_name="replies")
    op.drop_table("replies")
    op.drop_index("ix_discussion_tags_name", table_name="discussion_tags")
    op.drop_table("discussion_tags")
    op.drop_index("ix_discussions_pinned_activity", table_name="discussions")
    op.drop_index("ix_discussions_course", table_name="discussions")
    op.drop_index("ix_discussions_author", table_name="discussions")
    op.drop_index("ix_discussions_category_created", table_name="discussions")
    op.drop_index(op.f("ix_discussions_slug"), table_name="discussions")
    op.drop_index(op.f("ix_discussions_id"), table_name="discussions")
    op.drop_table("discussions")
    op.drop_index(op.f("ix_lectures_course_id"), table_name="lectures")
    op.drop_index(op.f("ix_lectures_id"), table_name="lectures")
    op.drop_table("lectures")
    op.drop_index(op.f("ix_courses_id"), table_name="courses")
    op.drop_table("courses")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
