"""Create users and stories tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Initial schema: `users` (accounts) and `stories` (travel entries
       owned by a user).
How:   PostgreSQL UUID keys generated server side, TIMESTAMP WITH TIME ZONE,
       JSONB for the visited-location list.

Deleting a user cascades to their stories at the database level.
Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash; the plaintext is never stored",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Unique index doubles as the login lookup path
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "stories",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("story", sa.Text(), nullable=False),
        sa.Column(
            "visited_location",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "visited_location_text",
            sa.Text(),
            nullable=False,
            server_default="",
            comment="Place names of visited_location, one per line, for search",
        ),
        sa.Column("image_url", sa.String(2048), nullable=False),
        sa.Column("visited_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column(
            "is_favourite",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every story query is scoped to one owner
    op.create_index("idx_stories_user_id", "stories", ["user_id"])
    op.create_index(
        "idx_stories_user_visited_date",
        "stories",
        ["user_id", "visited_date"],
    )


def downgrade() -> None:
    op.drop_index("idx_stories_user_visited_date", table_name="stories")
    op.drop_index("idx_stories_user_id", table_name="stories")
    op.drop_table("stories")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
