"""Create users and posts tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates `users` (credential store) and `posts` (author-owned posts).
How:   UUID primary keys generated by the application, TIMESTAMP WITH TIME ZONE,
       unique username/email, posts.author_id → users.id.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Opaque user identifier"),
        sa.Column(
            "username",
            sa.String(64),
            nullable=False,
            comment="Login name, shown as the author of posts",
        ),
        sa.Column(
            "email",
            sa.String(255),
            nullable=False,
            comment="Contact address; one account per email",
        ),
        sa.Column(
            "password_hash",
            sa.String(128),
            nullable=False,
            comment="Salted bcrypt hash of the password",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the user registered (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False, comment="Opaque post identifier"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("summary", sa.String(1000), nullable=False, server_default=sa.text("''")),
        sa.Column("content", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "cover",
            sa.String(255),
            nullable=False,
            server_default=sa.text("''"),
            comment="Stored cover image reference; empty when absent",
        ),
        sa.Column(
            "author_id",
            sa.Uuid(),
            nullable=False,
            comment="Author of the post; immutable after creation",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the post was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the post was last modified (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
    )

    op.create_index("ix_posts_author_id", "posts", ["author_id"])
    # The home page query is ORDER BY created_at DESC LIMIT 20
    op.create_index(
        "idx_posts_created_at",
        "posts",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_index("ix_posts_author_id", table_name="posts")
    op.drop_table("posts")
    op.drop_table("users")
