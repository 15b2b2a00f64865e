"""
Inkpost Backend: Post SQLAlchemy Model
========================================

What:  ORM model representing the `posts` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by SqlAlchemyPostRepository for CRUD operations.

Table Design:
    - cover: reference returned by the asset storage ("uploads/<name>.<ext>"),
      empty string when the post has no cover image
    - author_id: set once at creation, never reassigned
    - created_at: UTC; the list endpoint orders by it, newest first

    Index on created_at DESC serves the "recent posts" listing.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.user import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Post(Base):
    """
    A blog post owned by exactly one author.

    Lifecycle:
        1. Created by an authenticated user (author_id = acting user)
        2. Title/summary/content/cover updated in place by the author only
        3. Deleted by the author only, cover file removed first

    Query Patterns:
        - Recent posts: ORDER BY created_at DESC LIMIT 20, author joined
        - Single post: WHERE id = :uuid, author joined
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque post identifier",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    summary: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    cover: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Stored cover image reference; empty when absent",
    )

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
        comment="Author of the post; immutable after creation",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        comment="When the post was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        comment="When the post was last modified (UTC)",
    )

    # lazy="raise": async sessions cannot lazy-load, so every query that needs
    # the author must join it explicitly (see SqlAlchemyPostRepository)
    author: Mapped[User] = relationship(User, lazy="raise")

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, author_id={self.author_id}, "
            f"created_at='{self.created_at}')>"
        )


# "Recent posts" listing: ORDER BY created_at DESC
Index("idx_posts_created_at", Post.created_at.desc())
