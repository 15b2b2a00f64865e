"""
Inkpost Backend: User SQLAlchemy Model
========================================

What:  ORM model representing the `users` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads it for migrations.
Who:   Used by SqlAlchemyUserRepository (credential store) and as the `author`
       relationship target of Post.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL behave alike
    - username and email are both UNIQUE: registration rejects a collision on
      either, and login looks users up by username
    - password_hash holds a bcrypt hash; the plaintext is never stored
    - rows are created at registration and never updated or deleted
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    """A registered author."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque user identifier",
    )

    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Login name, shown as the author of posts",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Contact address; one account per email",
    )

    # bcrypt output is 60 characters
    password_hash: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="Salted bcrypt hash of the password",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the user registered (UTC)",
    )

    def __repr__(self) -> str:
        # password_hash is deliberately left out of the repr
        return f"<User(id={self.id}, username='{self.username}')>"
