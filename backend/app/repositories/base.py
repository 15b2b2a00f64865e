"""
Inkpost Backend: Repository Interfaces
========================================

What:  Abstract contracts for the credential store and the post repository.
How:   Concrete implementations inherit from these classes; the services only
       depend on the abstract methods.
Who:   Implemented by SqlAlchemyUserRepository / SqlAlchemyPostRepository;
       consumed by AuthService and PostService.

Contract notes:
    - Lookups return None for a missing record; they never raise NotFoundError.
      Turning None into a 404 is the service layer's job.
    - Every write is atomic on its own (one record per call).
    - Posts returned by get() and list_recent() have `author` loaded so the
      author's username can be rendered.
"""

import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.post import Post
from app.models.user import User


class UserRepository(ABC):
    """Credential store: persists user identity and password hash."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[User]:
        ...

    @abstractmethod
    async def create(self, username: str, email: str, password_hash: str) -> User:
        """
        Persist a new user.

        Raises:
            DuplicateKeyError: email or username collides with an existing user
        """
        ...


class PostRepository(ABC):
    """CRUD persistence for posts."""

    @abstractmethod
    async def create(
        self,
        author_id: uuid.UUID,
        title: str,
        summary: str,
        content: str,
        cover: str = "",
    ) -> Post:
        ...

    @abstractmethod
    async def find_by_id(self, post_id: uuid.UUID) -> Optional[Post]:
        """Fetch a post without resolving its author."""
        ...

    @abstractmethod
    async def get(self, post_id: uuid.UUID) -> Optional[Post]:
        """Fetch a post with its author loaded."""
        ...

    @abstractmethod
    async def update(
        self,
        post: Post,
        title: str,
        summary: str,
        content: str,
        cover: Optional[str] = None,
    ) -> Post:
        """
        Replace title, summary and content; replace cover only when a new one
        is given (None keeps the existing cover).
        """
        ...

    @abstractmethod
    async def delete(self, post: Post) -> None:
        ...

    @abstractmethod
    async def list_recent(self, limit: int = 20) -> List[Post]:
        """Newest posts first, authors loaded, at most `limit` entries."""
        ...
