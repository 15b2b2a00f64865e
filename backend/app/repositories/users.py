"""
Inkpost Backend: SQLAlchemy Credential Store
==============================================

What:  UserRepository backed by the `users` table.
How:   Async SQLAlchemy session; one commit per write.
Who:   Built per request by app.dependencies.get_user_repository.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, DuplicateKeyError
from app.models.user import User
from app.repositories.base import UserRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUserRepository(UserRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create(self, username: str, email: str, password_hash: str) -> User:
        user = User(username=username, email=email, password_hash=password_hash)
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration; the pre-checks in
            # AuthService cover the common case
            await self._session.rollback()
            field = "username" if "username" in str(e.orig).lower() else "email"
            logger.info("Registration collided on unique %s", field)
            raise DuplicateKeyError(field=field)
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error("Database error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})
        return user
