"""
Inkpost Backend: Auth Service
===============================

What:  Registration, login and profile logic.
How:   Composes the credential store (UserRepository), the password hasher
       and the token service. All three are handed in at construction.
Who:   Called by the /register, /login and /profile route handlers.

Login Flow:
    ┌──────────┐    ┌──────────────────┐    ┌───────────────┐    ┌───────────┐
    │  /login  │───▶│ find_by_username │───▶│ bcrypt verify │───▶│ issue JWT │
    └──────────┘    └──────────────────┘    └───────────────┘    └───────────┘

    Unknown user and wrong password fail identically (InvalidCredentialsError),
    and in both cases no token is issued.
"""

import logging
from typing import Tuple

from app.exceptions import DuplicateKeyError, InvalidCredentialsError
from app.models.user import User
from app.repositories.base import UserRepository
from app.security.passwords import PasswordHasher
from app.security.tokens import SessionClaims, TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Responsibilities:
        - register(): reject duplicates, hash the password, create the user
        - login(): check credentials, issue a session token
        - profile(): echo back the verified claims
    """

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ):
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, username: str, email: str, password: str) -> User:
        """
        Create a new account.

        Raises:
            DuplicateKeyError: email or username already in use; nothing is written
            ValidationError: password longer than bcrypt accepts
        """
        if await self.users.find_by_email(email) is not None:
            logger.info("Registration rejected: email already registered")
            raise DuplicateKeyError(field="email")
        if await self.users.find_by_username(username) is not None:
            logger.info("Registration rejected: username '%s' already taken", username)
            raise DuplicateKeyError(field="username")

        password_hash = await self.hasher.hash_async(password)
        user = await self.users.create(
            username=username,
            email=email,
            password_hash=password_hash,
        )
        logger.info("User registered: %s (%s)", user.id, user.username)
        return user

    async def login(self, username: str, password: str) -> Tuple[User, str]:
        """
        Verify credentials and issue a session token.

        Returns:
            (user, token)
        Raises:
            InvalidCredentialsError: unknown username or wrong password
            SigningError: token could not be signed
        """
        user = await self.users.find_by_username(username)
        if user is None or not user.password_hash:
            logger.info("Login failed for '%s': unknown user", username)
            raise InvalidCredentialsError()

        if not await self.hasher.verify_async(password, user.password_hash):
            logger.info("Login failed for '%s': wrong password", username)
            raise InvalidCredentialsError()

        token = self.tokens.issue(SessionClaims(username=user.username, user_id=user.id))
        logger.info("User logged in: %s", user.id)
        return user, token

    def profile(self, identity: SessionClaims) -> dict:
        return identity.to_public()
