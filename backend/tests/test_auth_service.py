"""
Inkpost Backend: Auth Service Unit Tests
==========================================

What we test:
    ✅ Register hashes the password and stores the user
    ✅ Duplicate email / username rejected before anything is written
    ✅ Login issues a token only for correct credentials
    ✅ Profile echoes the verified claims
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.exceptions import DuplicateKeyError, InvalidCredentialsError
from app.repositories.base import UserRepository
from app.security.passwords import PasswordHasher
from app.security.tokens import SessionClaims, TokenService
from app.services.auth_service import AuthService

SECRET = "auth-service-secret-0123456789abcdef"


def make_user(username="alice", password_hash="$2b$04$stored"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@example.com",
        password_hash=password_hash,
        created_at=datetime.now(timezone.utc),
    )


class TestRegister:

    def setup_method(self):
        self.users = MagicMock(spec=UserRepository)
        self.users.find_by_email = AsyncMock(return_value=None)
        self.users.find_by_username = AsyncMock(return_value=None)
        self.users.create = AsyncMock(side_effect=lambda **kw: make_user(kw["username"], kw["password_hash"]))
        self.hasher = PasswordHasher(rounds=4)
        self.service = AuthService(users=self.users, hasher=self.hasher, tokens=TokenService(secret=SECRET))

    @pytest.mark.asyncio
    async def test_register_stores_hash(self):
        user = await self.service.register("alice", "alice@example.com", "correct horse")

        kwargs = self.users.create.await_args.kwargs
        assert kwargs["username"] == "alice"
        assert kwargs["email"] == "alice@example.com"
        assert kwargs["password_hash"] != "correct horse"
        assert self.hasher.verify("correct horse", kwargs["password_hash"])
        assert user.username == "alice"

    @pytest.mark.asyncio
    async def test_duplicate_email(self):
        self.users.find_by_email.return_value = make_user()

        with pytest.raises(DuplicateKeyError) as exc_info:
            await self.service.register("someone", "alice@example.com", "pw")

        assert exc_info.value.field == "email"
        self.users.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_username(self):
        self.users.find_by_username.return_value = make_user()

        with pytest.raises(DuplicateKeyError) as exc_info:
            await self.service.register("alice", "other@example.com", "pw")

        assert exc_info.value.field == "username"
        self.users.create.assert_not_awaited()


class TestLogin:

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)
        self.tokens = TokenService(secret=SECRET)
        self.user = make_user(password_hash=self.hasher.hash("correct horse"))
        self.users = MagicMock(spec=UserRepository)
        self.users.find_by_username = AsyncMock(return_value=self.user)
        self.service = AuthService(users=self.users, hasher=self.hasher, tokens=self.tokens)

    @pytest.mark.asyncio
    async def test_login_success(self):
        user, token = await self.service.login("alice", "correct horse")

        assert user is self.user
        claims = self.tokens.verify(token)
        assert claims.username == "alice"
        assert claims.user_id == self.user.id

    @pytest.mark.asyncio
    async def test_wrong_password(self):
        with pytest.raises(InvalidCredentialsError):
            await self.service.login("alice", "wrong horse")

    @pytest.mark.asyncio
    async def test_unknown_user(self):
        self.users.find_by_username.return_value = None

        with pytest.raises(InvalidCredentialsError) as exc_info:
            await self.service.login("nobody", "correct horse")

        # Same message as a wrong password
        assert exc_info.value.message == "Wrong credentials"

    @pytest.mark.asyncio
    async def test_no_token_issued_on_failure(self):
        self.service.tokens = MagicMock(spec=TokenService)

        with pytest.raises(InvalidCredentialsError):
            await self.service.login("alice", "wrong horse")

        self.service.tokens.issue.assert_not_called()


class TestProfile:

    def test_profile_returns_claims(self):
        tokens = TokenService(secret=SECRET)
        service = AuthService(users=MagicMock(spec=UserRepository), hasher=PasswordHasher(rounds=4), tokens=tokens)
        user_id = uuid.uuid4()
        identity = tokens.verify(tokens.issue(SessionClaims(username="alice", user_id=user_id)))

        profile = service.profile(identity)

        assert profile["username"] == "alice"
        assert profile["id"] == str(user_id)
        assert profile["exp"] > profile["iat"]
