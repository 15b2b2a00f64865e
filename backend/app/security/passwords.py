"""
Inkpost Backend: Password Hashing
===================================

What:  Salted bcrypt hashing and verification of user passwords.
How:   Wraps the `bcrypt` library. Every hash carries its own random salt and
       cost factor, so verification needs nothing but the stored hash.
Who:   Used by AuthService at registration (hash) and login (verify).

bcrypt only looks at the first 72 bytes of a password and current releases
refuse longer input outright. hash() rejects such passwords with a
ValidationError; verify() treats them as a mismatch.
"""

import asyncio
import logging

import bcrypt

from app.exceptions import ValidationError

logger = logging.getLogger(__name__)

BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """
    bcrypt password hasher with a configurable cost factor.

    Hashing is CPU-bound (tens of milliseconds at cost 10), so the async
    helpers run it in a worker thread instead of on the event loop.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes long",
                field="password",
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison of a plaintext password with a stored hash."""
        encoded = password.encode("utf-8")
        if not password_hash or len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("ascii"))
        except ValueError:
            # Stored value is not a bcrypt hash (corrupt row or legacy data)
            logger.warning("Stored password hash could not be parsed")
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify, password, password_hash)
