"""
Inkpost Backend: Session Token Issuer/Verifier
================================================

What:  Mints and validates signed, time-scoped identity tokens (JWT).
How:   PyJWT with a shared HMAC secret. The token carries the username, the
       user id and the issued-at/expiry timestamps. Nothing is stored
       server-side; the signing secret is the only server state.
Who:   AuthService issues tokens at login; the authorization guard verifies
       them on every protected request.

Claims layout:
    {
        "username": "alice",
        "id": "6f1c...-uuid",
        "iat": 1700000000,
        "exp": 1700604800
    }

A token cannot be revoked before its natural expiry; logout only clears the
client's cookie.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pydantic import BaseModel, ConfigDict, Field

from app.exceptions import InvalidTokenError, SigningError

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["username", "id", "iat", "exp"]


class SessionClaims(BaseModel):
    """Identity asserted by a session token."""

    model_config = ConfigDict(frozen=True)

    username: str
    user_id: uuid.UUID
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    def to_public(self) -> Dict[str, Any]:
        """Claims as returned by GET /profile (same keys as inside the token)."""
        return {
            "username": self.username,
            "id": str(self.user_id),
            "iat": int(self.issued_at.timestamp()) if self.issued_at else None,
            "exp": int(self.expires_at.timestamp()) if self.expires_at else None,
        }


class TokenService:
    """
    Issues and verifies session tokens.

    Args:
        secret: HMAC signing secret
        algorithm: HS256, HS384 or HS512
        expires_minutes: token lifetime
        leeway_seconds: clock skew tolerated when checking exp/iat
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_minutes: int = 10_080,
        leeway_seconds: int = 0,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes
        self.leeway_seconds = leeway_seconds

    @property
    def lifetime_seconds(self) -> int:
        return self.expires_minutes * 60

    def issue(self, claims: SessionClaims) -> str:
        """
        Sign a token for the given identity.

        Raises:
            SigningError: no secret configured or the JWT library failed
        """
        if not self.secret:
            raise SigningError(context={"reason": "signing secret is not configured"})

        now = datetime.now(timezone.utc)
        payload = {
            "username": claims.username,
            "id": str(claims.user_id),
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        try:
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as e:
            logger.error("Token signing failed: %s", type(e).__name__)
            raise SigningError(context={"error": type(e).__name__})

    def verify(self, token: str) -> SessionClaims:
        """
        Validate a token and return the identity it carries.

        Raises:
            InvalidTokenError: bad signature, malformed structure, missing or
                               malformed claims, or expired token
        """
        if not self.secret:
            raise InvalidTokenError(reason="verification secret is not configured")

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
                leeway=self.leeway_seconds,
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError(reason="expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(reason=type(e).__name__)

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError(reason="missing username claim")
        try:
            user_id = uuid.UUID(str(payload["id"]))
        except ValueError:
            raise InvalidTokenError(reason="malformed id claim")

        return SessionClaims(
            username=username,
            user_id=user_id,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
