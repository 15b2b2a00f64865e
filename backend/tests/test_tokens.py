"""
Inkpost Backend: Token Service Unit Tests
===========================================

What we test:
    ✅ Issued tokens verify and carry username, id, iat, exp
    ✅ Expired, tampered, foreign-secret and claim-less tokens are rejected
    ✅ Issuing without a secret is a SigningError
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.exceptions import InvalidTokenError, SigningError
from app.security.tokens import SessionClaims, TokenService

SECRET = "unit-test-secret-0123456789abcdef"


class TestTokenIssueAndVerify:

    def setup_method(self):
        self.tokens = TokenService(secret=SECRET, expires_minutes=60)
        self.user_id = uuid.uuid4()

    def test_round_trip(self):
        token = self.tokens.issue(SessionClaims(username="alice", user_id=self.user_id))

        claims = self.tokens.verify(token)

        assert claims.username == "alice"
        assert claims.user_id == self.user_id
        assert claims.expires_at - claims.issued_at == timedelta(minutes=60)

    def test_payload_layout(self):
        token = self.tokens.issue(SessionClaims(username="alice", user_id=self.user_id))

        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert set(payload) == {"username", "id", "iat", "exp"}
        assert payload["id"] == str(self.user_id)

    def test_to_public_matches_token_claims(self):
        token = self.tokens.issue(SessionClaims(username="alice", user_id=self.user_id))
        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        public = self.tokens.verify(token).to_public()

        assert public == {
            "username": "alice",
            "id": str(self.user_id),
            "iat": payload["iat"],
            "exp": payload["exp"],
        }

    def test_lifetime_seconds(self):
        assert self.tokens.lifetime_seconds == 3600


class TestTokenRejection:

    def setup_method(self):
        self.tokens = TokenService(secret=SECRET)
        self.claims = SessionClaims(username="alice", user_id=uuid.uuid4())

    def test_expired_token(self):
        expired = TokenService(secret=SECRET, expires_minutes=-1).issue(self.claims)

        with pytest.raises(InvalidTokenError) as exc_info:
            self.tokens.verify(expired)
        assert exc_info.value.reason == "expired"

    def test_foreign_secret(self):
        forged = TokenService(secret="another-secret-0123456789abcdef-xyz").issue(self.claims)

        with pytest.raises(InvalidTokenError):
            self.tokens.verify(forged)

    def test_tampered_signature(self):
        header, payload, signature = self.tokens.issue(self.claims).split(".")
        replacement = "BBBB" if signature.endswith("AAAA") else "AAAA"
        tampered = ".".join([header, payload, signature[:-4] + replacement])

        with pytest.raises(InvalidTokenError):
            self.tokens.verify(tampered)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, token):
        with pytest.raises(InvalidTokenError):
            self.tokens.verify(token)

    def test_missing_claim(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"username": "alice", "iat": now, "exp": now + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            self.tokens.verify(token)

    def test_malformed_id_claim(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"username": "alice", "id": "42", "iat": now, "exp": now + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            self.tokens.verify(token)
        assert exc_info.value.reason == "malformed id claim"

    def test_unsigned_token_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"username": "alice", "id": str(uuid.uuid4()), "iat": now, "exp": now + timedelta(minutes=5)},
            "",
            algorithm="none",
        )
        with pytest.raises(InvalidTokenError):
            self.tokens.verify(token)


class TestSigningFailure:

    def test_missing_secret(self):
        tokens = TokenService(secret="")
        with pytest.raises(SigningError):
            tokens.issue(SessionClaims(username="alice", user_id=uuid.uuid4()))

    def test_missing_secret_cannot_verify(self):
        with pytest.raises(InvalidTokenError):
            TokenService(secret="").verify("a.b.c")
