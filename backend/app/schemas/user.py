"""
Inkpost Backend: User & Session Schemas
=========================================

What:  Pydantic models for the registration/login API contract.
How:   FastAPI validates request bodies against these models and serializes
       responses through them. The password hash never appears in any
       response model.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _normalize_username(v: str) -> str:
    """Usernames are compared after trimming surrounding whitespace."""
    v = v.strip()
    if not v:
        raise ValueError("Username must not be blank")
    return v


class RegisterRequest(BaseModel):
    """Body of POST /register."""

    username: str = Field(min_length=1, max_length=64, description="Unique login name")
    email: str = Field(min_length=3, max_length=255, description="Unique email address")
    password: str = Field(min_length=1, max_length=72, description="Plaintext password")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _normalize_username(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain:
            raise ValueError("Email must look like name@domain")
        return v


class LoginRequest(BaseModel):
    """Body of POST /login."""

    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _normalize_username(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Created user record returned by POST /register."""

    id: uuid.UUID
    username: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Returned by POST /login alongside the session cookie."""

    id: uuid.UUID
    username: str


class ProfileResponse(BaseModel):
    """Decoded identity claims returned by GET /profile."""

    username: str
    id: str
    iat: Optional[int] = Field(default=None, description="Issued-at (unix seconds)")
    exp: Optional[int] = Field(default=None, description="Expiry (unix seconds)")
