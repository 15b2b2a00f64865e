"""
Inkpost Backend: Auth Route Handlers
======================================

What:  POST /register, POST /login, GET /profile, POST /logout.
How:   Thin HTTP layer over AuthService. Login hands the signed token back as
       an HttpOnly cookie; logout overwrites it with an expired empty cookie.
Who:   Called by the frontend login/register pages and its header component,
       which asks /profile on load to find out who is signed in.

Cookie attributes (from Settings):
    name      COOKIE_NAME      (default "token")
    HttpOnly  always
    Secure    COOKIE_SECURE    (default true)
    SameSite  COOKIE_SAMESITE  (default "none", the frontend runs on another origin)
    Max-Age   token lifetime
"""

import logging

from fastapi import APIRouter, Depends, Response

from app.config import settings
from app.dependencies import get_auth_service, get_token_service
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.user import (
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    UserResponse,
)
from app.security.guard import require_identity
from app.security.tokens import SessionClaims, TokenService
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _cookie_attributes() -> dict:
    return {
        "path": "/",
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }


@router.post(
    "/register",
    response_model=UserResponse,
    responses={
        400: {"description": "Email or username already in use", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> UserResponse:
    user = await auth.register(
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Wrong credentials", "model": ErrorResponse},
        500: {"description": "Token could not be issued", "model": ErrorResponse},
    },
    summary="Sign in and receive the session cookie",
)
async def login(
    body: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    """
    On success the body carries {id, username} and the token travels only in
    the Set-Cookie header. A failed login sets no cookie.
    """
    user, token = await auth.login(username=body.username, password=body.password)
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=tokens.lifetime_seconds,
        **_cookie_attributes(),
    )
    return LoginResponse(id=user.id, username=user.username)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={
        401: {"description": "No session token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
    summary="Claims of the current session",
)
async def profile(
    identity: SessionClaims = Depends(require_identity),
    auth: AuthService = Depends(get_auth_service),
) -> ProfileResponse:
    return ProfileResponse(**auth.profile(identity))


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Clear the session cookie",
)
async def logout(response: Response) -> MessageResponse:
    # Token stays valid until it expires; only the client's copy is dropped
    response.delete_cookie(key=settings.cookie_name, **_cookie_attributes())
    return MessageResponse(message="ok")
