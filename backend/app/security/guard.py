"""
Inkpost Backend: Authorization Guard
======================================

What:  Gate in front of every author-scoped endpoint. Resolves the session
       token carried by the request into a verified identity or rejects the
       request before the handler runs.
How:   resolve_identity() is the decision itself (token in, claims or
       rejection out). require_identity() is the FastAPI dependency that
       pulls the token off the request and stores the claims on
       request.state.identity.

Decision table:
    no token / empty token      → UnauthenticatedError (401)
    token fails verification    → ForbiddenError (403)
    token verifies              → SessionClaims passed downstream

Token sources, in order:
    1. the session cookie (COOKIE_NAME, default "token")
    2. an "Authorization: Bearer <token>" header
"""

import logging
from typing import Optional

from fastapi import Depends, Request

from app.config import settings
from app.dependencies import get_token_service
from app.exceptions import ForbiddenError, InvalidTokenError, UnauthenticatedError
from app.middleware.request_id import request_id_var
from app.security.tokens import SessionClaims, TokenService

logger = logging.getLogger(__name__)


def resolve_identity(token: Optional[str], token_service: TokenService) -> SessionClaims:
    """
    Turn a carried token into a verified identity.

    Raises:
        UnauthenticatedError: no token was presented
        ForbiddenError: the token is malformed, forged or expired
    """
    if not token:
        raise UnauthenticatedError()
    try:
        return token_service.verify(token)
    except InvalidTokenError as e:
        logger.info(
            "[%s] Rejected session token: %s",
            request_id_var.get(""),
            e.reason,
        )
        raise ForbiddenError(context={"reason": e.reason})


def extract_token(request: Request) -> Optional[str]:
    """Read the session token from the cookie, falling back to a Bearer header."""
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def require_identity(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> SessionClaims:
    """
    FastAPI dependency for endpoints that need an authenticated user.

    Usage:
        @router.post("/post")
        async def create_post(identity: SessionClaims = Depends(require_identity)):
            ...
    """
    identity = resolve_identity(extract_token(request), token_service)
    request.state.identity = identity
    return identity
