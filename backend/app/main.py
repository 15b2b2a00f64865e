"""
Inkpost Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app) and by the
       test suite, which builds a fresh app per test.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌────────────┐ ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐│
    │  │ Rate Limit │→│ Req ID │→│ Logging │→│ GZip │→│ CORS ││
    │  └────────────┘ └────────┘ └─────────┘ └──────┘ └──────┘│
    │                                                         │
    │  Routes:                                                │
    │  /register /login /profile /logout      (auth)          │
    │  /post /post/{id}                       (posts)         │
    │  /uploads/{path}                        (cover files)   │
    │  /health                                                │
    │                                                         │
    │  Exception Handlers:                                    │
    │  InkpostError subclasses → 400/401/403/404/429/500      │
    │  anything else → 500 internal_server_error              │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the cover storage directory

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, Optional, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    DatabaseError,
    DuplicateKeyError,
    FileStorageError,
    ForbiddenError,
    InkpostError,
    InvalidCredentialsError,
    NotAuthorError,
    NotFoundError,
    RateLimitExceededError,
    SigningError,
    UnauthenticatedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, health, posts, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    # multipart logs every parsed field at DEBUG
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Inkpost Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Server keeps running so /health and public reads stay available;
        # logins fail with 500 until JWT_SECRET is set
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Cover storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Inkpost Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Exception type → (HTTP status, machine-readable error code)
ERROR_STATUS: Dict[Type[InkpostError], tuple] = {
    ValidationError: (400, "validation_error"),
    DuplicateKeyError: (400, "duplicate_key"),
    InvalidCredentialsError: (400, "invalid_credentials"),
    UnauthenticatedError: (401, "unauthenticated"),
    ForbiddenError: (403, "forbidden"),
    NotAuthorError: (403, "not_author"),
    NotFoundError: (404, "not_found"),
    RateLimitExceededError: (429, "rate_limit_exceeded"),
}

# These are reported with a generic message; context is logged only
SERVER_ERRORS = (SigningError, DatabaseError, FileStorageError)

GENERIC_SERVER_MESSAGE = "An internal error occurred. Please try again later."


def _error_body(
    error: str,
    message: str,
    rid: str,
    details: Optional[dict] = None,
) -> dict:
    body = {"error": error, "message": message, "request_id": rid}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError          → 400 validation_error (details exposed)
        DuplicateKeyError        → 400 duplicate_key (details: field)
        InvalidCredentialsError  → 400 invalid_credentials
        UnauthenticatedError     → 401 unauthenticated
        ForbiddenError           → 403 forbidden
        NotAuthorError           → 403 not_author
        NotFoundError            → 404 not_found
        RateLimitExceededError   → 429 rate_limit_exceeded (+ Retry-After)
        SigningError, DatabaseError, FileStorageError → 500 server_error
        Exception (fallback)     → 500 internal_server_error

    Security: handlers never expose stack traces, file paths, SQL or token
    verification reasons in the response. Those go to the server log.
    """

    @app.exception_handler(InkpostError)
    async def handle_inkpost_error(request: Request, exc: InkpostError):
        rid = request_id_var.get("")

        if isinstance(exc, SERVER_ERRORS):
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
            return JSONResponse(
                status_code=500,
                content=_error_body("server_error", GENERIC_SERVER_MESSAGE, rid),
            )

        status_code, error = 500, "server_error"
        for exc_type in type(exc).__mro__:
            if exc_type in ERROR_STATUS:
                status_code, error = ERROR_STATUS[exc_type]
                break

        if status_code == 500:
            logger.error("[%s] Unmapped application error: %s", rid, exc.message)
            return JSONResponse(
                status_code=500,
                content=_error_body("server_error", GENERIC_SERVER_MESSAGE, rid),
            )

        details = None
        headers = None
        if isinstance(exc, (ValidationError, DuplicateKeyError)):
            details = exc.context
        elif isinstance(exc, RateLimitExceededError):
            details = {"retry_after": exc.retry_after}
            headers = {"Retry-After": str(exc.retry_after)}

        logger.info("[%s] %s %d: %s", rid, error, status_code, exc.message)
        return JSONResponse(
            status_code=status_code,
            content=_error_body(error, exc.message, rid, details),
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: full trace to the log, request ID to the client."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    Each call yields an independent app (own rate limiter state, own
    dependency_overrides), which the test suite relies on.
    """
    app = FastAPI(
        title="Inkpost API",
        description=(
            "Blog backend: account registration, cookie-based sessions, and "
            "posts with optional cover images that only their author may change."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RateLimit → RequestID → Logging → GZip → CORS → routes

    # Credentials are required for the session cookie, so origins must be
    # listed explicitly (no "*")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # Post lists carry full HTML content; small responses are left alone
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable
app = create_app()
