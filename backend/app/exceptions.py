"""
Inkpost Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the mapped status code.
Who:   Raised by the security layer, services and repositories.
When:  During request processing when an expected failure occurs.

Exception Hierarchy:
    InkpostError (base)
    ├── ValidationError            → 400 Bad Request
    ├── DuplicateKeyError          → 400 Bad Request (registration collision)
    ├── InvalidCredentialsError    → 400 Bad Request (login rejected)
    ├── UnauthenticatedError       → 401 Unauthorized (no credential)
    ├── ForbiddenError             → 403 Forbidden (bad/expired credential)
    ├── NotAuthorError             → 403 Forbidden (valid credential, wrong owner)
    ├── NotFoundError              → 404 Not Found
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── SigningError               → 500 Internal Server Error
    ├── FileStorageError           → 500 Internal Server Error
    └── DatabaseError              → 500 Internal Server Error

    InvalidTokenError is raised by TokenService.verify(); the authorization
    guard translates it into ForbiddenError at the HTTP boundary.
"""

from typing import Any, Dict, Optional


class InkpostError(Exception):
    """
    Base exception for all Inkpost application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless the handler explicitly exposes it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(InkpostError):
    """
    Raised when client input fails a business rule.

    When:    Unsupported cover type, empty or oversized upload, password too long.
    HTTP:    400 Bad Request

    Schema-level problems (missing JSON fields, wrong types) are still
    reported by FastAPI as 422.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class DuplicateKeyError(InkpostError):
    """
    Raised when registration collides with an existing user.

    When:    Email already registered, or username already taken.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        field: str = "email",
        context: Optional[Dict[str, Any]] = None,
    ):
        labels = {"email": "Email is already registered", "username": "Username is already taken"}
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message=labels.get(field, f"{field} already exists"), context=ctx)
        self.field = field


class InvalidCredentialsError(InkpostError):
    """
    Raised when login fails.

    The same message is used for an unknown username and a wrong password,
    so the response does not reveal which usernames exist.
    HTTP:    400 Bad Request
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Wrong credentials", context=context)


class UnauthenticatedError(InkpostError):
    """
    Raised when a protected endpoint is called without a session token.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Token not provided",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(InkpostError):
    """
    Raised by TokenService.verify() for a token that cannot be trusted.

    When:    Signature mismatch, malformed structure, missing claims, expired.
    The `reason` is logged server-side only.
    """

    def __init__(
        self,
        reason: str = "invalid",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["reason"] = reason
        super().__init__(message="Invalid or expired token", context=ctx)
        self.reason = reason


class ForbiddenError(InkpostError):
    """
    Raised by the authorization guard when a presented token fails verification.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Invalid or expired token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotAuthorError(InkpostError):
    """
    Raised when an authenticated user tries to change someone else's post.

    When:    PUT /post or DELETE /post/{id} by a non-author.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not the author of this post",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(InkpostError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on a missing post id, or a missing cover file.
    HTTP:    404 Not Found

    Repositories return None for missing rows; services convert that None
    into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class SigningError(InkpostError):
    """
    Raised when a session token cannot be signed.

    When:    Missing signing secret or a signing library failure.
    HTTP:    500 Internal Server Error (fatal for the login request)
    """

    def __init__(
        self,
        message: str = "Could not issue a session token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(InkpostError):
    """
    Raised when cover file operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error

    File system paths go into `context` for the logs and never into the
    response body.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InkpostError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, unexpected constraint violation, etc.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; SQL details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(InkpostError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
