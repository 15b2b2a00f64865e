"""
Inkpost Backend: Rate Limiting Middleware
===========================================

What:  Per-IP sliding window rate limiter.
How:   Each client IP owns a deque of request timestamps, oldest first.
       Expired timestamps are popped from the left on every request; a
       client whose deque is full gets 429 with a Retry-After header.
Who:   Outermost middleware, so rejected requests cost nothing downstream.

Not counted:
    - /health, the OpenAPI schema and the docs pages
    - cover images under /uploads/ (a home page with 20 covers would
      otherwise spend 20 requests per visit)
    - CORS preflight (OPTIONS) requests

State lives in the process, so each uvicorn worker enforces its own limit.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

UNMETERED_PATHS = frozenset({"/health", "/openapi.json", "/docs", "/redoc"})
UNMETERED_PREFIXES = ("/uploads/", "/docs/")

# Idle clients are dropped after this many metered requests
SWEEP_EVERY = 1000


def is_metered(request: Request) -> bool:
    if request.method == "OPTIONS":
        return False
    path = request.url.path
    return path not in UNMETERED_PATHS and not path.startswith(UNMETERED_PREFIXES)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: requests allowed per window (default RATE_LIMIT_REQUESTS)
        window_seconds: window length (default RATE_LIMIT_WINDOW)
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._hits: Dict[str, Deque[float]] = {}
        self._until_sweep = SWEEP_EVERY

    def _reject(self, client_ip: str, hits: Deque[float], now: float) -> Response:
        retry_after = int(hits[0] + self.window_seconds - now) + 1
        logger.warning(
            "Rate limit exceeded for IP %s: %d requests in %ds window",
            client_ip,
            len(hits),
            self.window_seconds,
        )
        # Exceptions raised here would bypass the app's handlers
        error = RateLimitExceededError(retry_after=retry_after)
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": error.message,
                "details": {"retry_after": retry_after},
            },
            headers={"Retry-After": str(retry_after)},
        )

    def _sweep(self, cutoff: float) -> None:
        before = len(self._hits)
        self._hits = {ip: hits for ip, hits in self._hits.items() if hits and hits[-1] > cutoff}
        logger.debug("Rate limiter sweep: %d -> %d tracked clients", before, len(self._hits))

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not is_metered(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        cutoff = now - self.window_seconds

        hits = self._hits.setdefault(client_ip, deque())
        while hits and hits[0] <= cutoff:
            hits.popleft()

        if len(hits) >= self.max_requests:
            return self._reject(client_ip, hits, now)
        hits.append(now)

        self._until_sweep -= 1
        if self._until_sweep == 0:
            self._until_sweep = SWEEP_EVERY
            self._sweep(cutoff)

        return await call_next(request)
