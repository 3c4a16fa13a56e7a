"""
TravelStory Backend - Rate Limiting Middleware
================================================

What:  Per-client sliding-window request limit.
Why:   Login and image upload are unauthenticated; this bounds password
       guessing and disk filling from a single address.
How:   Each client IP owns a deque of request times. Times older than the
       window fall off the left; a full deque means 429 with Retry-After.

State is in memory and per process. Several uvicorn workers each keep
their own windows.
"""

import logging
import time
from collections import deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from travelstory.config import settings
from travelstory.exceptions import RateLimitExceededError
from travelstory.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

UNLIMITED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def client_key(request: Request) -> str:
    # Behind a proxy this is the proxy unless uvicorn runs with --proxy-headers
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests: requests allowed per window (settings.rate_limit_requests)
        window:       window length in seconds (settings.rate_limit_window)
    """

    def __init__(self, app, max_requests: Optional[int] = None, window: Optional[int] = None):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self._hits: Dict[str, Deque[float]] = {}
        self._next_sweep = time.monotonic() + self.window

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        now = time.monotonic()
        key = client_key(request)
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self.window:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window - now) + 1
            logger.warning("Rate limit hit: client=%s limit=%d/%ds", key, self.max_requests, self.window)
            return self._too_many_requests(RateLimitExceededError(retry_after=retry_after))

        hits.append(now)
        if now >= self._next_sweep:
            self._sweep(now)
        return await call_next(request)

    def _sweep(self, now: float) -> None:
        """Forget clients whose newest request has left the window."""
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= now - self.window]
        for key in idle:
            del self._hits[key]
        self._next_sweep = now + self.window
        if idle:
            logger.debug("Rate limiter dropped %d idle clients", len(idle))

    @staticmethod
    def _too_many_requests(error: RateLimitExceededError) -> JSONResponse:
        # Raised here, the error would bypass the app's exception handlers
        return JSONResponse(
            status_code=429,
            content={
                "error": "rate_limit_exceeded",
                "message": error.message,
                "details": error.context,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(error.retry_after)},
        )
