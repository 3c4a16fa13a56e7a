"""
TravelStory Backend - Request Logging Middleware
==================================================

What:  One access-log line per HTTP request: method, path, status,
       duration, request id and client IP.
Why:   Uvicorn's access log has no request-id correlation or timings.
How:   Times the downstream call and logs at a level chosen from the
       status class (5xx ERROR, 4xx WARNING, otherwise INFO).

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: request bodies (passwords, story text), query strings
       (search terms), the Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from travelstory.middleware.request_id import request_id_var

logger = logging.getLogger("travelstory.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    # Probes and static files would drown out API traffic
    QUIET_PREFIXES = ("/health",)

    def __init__(self, app, quiet_prefixes=None):
        super().__init__(app)
        self.quiet_prefixes = tuple(quiet_prefixes or self.QUIET_PREFIXES)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path.startswith(self.quiet_prefixes):
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
