"""
TravelStory Backend - Request ID Middleware
=============================================

What:  Assigns a correlation id to each request and echoes it in the response.
Why:   Every log line and every error body of a request carries the same id,
       so a client-reported id leads straight to the server-side logs.
How:   Uses the client's X-Request-ID if sent, otherwise a short UUID; stores
       it in a ContextVar (for loggers and exception handlers) and in
       request.state (for handlers).
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # 8 hex chars is plenty for correlating one service's logs
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]

        # Not reset afterwards: the outermost 500 handler runs after this
        # dispatch returns and still needs the id
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
