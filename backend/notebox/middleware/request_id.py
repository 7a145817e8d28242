"""
Notebox Backend — Request ID Middleware
=======================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   Every log line and error body of one request carries the same ID, so a
       user can quote it from an error message and support can find the trail.
How:   Uses the client's X-Request-ID when present (trimmed to 64 chars),
       otherwise a short random one; stores it in a ContextVar for loggers and
       exception handlers, and in request.state for route handlers.
Who:   Applied to every request via Starlette middleware.
When:  Outermost middleware, so the access log and exception handlers see the ID.

Client-provided IDs:
    A frontend can generate the ID before the call and attach it to its own
    error reports. The value is capped in length because it is echoed into
    logs and headers.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

MAX_REQUEST_ID_LENGTH = 64

# Coroutine-local: concurrent requests on one thread each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()[:MAX_REQUEST_ID_LENGTH]
        if not rid:
            rid = uuid.uuid4().hex[:8]

        request_id_var.set(rid)

        # Why both: ContextVar for middleware/loggers, request.state for handlers
        request.state.request_id = rid

        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
