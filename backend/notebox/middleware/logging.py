"""
Notebox Backend — Request Logging Middleware
============================================

What:  One access log line per HTTP request.
Why:   Correlates status, latency and user with the request ID, which
       uvicorn's own access log cannot do.
How:   Measures wall time around the downstream app and logs method, path,
       status, duration, request ID, client IP and, for requests that passed
       the auth gate, the session subject.
Who:   Applied to every request via Starlette middleware.
When:  Runs inside RequestIDMiddleware so the request ID is already set.

Typical durations:
    GET  /api/notes        10-50ms (one indexed query)
    POST /api/auth/login   50-300ms (Argon2 hashing dominates)

Never logged: request bodies, cookies, the Authorization header, tokens.
Level by status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notebox.middleware.request_id import request_id_var

logger = logging.getLogger("notebox.access")

QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        # Probes hit /health every few seconds and would drown real traffic
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
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

        # Set by the auth gate; absent on unprotected or rejected requests
        session = getattr(request.state, "session", None)
        subject = session.subject if session is not None else "-"

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            subject,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": session.subject if session is not None else None,
            },
        )

        return response
