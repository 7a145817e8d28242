"""
Notebox Backend — Middleware Package
====================================

What:  Cross-cutting concerns applied to requests.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Router
                                                             │
                                       protected routes ─────┴─▶ [Auth Gate] → Handler

    The auth gate is a route dependency, not ASGI middleware, so it runs only
    for the routers that declare it and its 401s pass through the
    application's exception handlers like any other error.
"""
