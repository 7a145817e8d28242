"""
Notebox Backend — Auth Gate
===========================

What:  Guards protected routes: extracts the session token, verifies it, and
       attaches the verified claims to the request.
How:   A FastAPI dependency (`require_session`) attached to every protected
       router. Unprotected routes (login, health) never invoke it.
Who:   Notes router and logout route.

Per-request state machine:
    ┌───────────────┐  none   ┌──────────────────────────────┐
    │ extract token │───────▶│ REJECTED 401 "missing token" │
    └───────────────┘         └──────────────────────────────┘
           │ found
           ▼
    ┌───────────────┐  fail   ┌─────────────────────────────────────────┐
    │ codec.verify  │───────▶│ REJECTED 401 "invalid or expired token" │
    └───────────────┘         └─────────────────────────────────────────┘
           │ ok
           ▼
    request.state.session = claims → ALLOWED

Token sources, in order:
    1. Cookie `token` (name configurable); an empty value counts as absent
    2. `Authorization: Bearer <token>` header

The token failure kind (malformed / bad signature / expired) is logged but never
returned; clients only see the two messages above.
"""

import logging
from typing import Optional

from fastapi import Request

from notebox.exceptions import AuthenticationError
from notebox.security.tokens import SessionClaims, SessionTokenCodec, TokenError

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


class AuthGate:
    def __init__(self, codec: SessionTokenCodec, cookie_name: str = "token"):
        self.codec = codec
        self.cookie_name = cookie_name

    def extract_token(self, request: Request) -> Optional[str]:
        token = request.cookies.get(self.cookie_name)
        if token:
            return token

        authorization = request.headers.get("Authorization", "")
        scheme, _, credentials = authorization.strip().partition(" ")
        if scheme.lower() == BEARER_SCHEME and credentials.strip():
            return credentials.strip()
        return None

    def authenticate(self, request: Request) -> SessionClaims:
        token = self.extract_token(request)
        if token is None:
            raise AuthenticationError(
                AuthenticationError.MISSING_TOKEN,
                context={"path": request.url.path},
            )

        try:
            claims = self.codec.verify(token)
        except TokenError as exc:
            logger.info("Rejected session token on %s: %s", request.url.path, exc.kind.value)
            raise AuthenticationError(
                AuthenticationError.INVALID_TOKEN,
                context={"path": request.url.path, "kind": exc.kind.value},
            ) from exc

        request.state.session = claims
        return claims


async def require_session(request: Request) -> SessionClaims:
    """FastAPI dependency: the verified session of this request, or 401."""
    gate: AuthGate = request.app.state.auth_gate
    return gate.authenticate(request)
