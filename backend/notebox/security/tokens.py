"""
Notebox Backend — Session Token Codec
=====================================

What:  Creates and validates signed, time-bound session tokens.
How:   Claims are serialized to compact JSON and signed with HMAC-SHA256 by
       itsdangerous' URLSafeSerializer. A token is `<payload>.<signature>`,
       both URL-safe base64, so it fits in a cookie or an Authorization header.
Who:   Issued by the login flow; verified by the auth gate on every protected request.

Wire claims (seconds since the epoch, like a JWT):
    {"sub": 42, "email": "a@x.com", "iat": 1700000000, "exp": 1702419200}

Verification order:
    1. Structure  — `<payload>.<signature>` present          else MALFORMED
    2. Signature  — canonical base64, HMAC recomputed over
                    the raw payload                          else BAD_SIGNATURE
    3. Decode     — JSON + claim types checked               else MALFORMED
    4. Expiry     — now < exp                                else EXPIRED
    Claims are never decoded before the signature has been checked.

Stateless: nothing is stored server-side, so tokens cannot be revoked before `exp`.
"""

import enum
import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional

from itsdangerous import BadData, BadPayload, BadSignature, URLSafeSerializer
from itsdangerous.encoding import base64_decode, base64_encode

from notebox.config import Settings

TOKEN_SALT = "notebox.session.v1"

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenErrorKind(str, enum.Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


class TokenError(Exception):
    """Token verification failure. `kind` is for logs and tests, never for clients."""

    def __init__(self, kind: TokenErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


@dataclass(frozen=True)
class SessionClaims:
    subject: int
    email: str
    issued_at: datetime
    expires_at: datetime

    def __post_init__(self):
        # The wire format carries whole seconds
        object.__setattr__(self, "issued_at", self.issued_at.replace(microsecond=0))
        object.__setattr__(self, "expires_at", self.expires_at.replace(microsecond=0))

    def to_payload(self) -> dict:
        return {
            "sub": self.subject,
            "email": self.email,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "SessionClaims":
        if not isinstance(payload, Mapping):
            raise TokenError(TokenErrorKind.MALFORMED, "payload is not an object")
        sub = payload.get("sub")
        email = payload.get("email")
        iat = payload.get("iat")
        exp = payload.get("exp")
        for name, value in (("sub", sub), ("iat", iat), ("exp", exp)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise TokenError(TokenErrorKind.MALFORMED, f"claim '{name}' must be an integer")
        if not isinstance(email, str) or not email:
            raise TokenError(TokenErrorKind.MALFORMED, "claim 'email' must be a string")
        return cls(
            subject=sub,
            email=email,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )


class SessionTokenCodec:
    """
    Issues and verifies session tokens under one signing secret.

    Args:
        secret:    HMAC key. Bound once at construction from the immutable settings.
        lifetime:  Session lifetime used by `claims_for()`.
        clock:     Returns the current aware UTC datetime; injectable for tests.
    """

    def __init__(
        self,
        secret: str,
        lifetime: timedelta,
        clock: Optional[Clock] = None,
    ):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self.lifetime = lifetime
        self._clock = clock or _utcnow
        self._serializer = URLSafeSerializer(
            secret,
            salt=TOKEN_SALT,
            signer_kwargs={"digest_method": hashlib.sha256},
        )

    @classmethod
    def from_settings(cls, settings: Settings, clock: Optional[Clock] = None) -> "SessionTokenCodec":
        return cls(
            secret=settings.jwt_secret,
            lifetime=timedelta(seconds=settings.session_lifetime_seconds),
            clock=clock,
        )

    def now(self) -> datetime:
        return self._clock()

    def claims_for(self, user_id: int, email: str, now: Optional[datetime] = None) -> SessionClaims:
        """Claims for a fresh session: issued now, expiring one lifetime later."""
        issued_at = (now or self.now()).astimezone(timezone.utc).replace(microsecond=0)
        return SessionClaims(
            subject=user_id,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + self.lifetime,
        )

    def issue(self, claims: SessionClaims) -> str:
        return self._serializer.dumps(claims.to_payload())

    def verify(self, token: str) -> SessionClaims:
        """Return the signed claims, or raise TokenError."""
        if not isinstance(token, str) or not token:
            raise TokenError(TokenErrorKind.MALFORMED, "empty token")
        payload_part, sep, signature_part = token.rpartition(".")
        if not sep or not payload_part or not signature_part:
            raise TokenError(TokenErrorKind.MALFORMED, "missing signature separator")

        # base64 ignores the spare low bits of the last character, so several
        # spellings decode to one signature; only the canonical one is accepted
        try:
            canonical = base64_encode(base64_decode(signature_part))
        except BadData as exc:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, "undecodable signature") from exc
        if canonical != signature_part.encode("ascii", "replace"):
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, "non-canonical signature")

        try:
            payload = self._serializer.loads(token)
        except BadPayload as exc:
            # Signature was valid but the signed bytes are not our JSON
            raise TokenError(TokenErrorKind.MALFORMED, "undecodable payload") from exc
        except BadSignature as exc:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE, "signature mismatch") from exc

        claims = SessionClaims.from_payload(payload)

        if self.now() >= claims.expires_at:
            raise TokenError(TokenErrorKind.EXPIRED, f"expired at {claims.expires_at.isoformat()}")

        return claims
