"""
Notebox Backend — Login/Register Flow
=====================================

What:  Turns an email/password pair into either a rejection or an issued session.
How:   Composes the CredentialHasher, the user store and the SessionTokenCodec.
Who:   Called by POST /api/auth/login.

Flow:
    ┌────────────┐   ┌──────────────┐   found    ┌──────────────┐
    │ normalize  │──▶│ find_by_email│──────────▶│ verify pw    │──┐ mismatch → 400
    │ email      │   └──────────────┘            └──────────────┘  │
    └────────────┘          │ not found                             │ ok
                            ▼                                        ▼
                   ┌──────────────────┐                    ┌──────────────────┐
                   │ hash + create    │───────────────────▶│ claims + token   │
                   │ (auto-register)  │                    └──────────────────┘
                   └──────────────────┘

Account enumeration:
    With auto-registration on (the default), an unknown email is registered
    while a known email with a wrong password is rejected, so the two cases
    are observably different. Setting AUTO_REGISTER=false rejects unknown
    emails with the same message as a wrong password and spends one hash
    verification on a dummy hash so both branches take similar time.

Hash upgrade:
    After a successful verify, a hash made under older Argon2 parameters is
    replaced by one under the current parameters.

Outcome:
    LoginOutcome.AUTHENTICATED or LoginOutcome.REGISTERED; both issue the same
    kind of token and differ only in logging.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from starlette.concurrency import run_in_threadpool

from notebox.exceptions import DuplicateUserError, InvalidCredentialsError, ValidationError
from notebox.models.user import User
from notebox.repositories.base import UserRepository
from notebox.security.passwords import CredentialHasher
from notebox.security.tokens import SessionClaims, SessionTokenCodec

logger = logging.getLogger(__name__)

_DUMMY_PASSWORD = "notebox-timing-equalizer"


class LoginOutcome(str, enum.Enum):
    AUTHENTICATED = "authenticated"
    REGISTERED = "registered"


@dataclass(frozen=True)
class LoginResult:
    outcome: LoginOutcome
    user_id: int
    claims: SessionClaims
    token: str


def normalize_email(email: str) -> str:
    """Strip and lower-case an email; raise ValidationError if it cannot be one."""
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValidationError("Email is required", field="email")
    local, sep, domain = normalized.partition("@")
    if not sep or not local or not domain or " " in normalized:
        raise ValidationError("Email address is not valid", field="email")
    return normalized


class LoginService:
    """
    Login/Register orchestrator.

    Stateless apart from its collaborators, which are bound at construction:
    one instance per application, shared by all requests.
    """

    def __init__(
        self,
        hasher: CredentialHasher,
        codec: SessionTokenCodec,
        auto_register: bool = True,
    ):
        self.hasher = hasher
        self.codec = codec
        self.auto_register = auto_register
        self._dummy_hash: Optional[str] = None

    async def login(self, users: UserRepository, email: str, password: str) -> LoginResult:
        """
        Authenticate (or register) and issue a session token.

        Raises:
            ValidationError:          empty/malformed email or empty password (→ 400)
            InvalidCredentialsError:  wrong password, or unknown email with
                                      auto-registration disabled (→ 400)
            StoreUnavailableError / StoreIntegrityError from the user store (→ 500)
        """
        normalized = normalize_email(email)
        if not password:
            raise ValidationError("Password is required", field="password")

        user = await users.find_by_email(normalized)
        outcome = LoginOutcome.AUTHENTICATED

        if user is not None:
            await self._check_password(user, password)
        elif not self.auto_register:
            await self._spend_dummy_verification(password)
            logger.info("Login rejected: unknown email and registration disabled")
            raise InvalidCredentialsError(context={"reason": "unknown_email"})
        else:
            password_hash = await run_in_threadpool(self.hasher.hash, password)
            try:
                user = await users.create(normalized, password_hash)
                outcome = LoginOutcome.REGISTERED
            except DuplicateUserError:
                # A concurrent first login won the insert; treat it as an existing account
                user = await users.find_by_email(normalized)
                if user is None:
                    raise
                await self._check_password(user, password)

        if outcome == LoginOutcome.AUTHENTICATED:
            await self._upgrade_hash(users, user, password)

        claims = self.codec.claims_for(user.id, user.email)
        token = self.codec.issue(claims)
        logger.info("Login %s for user id=%s", outcome.value, user.id)
        return LoginResult(outcome=outcome, user_id=user.id, claims=claims, token=token)

    async def _check_password(self, user: User, password: str) -> None:
        valid = await run_in_threadpool(self.hasher.verify, password, user.password_hash)
        if not valid:
            logger.info("Login rejected: wrong password for user id=%s", user.id)
            raise InvalidCredentialsError(context={"reason": "wrong_password", "user_id": user.id})

    async def _upgrade_hash(self, users: UserRepository, user: User, password: str) -> None:
        """Re-hash under the current parameters once the password is known to be right."""
        if not self.hasher.needs_rehash(user.password_hash):
            return
        new_hash = await run_in_threadpool(self.hasher.hash, password)
        await users.update_password_hash(user.id, new_hash)

    async def _spend_dummy_verification(self, password: str) -> None:
        if self._dummy_hash is None:
            self._dummy_hash = await run_in_threadpool(self.hasher.hash, _DUMMY_PASSWORD)
        await run_in_threadpool(self.hasher.verify, password, self._dummy_hash)
