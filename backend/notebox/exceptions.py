"""
Notebox Backend — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the error taxonomy of the service.
How:   Each exception carries a client-safe message and an optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the correct HTTP status code.
Who:   Raised by security helpers, services, repositories and the auth gate.

Exception Hierarchy:
    NoteboxError (base)
    ├── ConfigurationError        → fatal at startup, never mid-request
    ├── ValidationError           → 400 Bad Request
    ├── InvalidCredentialsError   → 400 Bad Request (wrong email/password)
    ├── AuthenticationError       → 401 Unauthorized (missing/invalid/expired token)
    ├── StoreUnavailableError     → 500 (connection/timeout; retryable by caller)
    └── StoreIntegrityError       → 500 (unexpected constraint violation)
        └── DuplicateUserError    → handled inside the login flow

Security:
    `message` is safe to return to clients. `context` is logged server-side only.
    Store errors and auth failures never carry database text or the failure reason
    in their client-facing message.
"""

from typing import Any, Dict, Optional


class NoteboxError(Exception):
    """
    Base exception for all Notebox application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ConfigurationError(NoteboxError):
    """Required configuration is missing or invalid. Raised only during startup."""


class ValidationError(NoteboxError):
    """
    Raised when client input fails validation.

    When:    Empty email or password, malformed email, unparseable `from` timestamp.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidCredentialsError(NoteboxError):
    """
    Raised when an email/password pair is rejected at login.

    The message is identical for every rejection reason so responses
    cannot be used to tell which part of the pair was wrong.
    HTTP:    400 Bad Request
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid email or password", context=context)


class AuthenticationError(NoteboxError):
    """
    Raised by the auth gate when a protected route is called without a valid session.

    Only two client-visible messages exist: "missing token" and
    "invalid or expired token". The precise token failure kind lives in `context`.
    HTTP:    401 Unauthorized
    """

    MISSING_TOKEN = "missing token"
    INVALID_TOKEN = "invalid or expired token"

    def __init__(
        self,
        message: str = INVALID_TOKEN,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(NoteboxError):
    """
    Raised when the backing store cannot be reached or does not answer in time.

    Not retried internally; the client may retry.
    HTTP:    500 Internal Server Error
    """

    retryable = True

    def __init__(
        self,
        message: str = "The service is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreIntegrityError(NoteboxError):
    """
    Raised when the store rejects a write on a constraint.

    HTTP:    500 Internal Server Error (non-retryable)
    """

    retryable = False

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateUserError(StoreIntegrityError):
    """A user row with the same normalized email already exists."""

    def __init__(self, email: str):
        super().__init__(context={"constraint": "uq_users_email"})
        self.email = email
