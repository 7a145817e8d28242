"""
Notebox Backend — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) validates configuration, builds the
       long-lived components once and stores them on `app.state`:

           settings       immutable Settings value
           database       pooled async engine + session factory
           auth_gate      token extraction + verification for protected routes
           login_service  login/register orchestrator (hasher + codec)

Who:   `python -m notebox`, or `uvicorn notebox.main:create_app --factory`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    POST /api/auth/login      GET /health            │
    │    GET  /api/auth/logout  *  GET/POST /api/notes *  │
    │    * guarded by the auth gate dependency            │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation/Credentials→400 │ Auth→401 │ Store→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    create_app():  ConfigurationError if JWT_SECRET/DATABASE_URL are unusable
    Startup:       logging setup, database ping with bounded retry; an
                   unreachable database aborts startup (non-zero exit)
    Shutdown:      dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notebox import __version__
from notebox.config import Settings, get_settings
from notebox.database import Database
from notebox.exceptions import (
    AuthenticationError,
    InvalidCredentialsError,
    NoteboxError,
    StoreIntegrityError,
    StoreUnavailableError,
    ValidationError,
)
from notebox.middleware.auth import AuthGate
from notebox.middleware.logging import RequestLoggingMiddleware
from notebox.middleware.request_id import RequestIDMiddleware, request_id_var
from notebox.routes import auth, health, notes
from notebox.security.passwords import CredentialHasher
from notebox.security.tokens import Clock, SessionTokenCodec
from notebox.services.auth_service import LoginService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notebox.access: GET /api/notes 200 3.1ms [a1b2c3d4] user=1 from 10.0.0.1
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Notebox Backend %s starting up...", __version__)

    try:
        await database.wait_until_ready()
    except Exception as e:
        logger.critical("Database unreachable at startup (%s); aborting.", type(e).__name__)
        await database.dispose()
        raise

    logger.info("Database reachable; session lifetime %ds", settings.session_lifetime_seconds)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notebox Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "status": "fail" if status_code < 500 else "error",
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError          → 400
        RequestValidationError   → 400 (FastAPI schema validation; inputs never echoed)
        InvalidCredentialsError  → 400
        AuthenticationError      → 401 + WWW-Authenticate: Bearer
        StoreUnavailableError    → 500 (retryable)
        StoreIntegrityError      → 500
        NoteboxError (base)      → 500
        Exception (fallback)     → 500

    Store and unexpected errors return a generic message; details are logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        fields = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _error_response(
            400,
            "validation_error",
            "The request is not valid",
            details={"errors": fields},
        )

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return _error_response(400, "invalid_credentials", exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401,
            "unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Store unavailable: %s", rid, exc.context)
        return _error_response(500, "store_unavailable", exc.message, details={"retryable": True})

    @app.exception_handler(StoreIntegrityError)
    async def handle_store_integrity(request: Request, exc: StoreIntegrityError):
        rid = request_id_var.get("")
        logger.error("[%s] Store integrity error: %s", rid, exc.context)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(NoteboxError)
    async def handle_notebox_error(request: Request, exc: NoteboxError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | %s", rid, exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, type(exc).__name__, exc_info=exc)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Immutable configuration. Defaults to the environment.
        clock:    Time source for session tokens; tests pass a fake.

    Raises:
        ConfigurationError: required settings are missing or invalid.
    """
    settings = settings or get_settings()
    settings.validate_required()

    app = FastAPI(
        title="Notebox API",
        description="Personal tagged notes behind stateless session authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Long-lived components ─────────────────────────────────────────────
    codec = SessionTokenCodec.from_settings(settings, clock=clock)
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.auth_gate = AuthGate(codec, cookie_name=settings.session_cookie_name)
    app.state.login_service = LoginService(
        hasher=CredentialHasher.from_settings(settings),
        codec=codec,
        auto_register=settings.auto_register,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Accept", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    return app
