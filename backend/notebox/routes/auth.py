"""
Notebox Backend — Auth Route Handlers
=====================================

What:  Login (with implicit registration) and logout.

Session transport:
    Login sets `token` as an HttpOnly, SameSite=Lax cookie on path `/` with
    max-age equal to the session lifetime, and also returns the raw token as a
    text/plain body for clients that send `Authorization: Bearer <token>`.

    Logout overwrites the cookie with an empty, already-expired one. Tokens are
    stateless, so a bearer client's copy stays valid until it expires.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from notebox.config import Settings
from notebox.dependencies import get_app_settings, get_login_service, get_user_repository
from notebox.middleware.auth import require_session
from notebox.repositories.base import UserRepository
from notebox.schemas.auth import LoginRequest
from notebox.schemas.common import ErrorResponse, StatusResponse
from notebox.services.auth_service import LoginService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_class=PlainTextResponse,
    responses={
        200: {"description": "Session token (also set as the `token` cookie)"},
        400: {"description": "Invalid email or password", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Log in, registering the email on first use",
)
async def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    login_service: LoginService = Depends(get_login_service),
    settings: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    result = await login_service.login(users, body.email, body.password)

    response = PlainTextResponse(result.token)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=result.token,
        max_age=settings.session_lifetime_seconds,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get(
    "/logout",
    response_model=StatusResponse,
    dependencies=[Depends(require_session)],
    responses={401: {"description": "Missing or invalid session", "model": ErrorResponse}},
    summary="Clear the session cookie",
)
async def logout(settings: Settings = Depends(get_app_settings)) -> JSONResponse:
    response = JSONResponse(content=StatusResponse().model_dump())
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return response
