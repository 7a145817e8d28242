"""
Notebox Backend — FastAPI Dependencies
======================================

What:  Wires per-request collaborators from application state.
How:   Components built once by `create_app()` live on `app.state`;
       repositories are built per request around the request's AsyncSession.
       Tests replace `get_user_repository` / `get_note_repository` through
       `app.dependency_overrides`.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.config import Settings
from notebox.database import get_db_session
from notebox.repositories.base import NoteRepository, UserRepository
from notebox.repositories.notes import SqlNoteRepository
from notebox.repositories.users import SqlUserRepository
from notebox.services.auth_service import LoginService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_login_service(request: Request) -> LoginService:
    return request.app.state.login_service


def get_user_repository(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> UserRepository:
    return SqlUserRepository(session, timeout=settings.db_timeout)


def get_note_repository(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> NoteRepository:
    return SqlNoteRepository(session, timeout=settings.db_timeout)
