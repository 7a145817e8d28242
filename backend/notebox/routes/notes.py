"""
Notebox Backend — Notes Route Handlers
======================================

What:  GET /api/notes (list own notes) and POST /api/notes (create).
How:   The router depends on the auth gate, so every handler here receives the
       verified SessionClaims. The owner of every read and write is that
       identity; the request body has no owner field.

Caching:
    Both responses are per-user, so they are marked `private, no-store`.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from notebox.dependencies import get_note_repository
from notebox.middleware.auth import require_session
from notebox.repositories.base import NoteRepository
from notebox.schemas.common import ErrorResponse
from notebox.schemas.note import NoteCreate, NoteOut, NotesResponse
from notebox.security.tokens import SessionClaims
from notebox.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Notes"],
    dependencies=[Depends(require_session)],
    responses={
        401: {"description": "Missing or invalid session", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.get(
    "/notes",
    response_model=NotesResponse,
    summary="List the caller's notes",
)
async def list_notes(
    response: Response,
    from_: Optional[datetime] = Query(
        default=None,
        alias="from",
        description="Only notes created strictly after this RFC 3339 timestamp",
    ),
    identity: SessionClaims = Depends(require_session),
    notes: NoteRepository = Depends(get_note_repository),
) -> NotesResponse:
    result = await note_service.list_notes(notes, identity, from_)
    response.headers["Cache-Control"] = "private, no-store"
    return result


@router.post(
    "/notes",
    response_model=NoteOut,
    summary="Create a note owned by the caller",
)
async def create_note(
    body: NoteCreate,
    response: Response,
    identity: SessionClaims = Depends(require_session),
    notes: NoteRepository = Depends(get_note_repository),
) -> NoteOut:
    result = await note_service.create_note(notes, identity, body.content, body.tags)
    response.headers["Cache-Control"] = "private, no-store"
    return result
