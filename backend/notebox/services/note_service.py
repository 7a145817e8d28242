"""
Notebox Backend — Note Access Flow
==================================

What:  Reads and writes notes scoped to the authenticated user.
How:   Every operation takes the SessionClaims attached by the auth gate and
       uses `claims.subject` as the owner. No owner/author value is ever read
       from the request.
Who:   Called by GET /api/notes and POST /api/notes.

Ordering:
    list_notes() returns notes ascending by id, i.e. insertion order.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from notebox.models.note import Note
from notebox.repositories.base import NoteRepository
from notebox.schemas.note import NoteOut, NotesResponse
from notebox.security.tokens import SessionClaims

logger = logging.getLogger(__name__)


def _to_note_out(note: Note) -> NoteOut:
    return NoteOut(content=note.content, tags=list(note.tags or []), date=note.created_at)


class NoteService:
    """
    Business logic layer for note operations.

    NoteService is stateless: the repository is passed into each call.
    """

    async def list_notes(
        self,
        notes: NoteRepository,
        identity: SessionClaims,
        from_: Optional[datetime] = None,
    ) -> NotesResponse:
        if from_ is not None:
            if from_.tzinfo is None:
                from_ = from_.replace(tzinfo=timezone.utc)
            from_ = from_.astimezone(timezone.utc)

        rows = await notes.list_by_owner(identity.subject, from_)
        logger.debug("Listed %d notes for user id=%s", len(rows), identity.subject)
        return NotesResponse(
            author=identity.email,
            notes=[_to_note_out(row) for row in rows],
        )

    async def create_note(
        self,
        notes: NoteRepository,
        identity: SessionClaims,
        content: str,
        tags: Sequence[str],
    ) -> NoteOut:
        note = await notes.insert(identity.subject, content, list(tags))
        logger.info("Created note id=%s for user id=%s", note.id, identity.subject)
        return _to_note_out(note)


note_service = NoteService()
