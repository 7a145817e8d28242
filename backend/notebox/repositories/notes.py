"""SQLAlchemy implementation of the note store."""

from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.models.note import Note
from notebox.repositories.base import run_store_call


class SqlNoteRepository:
    def __init__(self, session: AsyncSession, timeout: float = 5.0):
        self.session = session
        self.timeout = timeout

    async def list_by_owner(self, owner_id: int, from_: Optional[datetime] = None) -> List[Note]:
        query = select(Note).where(Note.owner_id == owner_id)
        if from_ is not None:
            query = query.where(Note.created_at > from_)
        query = query.order_by(asc(Note.id))

        async def _query() -> List[Note]:
            result = await self.session.execute(query)
            return list(result.scalars().all())

        return await run_store_call("notes.list_by_owner", _query(), self.timeout)

    async def insert(self, owner_id: int, content: str, tags: Sequence[str]) -> Note:
        async def _insert() -> Note:
            note = Note(owner_id=owner_id, content=content, tags=list(tags))
            self.session.add(note)
            await self.session.commit()
            return note

        return await run_store_call("notes.insert", _insert(), self.timeout)
