"""
Notebox Backend — Note SQLAlchemy Model
=======================================

What:  ORM model for the `notes` table.
Who:   Written and queried by SqlNoteRepository; read by Alembic for migrations.

Table Design:
    - Integer primary key; ascending id is the listing order
    - owner_id: foreign key to users.id; every note belongs to exactly one user
    - tags: TEXT[] on PostgreSQL, JSON elsewhere; order is preserved
    - created_at: UTC with timezone; `from` filters compare against it

    Index on (owner_id, created_at):
        Serves the only query pattern, "notes of this owner after this instant".

Notes are immutable after creation.
"""

from datetime import datetime
from typing import List

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base
from notebox.models.types import UTCDateTime, utcnow

TagList = JSON().with_variant(postgresql.ARRAY(String(64)), "postgresql")


class Note(Base):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user; taken from the verified session, never from the request body",
    )

    content: Mapped[str] = mapped_column(Text, nullable=False)

    tags: Mapped[List[str]] = mapped_column(TagList, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_notes_owner_created_at", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, owner_id={self.owner_id}, "
            f"created_at='{self.created_at}')>"
        )
