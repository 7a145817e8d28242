"""
Notebox Backend — Note Schemas
==============================

What:  Request and response models for the notes endpoints.

Response shapes:
    GET  /api/notes  → {"author": "a@x.com", "notes": [{"content", "tags", "date"}]}
    POST /api/notes  → {"content", "tags", "date"}

Neither the request nor the response carries the owner id. The owner is the
authenticated session's subject.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_validator

MAX_CONTENT_LENGTH = 102_400
MAX_TAGS = 32
MAX_TAG_LENGTH = 64


class NoteCreate(BaseModel):
    """Body of POST /api/notes. Unknown fields (e.g. 'author') are ignored."""
    content: str = Field(max_length=MAX_CONTENT_LENGTH, description="Note text")
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS, description="Ordered labels")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        for tag in v:
            if not tag:
                raise ValueError("Tags must not be empty")
            if len(tag) > MAX_TAG_LENGTH:
                raise ValueError(f"Tags must be at most {MAX_TAG_LENGTH} characters")
        return v


class NoteOut(BaseModel):
    content: str
    tags: List[str]
    date: datetime = Field(description="Creation timestamp (UTC, RFC 3339)")


class NotesResponse(BaseModel):
    author: str = Field(description="Email of the authenticated user")
    notes: List[NoteOut]
