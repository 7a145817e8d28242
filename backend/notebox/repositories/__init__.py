"""
Notebox Backend — Repositories (Store Collaborators)
====================================================

What:  The only two interfaces the authentication core needs from persistence.
       - UserRepository: find_by_email(), create()
       - NoteRepository: list_by_owner(), insert()
How:   `base` declares them as Protocols; `users` and `notes` implement them on
       an AsyncSession. Tests substitute in-memory implementations.
"""

from notebox.repositories.base import NoteRepository, UserRepository
from notebox.repositories.notes import SqlNoteRepository
from notebox.repositories.users import SqlUserRepository

__all__ = [
    "NoteRepository",
    "UserRepository",
    "SqlNoteRepository",
    "SqlUserRepository",
]
