"""
Notebox Backend — User SQLAlchemy Model
=======================================

What:  ORM model for the `users` table (the stored user credential).
Who:   Read and created by SqlUserRepository; read by Alembic for migrations.

Lifecycle:
    Created on the first successful login of an unseen email.
    Never mutated afterwards (no password-change flow).

Invariants:
    - `email` is stored lower-cased and is unique (uq_users_email)
    - `password_hash` is an opaque, algorithm-tagged PHC string ($argon2id$...)
"""

from datetime import datetime

from sqlalchemy import Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from notebox.database import Base
from notebox.models.types import UTCDateTime, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        comment="Lower-cased login email",
    )

    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Argon2 PHC string; embeds algorithm, parameters and salt",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        # never include password_hash
        return f"<User(id={self.id}, email='{self.email}')>"
