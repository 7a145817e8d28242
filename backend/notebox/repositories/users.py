"""SQLAlchemy implementation of the user store."""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notebox.exceptions import DuplicateUserError
from notebox.models.user import User
from notebox.repositories.base import run_store_call

logger = logging.getLogger(__name__)

UNIQUE_EMAIL_CONSTRAINT = "uq_users_email"


def _is_duplicate_email(exc: IntegrityError) -> bool:
    """
    True when the violation is the unique email constraint.

    PostgreSQL names the constraint; SQLite names the column instead.
    """
    driver_error = getattr(exc.orig, "__cause__", None) or exc.orig
    constraint = getattr(driver_error, "constraint_name", None)
    if constraint is not None:
        return constraint == UNIQUE_EMAIL_CONSTRAINT
    message = str(exc.orig)
    return UNIQUE_EMAIL_CONSTRAINT in message or "UNIQUE constraint failed: users.email" in message


class SqlUserRepository:
    def __init__(self, session: AsyncSession, timeout: float = 5.0):
        self.session = session
        self.timeout = timeout

    async def find_by_email(self, email: str) -> Optional[User]:
        async def _query() -> Optional[User]:
            result = await self.session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

        return await run_store_call("users.find_by_email", _query(), self.timeout)

    async def create(self, email: str, password_hash: str) -> User:
        async def _insert() -> User:
            user = User(email=email, password_hash=password_hash)
            self.session.add(user)
            try:
                await self.session.commit()
            except IntegrityError as exc:
                await self.session.rollback()
                if _is_duplicate_email(exc):
                    raise DuplicateUserError(email) from exc
                raise
            return user

        user = await run_store_call("users.create", _insert(), self.timeout)
        logger.info("Created user id=%s", user.id)
        return user

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        async def _update() -> None:
            await self.session.execute(
                update(User).where(User.id == user_id).values(password_hash=password_hash)
            )
            await self.session.commit()

        await run_store_call("users.update_password_hash", _update(), self.timeout)
        logger.info("Rehashed password for user id=%s", user_id)
