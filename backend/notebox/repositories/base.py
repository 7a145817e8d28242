"""Store interfaces and the shared error mapping for SQL implementations."""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, List, Optional, Protocol, Sequence, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from notebox.exceptions import StoreIntegrityError, StoreUnavailableError
from notebox.models.note import Note
from notebox.models.user import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UserRepository(Protocol):
    async def find_by_email(self, email: str) -> Optional[User]:
        """Return the user with this normalized email, or None."""
        ...

    async def create(self, email: str, password_hash: str) -> User:
        """Insert a user. Raises DuplicateUserError if the email is taken."""
        ...

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        """Replace the stored hash, e.g. after Argon2 parameters were raised."""
        ...


class NoteRepository(Protocol):
    async def list_by_owner(self, owner_id: int, from_: Optional[datetime] = None) -> List[Note]:
        """Notes of `owner_id`, created strictly after `from_` when given, ascending by id."""
        ...

    async def insert(self, owner_id: int, content: str, tags: Sequence[str]) -> Note:
        """Insert one note atomically and return it with id and timestamp."""
        ...


async def run_store_call(operation: str, call: Awaitable[T], timeout: float) -> T:
    """
    Await a store call under a timeout and translate failures.

    Mapping:
        asyncio timeout / pool timeout / connection errors → StoreUnavailableError
        IntegrityError                                      → StoreIntegrityError
        any other SQLAlchemyError                           → StoreUnavailableError

    The driver's message goes to the log only; the raised error carries
    just the operation name and exception type in its context.
    """
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("Store call '%s' timed out after %.1fs", operation, timeout)
        raise StoreUnavailableError(
            context={"operation": operation, "error_type": "timeout"}
        ) from exc
    except PoolTimeoutError as exc:
        logger.error("Store call '%s' could not get a pooled connection: %s", operation, exc)
        raise StoreUnavailableError(
            context={"operation": operation, "error_type": "pool_timeout"}
        ) from exc
    except IntegrityError as exc:
        logger.error("Store call '%s' violated a constraint: %s", operation, exc.orig)
        raise StoreIntegrityError(
            context={"operation": operation, "error_type": type(exc.orig).__name__}
        ) from exc
    except (DBAPIError, SQLAlchemyError, OSError) as exc:
        logger.error("Store call '%s' failed: %s", operation, exc, exc_info=True)
        raise StoreUnavailableError(
            context={"operation": operation, "error_type": type(exc).__name__}
        ) from exc
