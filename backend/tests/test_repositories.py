"""
Notebox Backend — SQL Repository Tests
======================================

What:  SqlUserRepository / SqlNoteRepository against a temporary SQLite file,
       plus the error mapping shared by both.

What we test:
    ✅ Users: create, find, duplicate email → DuplicateUserError
    ✅ Users: other constraint violations stay StoreIntegrityError; hash update
    ✅ Notes: insert returns id + timestamp, list is owner-scoped and ordered
    ✅ `from` filter on created_at (exclusive)
    ✅ Timeouts and driver errors → StoreUnavailableError; constraints → StoreIntegrityError
"""

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError, OperationalError

from notebox.database import Database
from notebox.exceptions import DuplicateUserError, StoreIntegrityError, StoreUnavailableError
from notebox.models import Note
from notebox.repositories import SqlNoteRepository, SqlUserRepository
from notebox.repositories.base import run_store_call

from conftest import EPOCH, make_settings


class TestSqlUserRepository:

    @pytest.mark.asyncio
    async def test_create_and_find(self, database):
        async with database.session_factory() as session:
            users = SqlUserRepository(session)
            created = await users.create("a@x.com", "$argon2id$fake")

            assert created.id is not None
            assert created.created_at.tzinfo is not None

        async with database.session_factory() as session:
            found = await SqlUserRepository(session).find_by_email("a@x.com")

        assert found.id == created.id
        assert found.password_hash == "$argon2id$fake"

    @pytest.mark.asyncio
    async def test_find_unknown_returns_none(self, database):
        async with database.session_factory() as session:
            assert await SqlUserRepository(session).find_by_email("nobody@x.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_email(self, database):
        async with database.session_factory() as session:
            await SqlUserRepository(session).create("a@x.com", "h1")

        async with database.session_factory() as session:
            users = SqlUserRepository(session)
            with pytest.raises(DuplicateUserError):
                await users.create("a@x.com", "h2")

            # the session is still usable after the rollback
            found = await users.find_by_email("a@x.com")
            assert found.password_hash == "h1"

    @pytest.mark.asyncio
    async def test_other_constraint_violation_is_not_a_duplicate(self, database):
        async with database.session_factory() as session:
            with pytest.raises(StoreIntegrityError) as exc_info:
                await SqlUserRepository(session).create("a@x.com", None)
        assert not isinstance(exc_info.value, DuplicateUserError)

    @pytest.mark.asyncio
    async def test_update_password_hash(self, database):
        async with database.session_factory() as session:
            user = await SqlUserRepository(session).create("a@x.com", "old")

        async with database.session_factory() as session:
            await SqlUserRepository(session).update_password_hash(user.id, "new")

        async with database.session_factory() as session:
            found = await SqlUserRepository(session).find_by_email("a@x.com")
        assert found.password_hash == "new"

    @pytest.mark.asyncio
    async def test_repr_hides_password_hash(self, database):
        async with database.session_factory() as session:
            user = await SqlUserRepository(session).create("a@x.com", "$argon2id$secret")
        assert "secret" not in repr(user)


@pytest_asyncio.fixture
async def owners(database):
    """Ids of two users, alice and bob."""
    async with database.session_factory() as session:
        users = SqlUserRepository(session)
        alice = (await users.create("a@x.com", "h")).id
        bob = (await users.create("b@x.com", "h")).id
    return alice, bob


class TestSqlNoteRepository:

    @pytest.mark.asyncio
    async def test_insert_returns_generated_fields(self, database, owners):
        alice, _ = owners
        async with database.session_factory() as session:
            note = await SqlNoteRepository(session).insert(alice, "hi", ["x", "y"])

        assert note.id is not None
        assert note.created_at.tzinfo is not None
        assert note.tags == ["x", "y"]

    @pytest.mark.asyncio
    async def test_list_is_owner_scoped_and_ascending(self, database, owners):
        alice, bob = owners
        async with database.session_factory() as session:
            notes = SqlNoteRepository(session)
            await notes.insert(alice, "a1", [])
            await notes.insert(bob, "b1", [])
            await notes.insert(alice, "a2", ["t"])

        async with database.session_factory() as session:
            rows = await SqlNoteRepository(session).list_by_owner(alice)

        assert [n.content for n in rows] == ["a1", "a2"]
        assert rows[1].tags == ["t"]
        assert all(n.owner_id == alice for n in rows)

    @pytest.mark.asyncio
    async def test_list_from_is_exclusive(self, database, owners):
        alice, bob = owners
        async with database.session_factory() as session:
            session.add_all([
                Note(owner_id=alice, content="at", tags=[], created_at=EPOCH),
                Note(owner_id=alice, content="after", tags=[], created_at=EPOCH + timedelta(seconds=1)),
                Note(owner_id=bob, content="other", tags=[], created_at=EPOCH + timedelta(hours=1)),
            ])
            await session.commit()

        async with database.session_factory() as session:
            rows = await SqlNoteRepository(session).list_by_owner(alice, EPOCH)

        assert [n.content for n in rows] == ["after"]
        assert rows[0].created_at == EPOCH + timedelta(seconds=1)


class TestRunStoreCall:

    @pytest.mark.asyncio
    async def test_passes_result_through(self):
        async def ok():
            return 42

        assert await run_store_call("op", ok(), timeout=1) == 42

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        with pytest.raises(StoreUnavailableError) as exc_info:
            await run_store_call("slow", asyncio.sleep(5), timeout=0.01)
        assert exc_info.value.retryable is True
        assert exc_info.value.context == {"operation": "slow", "error_type": "timeout"}

    @pytest.mark.asyncio
    async def test_driver_error_is_unavailable_without_driver_text(self):
        async def down():
            raise OperationalError("SELECT 1", {}, Exception("password authentication failed for user"))

        with pytest.raises(StoreUnavailableError) as exc_info:
            await run_store_call("users.find_by_email", down(), timeout=1)
        assert "password authentication" not in exc_info.value.message
        assert "password authentication" not in str(exc_info.value.context)

    @pytest.mark.asyncio
    async def test_constraint_violation_is_integrity_error(self):
        async def violate():
            raise IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed"))

        with pytest.raises(StoreIntegrityError) as exc_info:
            await run_store_call("notes.insert", violate(), timeout=1)
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_unreachable_database_file(self, tmp_path):
        db = Database(make_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}"))
        try:
            async with db.session_factory() as session:
                with pytest.raises(StoreUnavailableError):
                    await SqlUserRepository(session).find_by_email("a@x.com")
        finally:
            await db.dispose()
