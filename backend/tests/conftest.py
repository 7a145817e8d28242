"""
Notebox Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── settings:    Immutable Settings with a test secret and cheap Argon2 parameters
    ├── clock:       FakeClock driving token issue/verify and fake note timestamps
    ├── hasher:      CredentialHasher built from `settings`
    ├── codec:       SessionTokenCodec bound to `settings` and `clock`
    ├── user_store:  In-memory UserRepository that counts calls
    ├── note_store:  In-memory NoteRepository that counts calls
    ├── app:         create_app() with both repositories overridden by the fakes
    ├── client:      HTTPX AsyncClient talking to `app` through ASGITransport
    └── database:    Database on a temporary SQLite file with tables created

ASGITransport does not run the lifespan, so API tests never ping a database.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["JWT_SECRET"] = "test-secret-that-is-at-least-32-characters"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./notebox_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from notebox.config import Settings  # noqa: E402
from notebox.database import Database  # noqa: E402
from notebox.dependencies import get_note_repository, get_user_repository  # noqa: E402
from notebox.exceptions import DuplicateUserError  # noqa: E402
from notebox.main import create_app  # noqa: E402
from notebox.models import Note, User  # noqa: E402
from notebox.security.passwords import CredentialHasher  # noqa: E402
from notebox.security.tokens import SessionTokenCodec  # noqa: E402

TEST_SECRET = "test-secret-that-is-at-least-32-characters"
EPOCH = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════

class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime = EPOCH):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


class FakeUserRepository:
    """Dict-backed user store. `calls` counts every store call."""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.calls = 0
        self._next_id = 1
        self.rehashes = 0

    async def find_by_email(self, email: str) -> Optional[User]:
        self.calls += 1
        return self.users.get(email)

    async def create(self, email: str, password_hash: str) -> User:
        self.calls += 1
        if email in self.users:
            raise DuplicateUserError(email)
        user = User(
            id=self._next_id,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._next_id += 1
        self.users[email] = user
        return user

    async def update_password_hash(self, user_id: int, password_hash: str) -> None:
        self.calls += 1
        self.rehashes += 1
        for user in self.users.values():
            if user.id == user_id:
                user.password_hash = password_hash


class FakeNoteRepository:
    """List-backed note store stamped by the fake clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.notes: List[Note] = []
        self.calls = 0

    async def list_by_owner(self, owner_id: int, from_: Optional[datetime] = None) -> List[Note]:
        self.calls += 1
        rows = [n for n in self.notes if n.owner_id == owner_id]
        if from_ is not None:
            rows = [n for n in rows if n.created_at > from_]
        return sorted(rows, key=lambda n: n.id)

    async def insert(self, owner_id: int, content: str, tags: Sequence[str]) -> Note:
        self.calls += 1
        note = Note(
            id=len(self.notes) + 1,
            owner_id=owner_id,
            content=content,
            tags=list(tags),
            created_at=self.clock(),
        )
        self.notes.append(note)
        return note


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

def make_settings(**overrides) -> Settings:
    """Settings for tests. Argon2 is tuned down so hashing takes milliseconds."""
    values = {
        "jwt_secret": TEST_SECRET,
        "database_url": "sqlite+aiosqlite:///./notebox_test.db",
        "argon2_time_cost": 1,
        "argon2_memory_cost": 8,
        "argon2_parallelism": 1,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hasher(settings):
    return CredentialHasher.from_settings(settings)


@pytest.fixture
def codec(settings, clock):
    return SessionTokenCodec.from_settings(settings, clock=clock)


@pytest.fixture
def user_store():
    return FakeUserRepository()


@pytest.fixture
def note_store(clock):
    return FakeNoteRepository(clock)


@pytest.fixture
def app(settings, clock, user_store, note_store):
    """
    The real application, wired to the in-memory stores.

    Usage:
        app.state.login_service.auto_register = False
    """
    application = create_app(settings, clock=clock)
    application.dependency_overrides[get_user_repository] = lambda: user_store
    application.dependency_overrides[get_note_repository] = lambda: note_store
    return application


@pytest_asyncio.fixture
async def client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest_asyncio.fixture
async def database(tmp_path):
    """A Database on a fresh SQLite file with all tables created."""
    db = Database(make_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'notebox.db'}"))
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()
