"""
Notebox Backend — Database Session Management
=============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   `Database` is built from Settings once per application. It owns the
       pooled engine and hands out one AsyncSession per request.
Who:   Created by `create_app()`; stored on `app.state.database`; used by
       repositories via the `get_db_session` dependency.

Connection Pooling:
    pool_size      persistent connections for normal load
    max_overflow   temporary connections for bursts (total max = size + overflow)
    pool_timeout   seconds a request waits for a free connection; beyond the
                   bound callers queue rather than fail immediately
    pool_pre_ping  validates connections before use

    SQLite (tests) uses SQLAlchemy's default pool for the dialect, so the
    sizing arguments are only applied to server databases.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
)

from notebox.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object, which Alembic reads for migrations.
    """
    pass


class Database:
    """Owns the async engine and session factory for one application instance."""

    def __init__(self, settings: Settings):
        engine_kwargs = {
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        # expire_on_commit=False: returned ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """Runs SELECT 1. Raises whatever the driver raises."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def wait_until_ready(self, attempts: int = 5) -> None:
        """
        Ping the database with bounded exponential backoff.

        What:  Startup-only reachability check.
        How:   Tenacity retries the ping; the last exception is re-raised so the
               lifespan can abort startup.
        """
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await self.ping()

    async def create_all(self) -> None:
        """Create tables from ORM metadata. Used by tests; production uses Alembic."""
        # Register the mappers with Base.metadata
        from notebox.models import note, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's factory
        2. Yields it to the repositories (each write commits on its own)
        3. On error: rolls back anything uncommitted
        4. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
