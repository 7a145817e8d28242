"""
Notebox Backend — Health Check & Startup Tests
==============================================

What we test:
    ✅ /health: 200 + "connected" when the database answers
    ✅ /health: 503 + "disconnected" when it does not
    ✅ Startup aborts (and releases the pool) when the database stays unreachable
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from notebox.main import create_app, lifespan

from conftest import make_settings


async def get_health(settings):
    app = create_app(settings)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.get("/health")
    finally:
        await app.state.database.dispose()


@pytest.mark.asyncio
async def test_health_connected(tmp_path):
    response = await get_health(make_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'ok.db'}"))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


@pytest.mark.asyncio
async def test_health_disconnected(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'down.db'}"
    response = await get_health(make_settings(database_url=url))

    assert response.status_code == 503
    assert response.json()["database"] == "disconnected"


class TestStartup:

    @pytest.mark.asyncio
    async def test_unreachable_database_aborts_startup(self):
        app = create_app(make_settings())
        app.state.database.wait_until_ready = AsyncMock(side_effect=ConnectionRefusedError())
        app.state.database.dispose = AsyncMock()

        with pytest.raises(ConnectionRefusedError):
            async with lifespan(app):
                pass

        app.state.database.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reachable_database_starts_and_disposes(self, tmp_path):
        app = create_app(make_settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'up.db'}"))
        app.state.database.dispose = AsyncMock(side_effect=app.state.database.dispose)

        async with lifespan(app):
            app.state.database.dispose.assert_not_awaited()

        app.state.database.dispose.assert_awaited_once()
