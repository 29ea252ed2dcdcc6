from __future__ import annotations

import asyncio
import os

import pytest

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.infrastructure.persistence.connection_cache import ConnectionCache
from portfolio_api.app.infrastructure.persistence.constants import ConnectionState
from portfolio_api.app.infrastructure.persistence.mongo.mongo_connection import MongoConnection

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.getenv("MONGODB_URI"), reason="MONGODB_URI not set"),
]


def _build_settings(**overrides) -> Settings:
    values = {
        "mongodb_uri": os.getenv("MONGODB_URI", "mongodb://localhost:27017/portfolio_db"),
        "database_connection_timeout_ms": int(os.getenv("DATABASE_CONNECTION_TIMEOUT_MS", "5000")),
        "database_connect_timeout_seconds": float(os.getenv("DATABASE_CONNECT_TIMEOUT_SECONDS", "10")),
    }
    values.update(overrides)
    return Settings(**values)


def test_concurrent_acquires_share_live_client() -> None:
    async def _run() -> None:
        database = MongoConnection(_build_settings())
        cache = ConnectionCache(database, connect_timeout_seconds=10.0)
        try:
            clients = await asyncio.gather(*(cache.acquire() for _ in range(5)))
            assert all(c is clients[0] for c in clients)
            assert database.state == ConnectionState.CONNECTED
            ping = await clients[0].admin.command("ping")
            assert ping.get("ok") == 1
            assert await database.ping() is True
        finally:
            await database.close()

    asyncio.run(_run())


def test_unreachable_server_fails_and_clears_cache() -> None:
    async def _run() -> None:
        database = MongoConnection(
            _build_settings(
                mongodb_uri="mongodb://127.0.0.1:1/portfolio_db",
                database_connection_timeout_ms=200,
            )
        )
        cache = ConnectionCache(database, connect_timeout_seconds=5.0)
        results = await asyncio.gather(*(cache.acquire() for _ in range(3)), return_exceptions=True)
        assert all(isinstance(r, Exception) for r in results)
        assert cache.pending is False
        assert database.state == ConnectionState.DISCONNECTED

    asyncio.run(_run())
