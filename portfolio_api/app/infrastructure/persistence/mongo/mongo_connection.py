import asyncio
import inspect
from typing import Any

from loguru import logger
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.core import SERVICE_NAME
from portfolio_api.app.core.backoff import exponential_backoff
from portfolio_api.app.infrastructure.persistence.constants import ConnectionState


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


async def _discard_client(client: AsyncIOMotorClient) -> None:
    res = client.close()
    if inspect.isawaitable(res):
        await res


class MongoConnection:
    """DatabaseConnection implementation using MongoDB.

    `state` is the readiness every caller trusts. `connect()` makes exactly one
    attempt; `connect_with_backoff()` is the retrying variant used at startup
    of a persistent process.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._state = ConnectionState.DISCONNECTED
        self._client: AsyncIOMotorClient | None = None
        self._settled = asyncio.Event()
        self._settled.set()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def client(self) -> AsyncIOMotorClient:
        if not self._client or self._state != ConnectionState.CONNECTED:
            raise RuntimeError("db_not_connected")
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """Default database of the URI, or DATABASE_NAME when the URI names none."""
        return self.client.get_default_database(self._settings.database_name)

    async def connect(self) -> AsyncIOMotorClient:
        if self._state == ConnectionState.CONNECTED and self._client is not None:
            return self._client

        self._state = ConnectionState.CONNECTING
        self._settled.clear()
        client: AsyncIOMotorClient | None = None
        try:
            # Motor never queues commands while disconnected, so a failed
            # attempt leaves nothing buffered behind.
            client = AsyncIOMotorClient(
                self._settings.mongodb_uri,
                serverSelectionTimeoutMS=self._settings.database_connection_timeout_ms,
            )
            await client.admin.command("ping")
            self._client = client
            self._state = ConnectionState.CONNECTED
            _log("db_connected")
            return client
        finally:
            if self._state != ConnectionState.CONNECTED:
                self._state = ConnectionState.DISCONNECTED
                if client is not None:
                    await _discard_client(client)
            self._settled.set()

    async def connect_with_backoff(self) -> AsyncIOMotorClient:
        attempt = 0
        backoff = exponential_backoff(
            self._settings.initial_backoff_seconds,
            self._settings.max_backoff_seconds,
            self._settings.backoff_multiplier,
            self._settings.max_connection_attempts,
        )
        async for delay in backoff:
            attempt += 1
            _log("db_connect_attempt", attempt=attempt, delay=delay)
            try:
                return await self.connect()
            except Exception as e:
                logger.warning("db connect failed: {}", e)
                if attempt >= self._settings.max_connection_attempts:
                    _log("db_connect_failed", attempt=attempt)
                    raise
        raise RuntimeError("db connect failed")

    async def wait_until_ready(self) -> bool:
        """Wait for an in-progress attempt to settle. True if it ended connected."""
        await self._settled.wait()
        return self._state == ConnectionState.CONNECTED

    async def ping(self) -> bool:
        """Return True if the database responds to ping; False if not connected or any error."""
        if not self._client:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:
            return False

    async def close(self) -> None:
        if self._client:
            await _discard_client(self._client)
            self._client = None
        self._state = ConnectionState.DISCONNECTED
        self._settled.set()
