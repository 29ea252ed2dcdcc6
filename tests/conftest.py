from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI

from portfolio_api.app.composition import AppDependencies
from portfolio_api.app.config.settings import Settings
from portfolio_api.app.constants import DeploymentMode
from portfolio_api.app.infrastructure.persistence.connection_cache import ConnectionCache
from portfolio_api.app.infrastructure.persistence.constants import ConnectionState
from portfolio_api.app.main import create_app


class FakeClient:
    """Stands in for the driver's client handle; tests compare identity only."""


class FakeDatabase:
    """Implements DatabaseConnection for tests.

    Each connect() call pops the next error from `connect_errors` (raising it)
    or succeeds once the list is empty. `hang=True` makes connect() never finish.
    """

    def __init__(
        self,
        *,
        ping_ok: bool = True,
        connect_delay: float = 0.0,
        connect_errors: list[Exception] | None = None,
        hang: bool = False,
        state: ConnectionState = ConnectionState.DISCONNECTED,
    ) -> None:
        self._ping_ok = ping_ok
        self._connect_delay = connect_delay
        self._connect_errors = list(connect_errors or [])
        self._hang = hang
        self._state = state
        self._client = FakeClient()
        self._settled = asyncio.Event()
        self._settled.set()
        self.connect_calls = 0
        self.backoff_connect_calls = 0
        self.close_calls = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def client(self) -> FakeClient:
        if self._state != ConnectionState.CONNECTED:
            raise RuntimeError("db_not_connected")
        return self._client

    async def connect(self) -> FakeClient:
        self.connect_calls += 1
        self._state = ConnectionState.CONNECTING
        self._settled.clear()
        try:
            if self._hang:
                await asyncio.Event().wait()
            if self._connect_delay:
                await asyncio.sleep(self._connect_delay)
            if self._connect_errors:
                raise self._connect_errors.pop(0)
            self._state = ConnectionState.CONNECTED
            return self._client
        finally:
            if self._state != ConnectionState.CONNECTED:
                self._state = ConnectionState.DISCONNECTED
            self._settled.set()

    async def connect_with_backoff(self) -> FakeClient:
        self.backoff_connect_calls += 1
        self._state = ConnectionState.CONNECTED
        return self._client

    async def wait_until_ready(self) -> bool:
        await self._settled.wait()
        return self._state == ConnectionState.CONNECTED

    async def ping(self) -> bool:
        return self._ping_ok

    async def close(self) -> None:
        self.close_calls += 1
        self._state = ConnectionState.DISCONNECTED

    def drop(self) -> None:
        """Simulate the driver losing its connection."""
        self._state = ConnectionState.DISCONNECTED


def make_settings(**overrides) -> Settings:
    values = {
        "mongodb_uri": "mongodb://localhost:27017/portfolio_test",
        "deployment_mode": DeploymentMode.PERSISTENT,
        "environment": "production",
        "vercel": "",
        "aws_lambda_function_name": "",
        "database_connect_timeout_seconds": 1.0,
    }
    values.update(overrides)
    return Settings(**values)


def make_dependencies(database: FakeDatabase, **settings_overrides) -> AppDependencies:
    settings = make_settings(**settings_overrides)
    return AppDependencies(
        settings=settings,
        database=database,
        connection_cache=ConnectionCache(
            database,
            connect_timeout_seconds=settings.database_connect_timeout_seconds,
        ),
    )


def make_app(database: FakeDatabase, **settings_overrides) -> FastAPI:
    return create_app(dependencies=make_dependencies(database, **settings_overrides))


@pytest.fixture()
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture()
def test_app(fake_database: FakeDatabase) -> FastAPI:
    return make_app(fake_database)


@pytest.fixture()
def serverless_app(fake_database: FakeDatabase) -> FastAPI:
    return make_app(fake_database, deployment_mode=DeploymentMode.SERVERLESS)
