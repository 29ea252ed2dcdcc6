"""Process-wide cache of the database connection for recycled-process deployments.

A serverless host may start the process cold for any request and run many
requests concurrently on one event loop. `ConnectionCache.acquire()` lets all
of them share a single connect attempt:

- driver reports CONNECTED: the driver's current client is returned, no connect call;
- an attempt is pending: the caller awaits that same attempt;
- driver reports CONNECTING for an attempt this cache did not start (e.g. the
  startup routine): the caller waits on the driver's own readiness signal;
- otherwise: exactly one `connect()` is started and recorded as pending.

The pending slot is read and written with no await in between, so the event
loop needs no lock. Failures are never retried here; the slot is cleared and
the next request makes a fresh attempt.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable

from loguru import logger

from portfolio_api.app.core import SERVICE_NAME
from portfolio_api.app.infrastructure.persistence.constants import ConnectionState
from portfolio_api.app.infrastructure.persistence.exceptions import (
    ConnectTimeoutError,
    DatabaseUnavailableError,
)
from portfolio_api.app.ports.database_connection import DatabaseConnection


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class ConnectionCache:
    def __init__(self, database: DatabaseConnection, *, connect_timeout_seconds: float) -> None:
        self._database = database
        self._connect_timeout_seconds = connect_timeout_seconds
        self._active: Any | None = None
        self._pending: asyncio.Task[Any] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._database.state

    @property
    def database(self) -> DatabaseConnection:
        return self._database

    @property
    def active(self) -> Any | None:
        return self._active

    @property
    def pending(self) -> bool:
        return self._pending is not None

    async def acquire(self) -> Any:
        state = self._database.state
        if state is ConnectionState.CONNECTED:
            self._active = self._database.client
            return self._active

        self._active = None
        if self._pending is None:
            if state is ConnectionState.CONNECTING:
                self._pending = asyncio.ensure_future(self._await_foreign_attempt())
            else:
                self._pending = asyncio.ensure_future(self._establish())

        # Shielded: a caller that goes away must not cancel an attempt others share.
        await asyncio.shield(self._pending)

        if self._database.state is not ConnectionState.CONNECTED:
            raise DatabaseUnavailableError("database_not_ready")
        self._active = self._database.client
        return self._active

    async def _bounded(self, awaitable: Awaitable[Any]) -> Any:
        """Await a driver call under the connect timeout.

        Only an expired deadline becomes ConnectTimeoutError; a TimeoutError
        raised by the driver itself is re-raised unchanged.
        """
        try:
            return await asyncio.wait_for(
                _driver_call(awaitable),
                timeout=self._connect_timeout_seconds,
            )
        except _DriverTimeout as wrapped:
            raise wrapped.error from None
        except asyncio.TimeoutError as exc:
            _log("db_connect_timeout", timeout=self._connect_timeout_seconds)
            raise ConnectTimeoutError(self._connect_timeout_seconds) from exc

    async def _establish(self) -> Any:
        _log("db_connect_attempt", timeout=self._connect_timeout_seconds)
        try:
            client = await self._bounded(self._database.connect())
        except ConnectTimeoutError:
            raise
        except Exception as e:
            logger.warning("db connect failed: {}", e)
            raise
        finally:
            self._pending = None
        self._active = client
        return client

    async def _await_foreign_attempt(self) -> Any:
        _log("db_wait_foreign_attempt", timeout=self._connect_timeout_seconds)
        try:
            connected = await self._bounded(self._database.wait_until_ready())
        finally:
            self._pending = None
        if not connected:
            raise DatabaseUnavailableError("database_not_ready")
        self._active = self._database.client
        return self._active


class _DriverTimeout(Exception):
    """Carries a driver-raised TimeoutError past wait_for's own timeout handling."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


async def _driver_call(awaitable: Awaitable[Any]) -> Any:
    try:
        return await awaitable
    except (asyncio.TimeoutError, TimeoutError) as exc:
        raise _DriverTimeout(exc) from exc
