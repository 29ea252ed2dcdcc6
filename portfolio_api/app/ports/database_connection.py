"""Port: database connection lifecycle. Implementations live in infrastructure."""
from __future__ import annotations

from typing import Any, Protocol

from portfolio_api.app.infrastructure.persistence.constants import ConnectionState


class DatabaseConnection(Protocol):
    """Interface for DB connection lifecycle, readiness and ping."""

    @property
    def state(self) -> ConnectionState: ...

    @property
    def ready(self) -> bool: ...

    @property
    def client(self) -> Any: ...

    async def connect(self) -> Any: ...

    async def connect_with_backoff(self) -> Any: ...

    async def wait_until_ready(self) -> bool: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...
