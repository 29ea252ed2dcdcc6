"""
Composition root: single place where concrete implementations are wired.

Builds settings, the database connection and the process-wide connection
cache. The cache is created here and handed to whoever needs it (middleware,
routers via app.state); nothing reaches it through a module global.
"""

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.infrastructure.persistence.connection_cache import ConnectionCache
from portfolio_api.app.infrastructure.persistence.factory import (
    create_connection_cache,
    create_database_connection,
)
from portfolio_api.app.ports.database_connection import DatabaseConnection


class AppDependencies:
    """Holds wired dependencies and their lifecycle. Built only in composition root."""

    def __init__(
        self,
        *,
        settings: Settings,
        database: DatabaseConnection,
        connection_cache: ConnectionCache,
    ) -> None:
        self._settings = settings
        self._database = database
        self._connection_cache = connection_cache

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def database(self) -> DatabaseConnection:
        return self._database

    @property
    def connection_cache(self) -> ConnectionCache:
        return self._connection_cache

    async def connect(self) -> None:
        """Startup connect for a persistent process. Serverless processes connect per request instead."""
        await self._database.connect_with_backoff()

    async def close(self) -> None:
        await self._database.close()


def create_app_dependencies(settings: Settings | None = None) -> AppDependencies:
    """
    Composition root: build all app dependencies in one place.
    Caller owns lifecycle (connect/close).
    """
    _settings = settings or Settings()
    database = create_database_connection(_settings)
    cache = create_connection_cache(_settings, database)

    return AppDependencies(
        settings=_settings,
        database=database,
        connection_cache=cache,
    )
