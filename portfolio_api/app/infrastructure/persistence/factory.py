"""Database connection factory: selects implementation from config. Only place that imports concrete connections."""
from __future__ import annotations

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.infrastructure.persistence.connection_cache import ConnectionCache
from portfolio_api.app.infrastructure.persistence.mongo.mongo_connection import MongoConnection
from portfolio_api.app.ports.database_connection import DatabaseConnection


def create_database_connection(settings: Settings) -> DatabaseConnection:
    backend = settings.database_backend.strip().lower()

    if backend in ("mongo", "mongodb"):
        return MongoConnection(settings)

    raise ValueError(f"Unsupported database backend: {backend}")


def create_connection_cache(settings: Settings, database: DatabaseConnection) -> ConnectionCache:
    """One cache per process; it shares the connection used by readiness checks."""
    return ConnectionCache(
        database,
        connect_timeout_seconds=settings.database_connect_timeout_seconds,
    )
