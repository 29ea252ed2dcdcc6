"""Errors raised while acquiring a database connection.

Driver-level failures (pymongo `ConnectionFailure`, `ServerSelectionTimeoutError`,
OS-level refusals) are not wrapped; they reach callers as raised.
"""
from __future__ import annotations


class DatabaseUnavailableError(RuntimeError):
    """The database could not be made ready for this request."""


class ConnectTimeoutError(DatabaseUnavailableError):
    """A connect attempt did not settle within its bound."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"db_connect_timeout after {timeout_seconds}s")
