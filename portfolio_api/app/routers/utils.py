from __future__ import annotations

from fastapi import Request

from portfolio_api.app.config.settings import Settings

READINESS_PING_TIMEOUT_DEFAULT = 5.0


def app_settings(request: Request) -> Settings | None:
    return getattr(request.app.state, "settings", None)


def readiness_ping_timeout_seconds(request: Request) -> float:
    """Read readiness DB ping timeout from app.state.settings or default."""
    settings = app_settings(request)
    if settings is not None:
        return getattr(settings, "readiness_ping_timeout_seconds", READINESS_PING_TIMEOUT_DEFAULT)
    return READINESS_PING_TIMEOUT_DEFAULT


__all__ = [
    "app_settings",
    "readiness_ping_timeout_seconds",
]
