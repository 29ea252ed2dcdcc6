"""Per-request database readiness for serverless deployments."""
from __future__ import annotations

from typing import Any, Iterable

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from portfolio_api.app.constants import DATABASE_FREE_PATHS, DATABASE_UNAVAILABLE_MESSAGE
from portfolio_api.app.core import SERVICE_NAME
from portfolio_api.app.infrastructure.persistence.connection_cache import ConnectionCache


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


def database_unavailable_body(exc: Exception, *, expose_errors: bool) -> dict[str, Any]:
    body: dict[str, Any] = {"message": DATABASE_UNAVAILABLE_MESSAGE}
    if expose_errors:
        body["error"] = str(exc)
        body["type"] = type(exc).__name__
    return body


class DatabaseConnectionMiddleware(BaseHTTPMiddleware):
    """Hold each request until the connection cache has a ready connection.

    Concurrent requests on a cold process join the same connect attempt. When
    the attempt fails the request is answered with 503 and never reaches a
    route handler; the cache is already clear for the next request.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        cache: ConnectionCache,
        expose_errors: bool = False,
        exempt_paths: Iterable[str] = DATABASE_FREE_PATHS,
    ) -> None:
        super().__init__(app)
        self._cache = cache
        self._expose_errors = expose_errors
        self._exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in self._exempt_paths:
            return await call_next(request)

        try:
            await self._cache.acquire()
        except Exception as exc:
            _log("db_unavailable", path=path, error=str(exc), error_type=type(exc).__name__)
            return JSONResponse(
                status_code=503,
                content=database_unavailable_body(exc, expose_errors=self._expose_errors),
            )
        logger.bind(service_name=SERVICE_NAME, event="request_received", method=request.method, path=path).debug("")
        return await call_next(request)
