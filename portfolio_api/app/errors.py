"""Application-wide exception handlers."""
from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.app.config.settings import Settings
from portfolio_api.app.core import SERVICE_NAME


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).warning("")


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Unknown routes answer 404 "Route not found"; unhandled errors answer 500.

    Error detail is added to 500 bodies only in a development environment.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            _log("route_not_found", path=request.url.path)
            return JSONResponse(status_code=404, content={"message": "Route not found"})
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).bind(
            service_name=SERVICE_NAME,
            event="unhandled_error",
            path=request.url.path,
        ).error("")
        content: dict[str, Any] = {"message": "Internal Server Error"}
        if settings.is_development:
            content["error"] = str(exc)
            content["type"] = type(exc).__name__
        return JSONResponse(status_code=500, content=content)
