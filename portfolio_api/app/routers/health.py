import asyncio

from typing import Any
from fastapi import APIRouter, Request, Response
from loguru import logger

from portfolio_api.app.routers.utils import readiness_ping_timeout_seconds
from portfolio_api.app.core import SERVICE_NAME

health_router = APIRouter(tags=["Health"])

def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@health_router.get(
    "/api/health",
    summary="API health",
    description="Returns 200 with a short status message while the API process is serving requests.",
    responses={200: {"description": "API is running."}},
)
async def api_health() -> dict:
    return {"status": "OK", "message": "Portfolio API is running"}


@health_router.get(
    "/health/live",
    summary="Liveness check",
    description="Returns 200 if the API process is running. Never touches the database.",
    responses={200: {"description": "Service is alive."}},
)
async def live() -> dict:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    summary="Readiness check",
    description="Returns 200 only when the database (MongoDB) is connected and answers a ping.",
    responses={
        200: {"description": "Database is ready."},
        503: {"description": "Database not ready."},
    },
)
async def ready(request: Request) -> Response:
    database = getattr(request.app.state, "database", None)
    if database is None:
        _log("components_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not database.ready:
        _log("db_not_connected")
        return Response(status_code=503, content="Database not ready")

    timeout_s = readiness_ping_timeout_seconds(request)
    try:
        ping_ok = await asyncio.wait_for(database.ping(), timeout=timeout_s)
    except asyncio.TimeoutError:
        _log("db_ping_timeout")
        return Response(status_code=503, content="Database not ready")
    if not ping_ok:
        _log("db_not_ready")
        return Response(status_code=503, content="Database not ready")
    return Response(status_code=200, content="OK")
