from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from portfolio_api.app.routers.utils import app_settings

diagnostics_router = APIRouter(prefix="/api", tags=["Diagnostics"])


@diagnostics_router.get(
    "/test",
    summary="Deployment smoke test",
    description="Confirms the function is reachable and reports which environment it resolved, without connecting to the database. Secrets are reported only as present/absent.",
    responses={200: {"description": "Endpoint is working."}},
)
async def api_test(request: Request) -> dict:
    settings = app_settings(request)
    environment: dict = {}
    if settings is not None:
        environment = {
            "environment": settings.environment,
            "deployment_mode": settings.resolved_deployment_mode,
            "has_mongodb_uri": bool(settings.mongodb_uri),
        }
    return {
        "status": "OK",
        "message": "API test endpoint is working",
        "timestamp": datetime.now(tz=timezone.utc).isoformat(),
        "environment": environment,
    }
