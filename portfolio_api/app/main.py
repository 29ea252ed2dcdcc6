from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from portfolio_api.app.composition import AppDependencies, create_app_dependencies
from portfolio_api.app.config.settings import Settings
from portfolio_api.app.core import SERVICE_NAME
from portfolio_api.app.errors import register_exception_handlers
from portfolio_api.app.middleware.database import DatabaseConnectionMiddleware
from portfolio_api.app.routers.diagnostics import diagnostics_router
from portfolio_api.app.routers.health import health_router


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def create_app(
    settings: Settings | None = None,
    dependencies: AppDependencies | None = None,
) -> FastAPI:
    """Build the API for the resolved deployment mode.

    persistent: the lifespan connects once, with backoff, before serving.
    serverless: the lifespan may never run, so every request goes through
    DatabaseConnectionMiddleware and the shared connection cache instead.
    """
    deps = dependencies or create_app_dependencies(settings)
    settings = deps.settings
    serverless = settings.serverless

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _log("api_starting", deployment_mode=settings.resolved_deployment_mode)
        try:
            if not serverless:
                try:
                    await deps.connect()
                except Exception as e:
                    logger.exception("database connect failed: {}", e)
                    raise
            yield
        finally:
            _log("api_stopping")
            await deps.close()

    app = FastAPI(
        title="Portfolio API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = deps.database
    app.state.connection_cache = deps.connection_cache

    if serverless:
        app.add_middleware(
            DatabaseConnectionMiddleware,
            cache=deps.connection_cache,
            expose_errors=settings.is_development,
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)
    app.include_router(health_router)
    app.include_router(diagnostics_router)
    return app


app = create_app()
