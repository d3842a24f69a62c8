"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from searchsync.config import Settings
from searchsync.engine import SyncEngine
from searchsync.middleware.auth import APIKeyMiddleware
from searchsync.middleware.logging import RequestLoggingMiddleware
from searchsync.routes import admin, documents, health

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the engine on startup and close it on shutdown.

    An engine already attached to app.state (tests, embedding hosts) is
    used as-is and left open.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info("api_startup", host=settings.host, port=settings.port)

    owned = getattr(app.state, "engine", None) is None
    if owned:
        app.state.engine = SyncEngine(settings)

    try:
        yield
    finally:
        if owned:
            app.state.engine.close()
        logger.info("api_shutdown")


def create_app(settings: Settings | None = None, engine: SyncEngine | None = None) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        engine: Pre-built engine to serve. Built from settings on startup if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Search Document Sync",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.engine = engine

    if settings.key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.key)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(documents.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
