from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.safeops.api.middlewares import setup_middlewares
from src.safeops.api.v1.router import api_router
from src.safeops.core.config import get_settings
from src.safeops.core.db import dispose_engine
from src.safeops.core.exceptions import setup_exception_handlers
from src.safeops.core.health import setup_health_endpoint, setup_metrics
from src.safeops.core.logging import get_logger, setup_logging
from src.safeops.core.redis import close_redis
from src.safeops.temporal.client import close_temporal_client

logger = get_logger(__name__)

OPENAPI_TAGS = [
    {"name": "incidents", "description": "Observation approval workflow and audit trail"},
    {"name": "workflows", "description": "Generic workflow tracking and live status"},
    {"name": "approvals", "description": "Unified pending approvals feed"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Application starting", app_name=settings.app_name)

    yield

    # Reverse order of acquisition; the engine goes last.
    await close_redis()
    await close_temporal_client()
    await dispose_engine()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    docs = settings.enable_openapi

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant HSSE workflow core",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
    )

    setup_exception_handlers(app)
    setup_middlewares(app, settings)
    app.include_router(api_router)
    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()
