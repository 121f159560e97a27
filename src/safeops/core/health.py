"""Operational endpoints: ``/health`` and ``/metrics``."""

import secrets

from fastapi import Depends, FastAPI, HTTPException, Security, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text

from src.safeops.core.config import Settings, get_settings
from src.safeops.core.db import get_session
from src.safeops.core.redis import redis_status

_metrics_key = APIKeyHeader(name="X-Metrics-Key", auto_error=False)


async def database_status() -> str:
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        return f"unhealthy: {e}"
    return "healthy"


def overall_status(database: str, redis: str) -> str:
    """The database is required; a broken change feed only degrades."""
    if database != "healthy":
        return "unhealthy"
    if redis.startswith("unhealthy"):
        return "degraded"
    return "healthy"


def setup_health_endpoint(app: FastAPI) -> None:
    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        database = await database_status()
        redis = await redis_status()
        report = {
            "status": overall_status(database, redis),
            "database": database,
            "redis": redis,
        }
        code = status.HTTP_200_OK if report["status"] == "healthy" else 503
        return JSONResponse(content=report, status_code=code)


def require_metrics_key(
    api_key: str | None = Security(_metrics_key),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.metrics_api_key
    if expected and (api_key is None or not secrets.compare_digest(api_key, expected)):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing metrics API key",
        )


def setup_metrics(app: FastAPI) -> None:
    """Prometheus request metrics; ``/metrics`` needs a key when one is configured."""
    Instrumentator().instrument(app).expose(
        app, endpoint="/metrics", dependencies=[Depends(require_metrics_key)]
    )
