"""
Temporal worker process: notification delivery and the live status cron.

Run with:
    uv run python -m src.safeops.temporal.worker
    uv run python -m src.safeops.temporal.worker --no-schedule  # Skip the live status cron
"""

import argparse
import asyncio

import uvicorn
from fastapi import FastAPI
from temporalio.client import Client
from temporalio.exceptions import WorkflowAlreadyStartedError
from temporalio.worker import Worker

from src.safeops.core.config import Settings, get_settings
from src.safeops.core.db import dispose_engine
from src.safeops.core.logging import get_logger, setup_logging
from src.safeops.temporal.activities import (
    deliver_notification,
    list_live_status_tenants,
    refresh_tenant_live_status,
)
from src.safeops.temporal.workflows import LiveStatusRefreshWorkflow, NotificationWorkflow

logger = get_logger(__name__)

WORKER_HEALTH_PORT = 8001
LIVE_STATUS_SCHEDULE_ID = "live-status-refresh-schedule"
MAX_CONCURRENCY = 50

WORKFLOWS = [NotificationWorkflow, LiveStatusRefreshWorkflow]
ACTIVITIES = [deliver_notification, list_live_status_tenants, refresh_tenant_live_status]


def build_worker(client: Client, settings: Settings) -> Worker:
    return Worker(
        client,
        task_queue=settings.temporal_task_queue,
        workflows=WORKFLOWS,
        activities=ACTIVITIES,
        max_concurrent_activities=MAX_CONCURRENCY,
        max_concurrent_workflow_tasks=MAX_CONCURRENCY,
    )


async def start_live_status_schedule(client: Client) -> bool:
    """Start the cron-driven live status refresh if one is configured.

    Returns:
        True if a new cron workflow was started
    """
    settings = get_settings()
    cron = settings.live_status_refresh_schedule
    if not cron:
        return False

    try:
        await client.start_workflow(
            LiveStatusRefreshWorkflow.run,
            None,
            id=LIVE_STATUS_SCHEDULE_ID,
            task_queue=settings.temporal_task_queue,
            cron_schedule=cron,
        )
    except WorkflowAlreadyStartedError:
        logger.info("Live status schedule already running", schedule_id=LIVE_STATUS_SCHEDULE_ID)
        return False

    logger.info("Live status schedule started", cron=cron)
    return True


def health_app(task_queue: str) -> FastAPI:
    """Liveness/readiness endpoints for the worker pod."""
    app = FastAPI(title="SafeOps Worker", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "temporal-worker", "task_queue": task_queue}

    @app.get("/ready")
    async def ready() -> dict[str, str]:
        return {"status": "ready"}

    return app


async def serve_health(task_queue: str, port: int = WORKER_HEALTH_PORT) -> None:
    server = uvicorn.Server(
        uvicorn.Config(health_app(task_queue), host="0.0.0.0", port=port, log_level="warning")
    )
    await server.serve()


async def main(skip_schedule: bool) -> None:
    settings = get_settings()
    setup_logging(settings.debug)

    client = await Client.connect(settings.temporal_host, namespace=settings.temporal_namespace)
    worker = build_worker(client, settings)
    if not skip_schedule:
        await start_live_status_schedule(client)

    logger.info("Worker polling", task_queue=settings.temporal_task_queue)
    health_task = asyncio.create_task(serve_health(settings.temporal_task_queue))
    try:
        await worker.run()
    finally:
        health_task.cancel()
        await dispose_engine()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="SafeOps Temporal worker")
    parser.add_argument(
        "--no-schedule",
        action="store_true",
        help="Do not start the scheduled live status refresh",
    )
    asyncio.run(main(parser.parse_args().no_schedule))
