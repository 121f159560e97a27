"""Tests for the worker's live status cron registration."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from temporalio.exceptions import WorkflowAlreadyStartedError

from src.safeops.core.config import get_settings
from src.safeops.temporal import worker
from src.safeops.temporal.workflows import LiveStatusRefreshWorkflow

pytestmark = pytest.mark.unit


@pytest.fixture
def scheduled(monkeypatch):
    settings = get_settings().model_copy(
        update={"live_status_refresh_schedule": "*/15 * * * *"}
    )
    monkeypatch.setattr(worker, "get_settings", lambda: settings)
    return settings


async def test_no_schedule_configured(monkeypatch):
    settings = get_settings().model_copy(update={"live_status_refresh_schedule": None})
    monkeypatch.setattr(worker, "get_settings", lambda: settings)
    client = MagicMock()
    client.start_workflow = AsyncMock()

    assert await worker.start_live_status_schedule(client) is False
    client.start_workflow.assert_not_awaited()


async def test_starts_cron_workflow(scheduled):
    client = MagicMock()
    client.start_workflow = AsyncMock()

    assert await worker.start_live_status_schedule(client) is True

    args, kwargs = client.start_workflow.call_args
    assert args == (LiveStatusRefreshWorkflow.run, None)
    assert kwargs["id"] == worker.LIVE_STATUS_SCHEDULE_ID
    assert kwargs["cron_schedule"] == "*/15 * * * *"
    assert kwargs["task_queue"] == scheduled.temporal_task_queue


async def test_already_running_is_not_an_error(scheduled):
    client = MagicMock()
    client.start_workflow = AsyncMock(
        side_effect=WorkflowAlreadyStartedError(
            worker.LIVE_STATUS_SCHEDULE_ID, "LiveStatusRefreshWorkflow"
        )
    )

    assert await worker.start_live_status_schedule(client) is False


def test_worker_health_endpoints():
    client = TestClient(worker.health_app("safeops-queue"))

    assert client.get("/health").json()["task_queue"] == "safeops-queue"
    assert client.get("/ready").json() == {"status": "ready"}
