"""Tests for notification dispatch and delivery."""

import json
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import httpx
import pytest
from temporalio.testing import ActivityEnvironment

from src.safeops.core.config import get_settings
from src.safeops.core.exceptions import NotificationDispatchError
from src.safeops.temporal.activities import notifications
from src.safeops.temporal.activities.notifications import (
    DeliverNotificationInput,
    deliver_notification,
)
from src.safeops.temporal.workflows import NotificationWorkflow
from src.safeops.services.notification_service import NotificationDispatcher

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.start_workflow = AsyncMock()
    return client


@pytest.fixture
def dispatcher(mock_client) -> NotificationDispatcher:
    return NotificationDispatcher(client_factory=AsyncMock(return_value=mock_client))


class TestDispatcher:
    def test_workflow_ids_are_unique_per_dispatch(self):
        entity_id = uuid4()

        first = NotificationDispatcher.get_workflow_id("close_on_spot", entity_id)
        second = NotificationDispatcher.get_workflow_id("close_on_spot", entity_id)

        assert first.startswith(f"notify-close_on_spot-{entity_id}-")
        assert first != second

    async def test_dispatch_starts_workflow(self, dispatcher, mock_client, tenant_id):
        entity_id = uuid4()

        workflow_id = await dispatcher.dispatch(
            entity_id, tenant_id, "hsse_validation_accept", {"to_status": "closed"}
        )

        args, kwargs = mock_client.start_workflow.call_args
        assert args[0] == NotificationWorkflow.run
        assert args[1] == DeliverNotificationInput(
            entity_id=str(entity_id),
            action="hsse_validation_accept",
            tenant_id=str(tenant_id),
            payload={"to_status": "closed"},
        )
        assert kwargs["id"] == workflow_id
        assert kwargs["task_queue"] == get_settings().temporal_task_queue

    async def test_dispatch_wraps_failures(self, dispatcher, mock_client, tenant_id):
        mock_client.start_workflow.side_effect = RuntimeError("temporal down")

        with pytest.raises(NotificationDispatchError) as exc_info:
            await dispatcher.dispatch(uuid4(), tenant_id, "submit")

        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_notify_swallows_failures(self, dispatcher, mock_client, tenant_id):
        mock_client.start_workflow.side_effect = RuntimeError("temporal down")

        assert await dispatcher.notify(uuid4(), tenant_id, "submit") is False

    async def test_notify_swallows_connect_failures(self, tenant_id):
        dispatcher = NotificationDispatcher(
            client_factory=AsyncMock(side_effect=ConnectionError("refused"))
        )

        assert await dispatcher.notify(uuid4(), tenant_id, "submit") is False

    async def test_notify_success(self, dispatcher, tenant_id):
        assert await dispatcher.notify(uuid4(), tenant_id, "submit") is True


class TestDeliverNotification:
    @pytest.fixture
    def notification(self) -> DeliverNotificationInput:
        return DeliverNotificationInput(
            entity_id="obs-1",
            action="close_on_spot",
            tenant_id="tenant-1",
            payload={"to_status": "closed"},
        )

    @pytest.fixture
    def webhook(self, monkeypatch):
        """Point the activity at a mock webhook and capture the requests it sends."""
        requests: list[httpx.Request] = []
        status = {"code": 200}

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(status["code"])

        settings = get_settings().model_copy(
            update={"notification_webhook_url": "https://hooks.example.com/hsse"}
        )
        monkeypatch.setattr(notifications, "get_settings", lambda: settings)

        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            notifications.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )
        return requests, status

    async def test_no_webhook_configured(self, notification, monkeypatch):
        settings = get_settings().model_copy(update={"notification_webhook_url": None})
        monkeypatch.setattr(notifications, "get_settings", lambda: settings)

        assert await ActivityEnvironment().run(deliver_notification, notification) is False

    async def test_posts_payload_with_idempotency_key(self, notification, webhook):
        requests, _ = webhook

        delivered = await ActivityEnvironment().run(deliver_notification, notification)

        assert delivered is True
        assert len(requests) == 1
        body = json.loads(requests[0].content)
        assert body == {
            "entityId": "obs-1",
            "action": "close_on_spot",
            "payload": {"to_status": "closed", "tenantId": "tenant-1"},
        }
        assert requests[0].headers["Idempotency-Key"]

    async def test_server_error_raises_for_retry(self, notification, webhook):
        _, status = webhook
        status["code"] = 502

        with pytest.raises(httpx.HTTPStatusError):
            await ActivityEnvironment().run(deliver_notification, notification)
