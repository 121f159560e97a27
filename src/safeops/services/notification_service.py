"""Best-effort notification dispatch for workflow transitions."""

from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID, uuid4

from temporalio.client import Client

from src.safeops.core.config import get_settings
from src.safeops.core.exceptions import NotificationDispatchError
from src.safeops.core.logging import get_logger
from src.safeops.temporal.activities import DeliverNotificationInput
from src.safeops.temporal.client import get_temporal_client
from src.safeops.temporal.workflows import NotificationWorkflow

logger = get_logger(__name__)


class NotificationDispatcher:
    """Hands a notification to the Temporal worker and returns immediately.

    Delivery retries happen inside the workflow, never in the request.
    """

    def __init__(self, client_factory: Callable[[], Awaitable[Client]] = get_temporal_client):
        self.client_factory = client_factory

    @staticmethod
    def get_workflow_id(action: str, entity_id: UUID) -> str:
        """Unique per dispatch; the same entity may legitimately notify twice."""
        return f"notify-{action}-{entity_id}-{uuid4().hex[:8]}"

    async def dispatch(
        self,
        entity_id: UUID,
        tenant_id: UUID,
        action: str,
        payload: dict[str, Any] | None = None,
    ) -> str:
        """Start a NotificationWorkflow.

        Returns:
            The workflow id

        Raises:
            NotificationDispatchError: If the workflow could not be started
        """
        workflow_id = self.get_workflow_id(action, entity_id)
        try:
            client = await self.client_factory()
            await client.start_workflow(
                NotificationWorkflow.run,
                DeliverNotificationInput(
                    entity_id=str(entity_id),
                    action=action,
                    tenant_id=str(tenant_id),
                    payload=payload or {},
                ),
                id=workflow_id,
                task_queue=get_settings().temporal_task_queue,
            )
        except Exception as e:
            raise NotificationDispatchError(
                f"Failed to start notification workflow: {e}",
                entity_id=entity_id,
                action=action,
            ) from e
        return workflow_id

    async def notify(
        self,
        entity_id: UUID,
        tenant_id: UUID,
        action: str,
        payload: dict[str, Any] | None = None,
    ) -> bool:
        """Fire-and-forget variant of ``dispatch``. Never raises.

        Returns:
            True if the workflow was started, False if dispatch failed
        """
        try:
            await self.dispatch(entity_id, tenant_id, action, payload)
            return True
        except NotificationDispatchError as e:
            logger.warning(
                "Notification dispatch failed",
                entity_id=str(entity_id),
                action=action,
                error=e.message,
            )
            return False
