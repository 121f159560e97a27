"""Notification delivery activity."""

from dataclasses import dataclass, field
from typing import Any

import httpx
from temporalio import activity

from src.safeops.core.config import get_settings


@dataclass
class DeliverNotificationInput:
    entity_id: str
    action: str
    tenant_id: str
    payload: dict[str, Any] = field(default_factory=dict)


@activity.defn
async def deliver_notification(input: DeliverNotificationInput) -> bool:
    """
    POST ``{entityId, action, payload}`` to the configured webhook.

    Idempotency: the workflow id is sent as ``Idempotency-Key`` so a receiver
    can drop duplicates produced by activity retries.

    Args:
        input: DeliverNotificationInput describing the transition

    Returns:
        True if delivered, False if no webhook is configured (logged only)
    """
    settings = get_settings()

    if not settings.notification_webhook_url:
        activity.logger.info(
            f"NOTIFICATION_WEBHOOK_URL not set - {input.action} for {input.entity_id} not sent"
        )
        return False

    body = {
        "entityId": input.entity_id,
        "action": input.action,
        "payload": {**input.payload, "tenantId": input.tenant_id},
    }
    headers = {"Idempotency-Key": activity.info().workflow_id}

    async with httpx.AsyncClient(timeout=settings.notification_timeout_seconds) as client:
        response = await client.post(settings.notification_webhook_url, json=body, headers=headers)
        # Non-2xx raises and lets Temporal retry
        response.raise_for_status()

    activity.logger.info(f"Delivered {input.action} notification for {input.entity_id}")
    return True
