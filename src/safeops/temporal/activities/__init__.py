"""
Temporal Activities - Fine-grained, idempotent operations.

Activities should be:
1. Idempotent - Safe to retry
2. Fine-grained - Do one thing well
3. Side-effect aware - External calls go here, not in workflows
"""

from src.safeops.temporal.activities.live_status import (
    list_live_status_tenants,
    refresh_tenant_live_status,
)
from src.safeops.temporal.activities.notifications import (
    DeliverNotificationInput,
    deliver_notification,
)

__all__ = [
    # Dataclasses
    "DeliverNotificationInput",
    # Activities
    "deliver_notification",
    "list_live_status_tenants",
    "refresh_tenant_live_status",
]
