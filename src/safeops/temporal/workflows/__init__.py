"""Temporal Workflows - Re-exports for worker registration."""

from src.safeops.temporal.workflows.live_status_refresh import LiveStatusRefreshWorkflow
from src.safeops.temporal.workflows.notification import NotificationWorkflow

__all__ = [
    "LiveStatusRefreshWorkflow",
    "NotificationWorkflow",
]
