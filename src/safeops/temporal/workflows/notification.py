"""
Notification Workflow.

Deliver one transition notification to the external notification service.
Started fire-and-forget by the API; the transition that triggered it has
already committed and never waits on this workflow.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.safeops.temporal.activities import DeliverNotificationInput, deliver_notification


@workflow.defn
class NotificationWorkflow:
    """Deliver a notification with bounded retries."""

    @workflow.run
    async def run(self, input: DeliverNotificationInput) -> bool:
        return await workflow.execute_activity(
            deliver_notification,
            input,
            start_to_close_timeout=timedelta(seconds=30),
            retry_policy=RetryPolicy(
                maximum_attempts=5,
                initial_interval=timedelta(seconds=2),
            ),
        )
