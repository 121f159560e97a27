"""
Live Status Refresh Workflow.

Rebuild the materialized workflow_live_status rollups from instances and
step history. Started on demand for one tenant, or on a cron schedule
(LIVE_STATUS_REFRESH_SCHEDULE) for every tenant with instances.

Idempotent: each tenant refresh is an upsert of a pure fold, so reruns and
retries converge on the same rows.
"""

from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from src.safeops.temporal.activities import (
        list_live_status_tenants,
        refresh_tenant_live_status,
    )

_RETRY = RetryPolicy(maximum_attempts=3, initial_interval=timedelta(seconds=2))


@workflow.defn
class LiveStatusRefreshWorkflow:
    """Refresh live status for one tenant, or for all tenants when none is given."""

    @workflow.run
    async def run(self, tenant_id: str | None = None) -> dict[str, int]:
        """
        Returns:
            dict mapping tenant id to the number of workflow keys written
        """
        if tenant_id:
            tenant_ids = [tenant_id]
        else:
            tenant_ids = await workflow.execute_activity(
                list_live_status_tenants,
                start_to_close_timeout=timedelta(minutes=1),
                retry_policy=_RETRY,
            )

        result: dict[str, int] = {}
        for tid in tenant_ids:
            result[tid] = await workflow.execute_activity(
                refresh_tenant_live_status,
                tid,
                start_to_close_timeout=timedelta(minutes=5),
                retry_policy=_RETRY,
            )

        workflow.logger.info(f"Live status refresh complete for {len(result)} tenant(s)")
        return result
