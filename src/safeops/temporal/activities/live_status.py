"""Live status materialization activities."""

from uuid import UUID

from temporalio import activity

from src.safeops.core.db import get_session


@activity.defn
async def list_live_status_tenants() -> list[str]:
    """
    List tenants that have tracked workflow instances.

    Returns:
        Tenant ids as strings (Temporal payloads stay JSON-friendly)
    """
    async with get_session() as session:
        from src.safeops.repositories import WorkflowInstanceRepository

        tenant_ids = await WorkflowInstanceRepository(session).list_tenant_ids()

    activity.logger.info(f"Found {len(tenant_ids)} tenant(s) with workflow instances")
    return [str(t) for t in tenant_ids]


@activity.defn
async def refresh_tenant_live_status(tenant_id: str) -> int:
    """
    Rebuild the workflow_live_status rows of one tenant.

    Idempotent: the rollup is a pure fold over the store and is written with
    an upsert keyed on (tenant_id, workflow_key), so a retry rewrites the same
    rows.

    Args:
        tenant_id: Tenant to refresh

    Returns:
        Number of workflow keys written
    """
    async with get_session() as session:
        from src.safeops.repositories import (
            WorkflowInstanceRepository,
            WorkflowLiveStatusRepository,
            WorkflowStepHistoryRepository,
        )
        from src.safeops.services.live_status import LiveStatusService

        service = LiveStatusService(
            WorkflowInstanceRepository(session),
            WorkflowStepHistoryRepository(session),
            WorkflowLiveStatusRepository(session),
            session,
        )
        rollups = await service.refresh(UUID(tenant_id))

    activity.logger.info(f"Refreshed {len(rollups)} workflow key(s) for tenant {tenant_id}")
    return len(rollups)
