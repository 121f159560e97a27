"""Workflow tracking and live status endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.safeops.api.dependencies import (
    CurrentActor,
    LiveStatusServiceDep,
    WorkflowTrackerServiceDep,
)
from src.safeops.schemas import (
    AdvanceRequest,
    BottleneckAlertRead,
    CancelRequest,
    InstanceCreate,
    InstanceListResponse,
    InstanceRead,
    LiveStatusRead,
    StepHistoryRead,
    WorkflowMetricsRead,
)

router = APIRouter(prefix="/workflows", tags=["workflows"])

CursorQuery = Annotated[str | None, Query(description="Pagination cursor")]
LimitQuery = Annotated[int | None, Query(ge=1, description="Items per page")]
WorkflowKeyQuery = Annotated[str | None, Query(description="Filter by workflow key")]


@router.post("/instances", response_model=InstanceRead, status_code=status.HTTP_201_CREATED)
async def start_instance(
    body: InstanceCreate,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> InstanceRead:
    """Start tracking a workflow over an entity."""
    instance = await service.start_instance(
        tenant_id=actor.tenant_id,
        workflow_key=body.workflow_key,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        started_by=actor.actor_id,
        initial_step=body.initial_step,
        step_name=body.step_name,
        participants=body.participants,
        metadata=body.metadata,
        workflow_id=body.workflow_id,
    )
    return InstanceRead.model_validate(instance)


@router.get("/instances", response_model=InstanceListResponse)
async def list_instances(
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
    workflow_key: WorkflowKeyQuery = None,
    cursor: CursorQuery = None,
    limit: LimitQuery = None,
) -> InstanceListResponse:
    """Snapshot of the tenant's instances, newest first.

    Pair with the change feed on ``workflow_instances`` for live updates.
    """
    items, next_cursor, has_more = await service.list_instances(
        actor.tenant_id, workflow_key=workflow_key, cursor=cursor, limit=limit
    )
    return InstanceListResponse(
        items=[InstanceRead.model_validate(i) for i in items],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.get("/instances/{instance_id}/steps", response_model=list[StepHistoryRead])
async def get_step_history(
    instance_id: UUID,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> list[StepHistoryRead]:
    steps = await service.step_history(actor.tenant_id, instance_id)
    return [StepHistoryRead.model_validate(s) for s in steps]


@router.post("/instances/{instance_id}/advance", response_model=InstanceRead)
async def advance_step(
    instance_id: UUID,
    body: AdvanceRequest,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> InstanceRead:
    """Close the current step and move the instance to ``step_id``."""
    instance = await service.advance_step(
        tenant_id=actor.tenant_id,
        instance_id=instance_id,
        step_id=body.step_id,
        actor_id=actor.actor_id,
        action_taken=body.action_taken,
        notes=body.notes,
        step_name=body.step_name,
    )
    return InstanceRead.model_validate(instance)


@router.post("/instances/{instance_id}/complete", response_model=InstanceRead)
async def complete_instance(
    instance_id: UUID,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> InstanceRead:
    instance = await service.complete_instance(actor.tenant_id, instance_id, actor.actor_id)
    return InstanceRead.model_validate(instance)


@router.post("/instances/{instance_id}/cancel", response_model=InstanceRead)
async def cancel_instance(
    instance_id: UUID,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
    body: CancelRequest | None = None,
) -> InstanceRead:
    instance = await service.cancel_instance(
        actor.tenant_id, instance_id, actor.actor_id, body.notes if body else None
    )
    return InstanceRead.model_validate(instance)


@router.post("/instances/{instance_id}/pause", response_model=InstanceRead)
async def pause_instance(
    instance_id: UUID,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> InstanceRead:
    instance = await service.pause_instance(actor.tenant_id, instance_id, actor.actor_id)
    return InstanceRead.model_validate(instance)


@router.post("/instances/{instance_id}/resume", response_model=InstanceRead)
async def resume_instance(
    instance_id: UUID,
    actor: CurrentActor,
    service: WorkflowTrackerServiceDep,
) -> InstanceRead:
    instance = await service.resume_instance(actor.tenant_id, instance_id, actor.actor_id)
    return InstanceRead.model_validate(instance)


@router.get("/live-status", response_model=list[LiveStatusRead])
async def get_live_status(
    actor: CurrentActor,
    service: LiveStatusServiceDep,
    materialized: Annotated[
        bool, Query(description="Read the last refreshed rows instead of recomputing")
    ] = False,
) -> list[LiveStatusRead]:
    """Per-workflow rollups for the tenant."""
    if materialized:
        rows = await service.list_materialized(actor.tenant_id)
    else:
        rows, _ = await service.compute(actor.tenant_id)
    return [LiveStatusRead.model_validate(r) for r in rows]


@router.post("/live-status/refresh", response_model=list[LiveStatusRead])
async def refresh_live_status(
    actor: CurrentActor,
    service: LiveStatusServiceDep,
) -> list[LiveStatusRead]:
    """Recompute and store the tenant's rollups."""
    rows = await service.refresh(actor.tenant_id)
    return [LiveStatusRead.model_validate(r) for r in rows]


@router.get("/metrics", response_model=WorkflowMetricsRead)
async def get_workflow_metrics(
    actor: CurrentActor,
    service: LiveStatusServiceDep,
) -> WorkflowMetricsRead:
    metrics = await service.metrics(actor.tenant_id)
    return WorkflowMetricsRead.model_validate(metrics)


@router.get("/bottlenecks", response_model=list[BottleneckAlertRead])
async def get_bottlenecks(
    actor: CurrentActor,
    service: LiveStatusServiceDep,
) -> list[BottleneckAlertRead]:
    """Open-step pileups across workflows, largest first."""
    alerts = await service.bottlenecks(actor.tenant_id)
    return [BottleneckAlertRead.model_validate(a) for a in alerts]
