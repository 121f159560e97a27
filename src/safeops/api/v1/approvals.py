"""Unified pending approvals endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from src.safeops.api.dependencies import CurrentActor, PendingApprovalsServiceDep
from src.safeops.models import ApprovalCategory
from src.safeops.schemas import ApprovalCounts, PendingApproval

router = APIRouter(prefix="/approvals", tags=["approvals"])

MinDaysQuery = Annotated[int, Query(ge=0, description="Only items waiting at least this many days")]
CategoryQuery = Annotated[ApprovalCategory | None, Query(description="Filter by category")]


@router.get("/pending", response_model=list[PendingApproval])
async def list_pending_approvals(
    actor: CurrentActor,
    service: PendingApprovalsServiceDep,
    min_days_pending: MinDaysQuery = 0,
    category: CategoryQuery = None,
) -> list[PendingApproval]:
    """Everything awaiting approval in the tenant, longest waiting first."""
    return await service.aggregate(
        actor.tenant_id, min_days_pending=min_days_pending, category=category
    )


@router.get("/pending/counts", response_model=ApprovalCounts)
async def count_pending_approvals(
    actor: CurrentActor,
    service: PendingApprovalsServiceDep,
) -> ApprovalCounts:
    return await service.counts(actor.tenant_id)
