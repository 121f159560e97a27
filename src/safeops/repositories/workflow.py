"""Repositories for generic workflow tracking."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.dialects.postgresql import insert
from sqlmodel import col, select

from src.safeops.models import (
    WorkflowInstance,
    WorkflowInstanceStatus,
    WorkflowLiveStatus,
    WorkflowStepHistory,
)
from src.safeops.repositories.base import BaseRepository

OPEN_INSTANCE_STATUSES = (
    WorkflowInstanceStatus.ACTIVE.value,
    WorkflowInstanceStatus.PAUSED.value,
)


class WorkflowInstanceRepository(BaseRepository[WorkflowInstance]):
    """Repository for WorkflowInstance entity."""

    model = WorkflowInstance

    async def get_for_tenant(
        self, id: UUID, tenant_id: UUID, for_update: bool = False
    ) -> WorkflowInstance | None:
        """Get an instance scoped to tenant.

        Args:
            for_update: Lock the row until the transaction ends, so concurrent
                lifecycle writes on the same instance run one after another
        """
        query = select(WorkflowInstance).where(
            WorkflowInstance.id == id,
            WorkflowInstance.tenant_id == tenant_id,
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_by_tenant(
        self,
        tenant_id: UUID,
        workflow_key: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[WorkflowInstance], str | None, bool]:
        """Snapshot query: instances for a tenant, most recently started first."""
        query = select(WorkflowInstance).where(WorkflowInstance.tenant_id == tenant_id)
        if workflow_key:
            query = query.where(WorkflowInstance.workflow_key == workflow_key)
        return await self.paginate(query, cursor, limit, WorkflowInstance.started_at)

    async def list_for_rollup(
        self, tenant_id: UUID, since: datetime
    ) -> list[WorkflowInstance]:
        """Instances that feed the live-status fold.

        Everything not terminal, plus anything completed or cancelled on or
        after ``since``.
        """
        result = await self.session.execute(
            select(WorkflowInstance).where(
                WorkflowInstance.tenant_id == tenant_id,
                or_(
                    col(WorkflowInstance.status).in_(OPEN_INSTANCE_STATUSES),
                    col(WorkflowInstance.completed_at) >= since,
                ),
            )
        )
        return list(result.scalars().all())

    async def list_tenant_ids(self) -> list[UUID]:
        """Tenants that have at least one instance. Used by the scheduled refresh."""
        result = await self.session.execute(select(WorkflowInstance.tenant_id).distinct())
        return list(result.scalars().all())


class WorkflowStepHistoryRepository(BaseRepository[WorkflowStepHistory]):
    """Repository for WorkflowStepHistory entity."""

    model = WorkflowStepHistory

    async def get_open_step(
        self, instance_id: UUID, tenant_id: UUID
    ) -> WorkflowStepHistory | None:
        """The single uncompleted row for an instance, if any."""
        result = await self.session.execute(
            select(WorkflowStepHistory)
            .where(
                WorkflowStepHistory.instance_id == instance_id,
                WorkflowStepHistory.tenant_id == tenant_id,
                col(WorkflowStepHistory.completed_at).is_(None),
            )
            .order_by(col(WorkflowStepHistory.started_at).desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_by_instance(
        self, instance_id: UUID, tenant_id: UUID
    ) -> list[WorkflowStepHistory]:
        """Step history for an instance in the order the steps were entered."""
        result = await self.session.execute(
            select(WorkflowStepHistory)
            .where(
                WorkflowStepHistory.instance_id == instance_id,
                WorkflowStepHistory.tenant_id == tenant_id,
            )
            .order_by(col(WorkflowStepHistory.started_at).asc())
        )
        return list(result.scalars().all())

    async def list_open_for_active_instances(self, tenant_id: UUID) -> list[WorkflowStepHistory]:
        """Open step rows whose instance is currently active."""
        result = await self.session.execute(
            select(WorkflowStepHistory)
            .join(
                WorkflowInstance,
                col(WorkflowInstance.id) == col(WorkflowStepHistory.instance_id),
            )
            .where(
                WorkflowStepHistory.tenant_id == tenant_id,
                WorkflowInstance.tenant_id == tenant_id,
                WorkflowInstance.status == WorkflowInstanceStatus.ACTIVE.value,
                col(WorkflowStepHistory.completed_at).is_(None),
            )
        )
        return list(result.scalars().all())


class WorkflowLiveStatusRepository(BaseRepository[WorkflowLiveStatus]):
    """Repository for the materialized WorkflowLiveStatus rollup."""

    model = WorkflowLiveStatus

    async def list_by_tenant(self, tenant_id: UUID) -> list[WorkflowLiveStatus]:
        result = await self.session.execute(
            select(WorkflowLiveStatus)
            .where(WorkflowLiveStatus.tenant_id == tenant_id)
            .order_by(col(WorkflowLiveStatus.workflow_key).asc())
        )
        return list(result.scalars().all())

    async def upsert(self, row: WorkflowLiveStatus) -> None:
        """Insert or replace the rollup for (tenant_id, workflow_key)."""
        values = {
            "id": row.id,
            "tenant_id": row.tenant_id,
            "workflow_key": row.workflow_key,
            "active_instances": row.active_instances,
            "completed_today": row.completed_today,
            "avg_completion_time_hours": row.avg_completion_time_hours,
            "bottleneck_step": row.bottleneck_step,
            "bottleneck_count": row.bottleneck_count,
            "performance_trend": row.performance_trend,
            "last_updated": row.last_updated,
        }
        stmt = insert(WorkflowLiveStatus).values(**values)
        stmt = stmt.on_conflict_do_update(
            constraint="uq_workflow_live_status_tenant_key",
            set_={k: v for k, v in values.items() if k not in ("id", "tenant_id", "workflow_key")},
        )
        await self.session.execute(stmt)
