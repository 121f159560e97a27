"""Generic workflow tracking models."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Column, Index, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from src.safeops.models.base import utc_now
from src.safeops.models.enums import PerformanceTrend, WorkflowInstanceStatus

TERMINAL_INSTANCE_STATUSES = frozenset(
    {WorkflowInstanceStatus.COMPLETED.value, WorkflowInstanceStatus.CANCELLED.value}
)


class WorkflowInstance(SQLModel, table=True):
    """One running occurrence of a named workflow over an arbitrary entity."""

    __tablename__ = "workflow_instances"
    __table_args__ = (
        Index("ix_workflow_instances_tenant_key_status", "tenant_id", "workflow_key", "status"),
        Index("ix_workflow_instances_tenant_started", "tenant_id", "started_at"),
        Index("ix_workflow_instances_entity", "entity_type", "entity_id"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    workflow_id: UUID | None = Field(default=None)  # Optional link to a workflow definition
    workflow_key: str = Field(max_length=100)  # e.g. "gate_pass_approval"
    entity_type: str = Field(max_length=50)  # e.g. "gate_pass", "incident"
    entity_id: UUID
    current_step_id: str | None = Field(default=None, max_length=100)
    status: str = Field(default=WorkflowInstanceStatus.ACTIVE.value, max_length=20)
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = Field(default=None)
    started_by: UUID | None = Field(default=None)
    participants: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default="[]"),
    )
    # "metadata" is reserved on declarative classes, hence the attribute name
    workflow_metadata: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSONB, nullable=False, server_default="{}"),
    )
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status_enum(self) -> WorkflowInstanceStatus:
        return WorkflowInstanceStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_INSTANCE_STATUSES


class WorkflowStepHistory(SQLModel, table=True):
    """Time spent by an instance on one step. At most one open row per instance."""

    __tablename__ = "workflow_step_history"
    __table_args__ = (
        Index("ix_workflow_step_history_instance_started", "instance_id", "started_at"),
        Index("ix_workflow_step_history_open", "tenant_id", "completed_at"),
        Index(
            "uq_workflow_step_history_one_open",
            "instance_id",
            unique=True,
            postgresql_where=text("completed_at IS NULL"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID
    instance_id: UUID = Field(foreign_key="workflow_instances.id")
    step_id: str = Field(max_length=100)
    step_name: str | None = Field(default=None, max_length=200)
    actor_id: UUID | None = Field(default=None)
    action_taken: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=2000)
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: int | None = Field(default=None)

    @property
    def is_open(self) -> bool:
        return self.completed_at is None

    def close(self, completed_at: datetime) -> None:
        """Close the row and derive its duration (never negative)."""
        self.completed_at = completed_at
        elapsed = (completed_at - self.started_at).total_seconds()
        self.duration_seconds = max(0, int(elapsed))


class WorkflowLiveStatus(SQLModel, table=True):
    """Materialized per-key rollup. Always rebuildable from instances + history."""

    __tablename__ = "workflow_live_status"
    __table_args__ = (
        UniqueConstraint("tenant_id", "workflow_key", name="uq_workflow_live_status_tenant_key"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    workflow_key: str = Field(max_length=100)
    active_instances: int = Field(default=0)
    completed_today: int = Field(default=0)
    avg_completion_time_hours: float | None = Field(default=None)
    bottleneck_step: str | None = Field(default=None, max_length=100)
    bottleneck_count: int = Field(default=0)
    performance_trend: str = Field(default=PerformanceTrend.STABLE.value, max_length=20)
    last_updated: datetime = Field(default_factory=utc_now)
