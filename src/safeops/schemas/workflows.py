"""Workflow tracking and live status schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.safeops.models import BottleneckSeverity, PerformanceTrend, WorkflowInstanceStatus


class InstanceCreate(BaseModel):
    """Schema for starting a tracked workflow instance."""

    workflow_key: str = Field(min_length=1, max_length=100)
    entity_type: str = Field(min_length=1, max_length=50)
    entity_id: UUID
    initial_step: str = Field(default="initiated", min_length=1, max_length=100)
    step_name: str | None = Field(default=None, max_length=200)
    participants: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    workflow_id: UUID | None = None


class AdvanceRequest(BaseModel):
    step_id: str = Field(min_length=1, max_length=100)
    step_name: str | None = Field(default=None, max_length=200)
    action_taken: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=2000)


class CancelRequest(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


class InstanceRead(BaseModel):
    """Schema for reading a workflow instance."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    tenant_id: UUID
    workflow_id: UUID | None
    workflow_key: str
    entity_type: str
    entity_id: UUID
    current_step_id: str | None
    status: WorkflowInstanceStatus
    started_at: datetime
    completed_at: datetime | None
    started_by: UUID | None
    participants: list[str]
    metadata: dict[str, Any] = Field(validation_alias="workflow_metadata")
    updated_at: datetime


class InstanceListResponse(BaseModel):
    items: list[InstanceRead]
    next_cursor: str | None = None
    has_more: bool = False


class StepHistoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    instance_id: UUID
    step_id: str
    step_name: str | None
    actor_id: UUID | None
    action_taken: str | None
    notes: str | None
    started_at: datetime
    completed_at: datetime | None
    duration_seconds: int | None


class LiveStatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workflow_key: str
    active_instances: int
    completed_today: int
    avg_completion_time_hours: float | None
    bottleneck_step: str | None
    bottleneck_count: int
    performance_trend: PerformanceTrend
    last_updated: datetime


class BottleneckAlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    workflow_key: str
    step_id: str
    count: int
    severity: BottleneckSeverity


class WorkflowMetricsRead(BaseModel):
    """Tenant-wide workflow dashboard figures."""

    model_config = ConfigDict(from_attributes=True)

    total_active: int
    completed_today: int
    avg_completion_hours: float | None
    bottlenecks: list[BottleneckAlertRead]
    status_breakdown: dict[str, int]
    performance_trend: PerformanceTrend
    instances_by_workflow: dict[str, int]
