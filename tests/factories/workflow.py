"""Workflow tracking factories."""

from polyfactory import Use

from src.safeops.models import (
    PerformanceTrend,
    WorkflowInstance,
    WorkflowInstanceStatus,
    WorkflowLiveStatus,
    WorkflowStepHistory,
)
from tests.factories.base import BaseFactory, generate_uuid, utc_now


class WorkflowInstanceFactory(BaseFactory):
    """Factory for an active gate pass approval instance."""

    __model__ = WorkflowInstance

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    workflow_id = None
    workflow_key = "gate_pass_approval"
    entity_type = "gate_pass"
    entity_id = Use(generate_uuid)
    current_step_id = "initiated"
    status = WorkflowInstanceStatus.ACTIVE.value
    started_at = Use(utc_now)
    completed_at = None
    started_by = Use(generate_uuid)
    participants = Use(list)
    workflow_metadata = Use(dict)
    updated_at = Use(utc_now)

    @classmethod
    def completed(cls, started_at, completed_at, **kwargs):
        return cls.build(
            status=WorkflowInstanceStatus.COMPLETED.value,
            started_at=started_at,
            completed_at=completed_at,
            **kwargs,
        )


class WorkflowStepHistoryFactory(BaseFactory):
    __model__ = WorkflowStepHistory

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    # FK fields - must be set explicitly
    instance_id = None
    step_id = "initiated"
    step_name = None
    actor_id = None
    action_taken = None
    notes = None
    started_at = Use(utc_now)
    completed_at = None
    duration_seconds = None


class WorkflowLiveStatusFactory(BaseFactory):
    __model__ = WorkflowLiveStatus

    id = Use(generate_uuid)
    tenant_id = Use(generate_uuid)
    workflow_key = "gate_pass_approval"
    active_instances = 0
    completed_today = 0
    avg_completion_time_hours = None
    bottleneck_step = None
    bottleneck_count = 0
    performance_trend = PerformanceTrend.STABLE.value
    last_updated = Use(utc_now)
