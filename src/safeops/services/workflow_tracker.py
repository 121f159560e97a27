"""Generic workflow instance tracking.

Tracks any named workflow (``workflow_key``) over any entity without a
bespoke schema per workflow type. Every committed write is followed by a
full-row change event so dashboards can merge it into their snapshot.
"""

import contextlib
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from src.safeops.core.config import get_settings
from src.safeops.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from src.safeops.core.logging import get_logger
from src.safeops.models import (
    ChangeEventType,
    WorkflowInstance,
    WorkflowInstanceStatus,
    WorkflowStepHistory,
)
from src.safeops.models.base import utc_now
from src.safeops.repositories import WorkflowInstanceRepository, WorkflowStepHistoryRepository
from src.safeops.services.change_feed import publish_change, row_to_dict

logger = get_logger(__name__)

DEFAULT_INITIAL_STEP = "initiated"

Publisher = Callable[[str, UUID, ChangeEventType, dict[str, Any]], Awaitable[bool]]

# Allowed source statuses per lifecycle operation
_ALLOWED_FROM: dict[WorkflowInstanceStatus, frozenset[WorkflowInstanceStatus]] = {
    WorkflowInstanceStatus.COMPLETED: frozenset(
        {WorkflowInstanceStatus.ACTIVE, WorkflowInstanceStatus.PAUSED}
    ),
    WorkflowInstanceStatus.CANCELLED: frozenset(
        {WorkflowInstanceStatus.ACTIVE, WorkflowInstanceStatus.PAUSED}
    ),
    WorkflowInstanceStatus.PAUSED: frozenset({WorkflowInstanceStatus.ACTIVE}),
    WorkflowInstanceStatus.ACTIVE: frozenset({WorkflowInstanceStatus.PAUSED}),
}


class WorkflowTrackerService:
    """Starts, advances and finishes tracked workflow instances."""

    def __init__(
        self,
        instance_repo: WorkflowInstanceRepository,
        step_repo: WorkflowStepHistoryRepository,
        session: AsyncSession,
        publish: Publisher = publish_change,
    ):
        self.instance_repo = instance_repo
        self.step_repo = step_repo
        self.session = session
        self.publish = publish

    async def start_instance(
        self,
        tenant_id: UUID,
        workflow_key: str,
        entity_type: str,
        entity_id: UUID,
        started_by: UUID | None,
        initial_step: str = DEFAULT_INITIAL_STEP,
        step_name: str | None = None,
        participants: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        workflow_id: UUID | None = None,
    ) -> WorkflowInstance:
        """Create an active instance with an open row for its first step.

        Args:
            tenant_id: Owning tenant
            workflow_key: Workflow discriminator, e.g. "gate_pass_approval"
            entity_type: Kind of tracked entity, e.g. "gate_pass"
            entity_id: Tracked entity
            started_by: Actor who started the workflow
            initial_step: Step the instance starts on
            step_name: Display name of the initial step
            participants: Actor ids involved in the workflow
            metadata: Opaque caller data stored with the instance
            workflow_id: Optional workflow definition link

        Returns:
            The created instance
        """
        if not workflow_key.strip() or not entity_type.strip() or not initial_step.strip():
            raise ValidationError("workflow_key, entity_type and initial_step are required")

        now = utc_now()
        instance = WorkflowInstance(
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            workflow_key=workflow_key,
            entity_type=entity_type,
            entity_id=entity_id,
            current_step_id=initial_step,
            status=WorkflowInstanceStatus.ACTIVE.value,
            started_at=now,
            started_by=started_by,
            participants=participants or [],
            workflow_metadata=metadata or {},
            updated_at=now,
        )
        step = WorkflowStepHistory(
            tenant_id=tenant_id,
            instance_id=instance.id,
            step_id=initial_step,
            step_name=step_name,
            started_at=now,
        )
        self.instance_repo.add(instance)
        self.step_repo.add(step)
        await self._commit("start", instance)

        logger.info(
            "Workflow instance started",
            instance_id=str(instance.id),
            workflow_key=workflow_key,
            entity_type=entity_type,
            entity_id=str(entity_id),
        )
        await self._publish(instance, ChangeEventType.INSERT)
        await self._publish(step, ChangeEventType.INSERT)
        return instance

    async def advance_step(
        self,
        tenant_id: UUID,
        instance_id: UUID,
        step_id: str,
        actor_id: UUID | None,
        action_taken: str | None,
        notes: str | None = None,
        step_name: str | None = None,
    ) -> WorkflowInstance:
        """Close the open step with the actor's action and open ``step_id``.

        Raises:
            NotFoundError: No such instance in the tenant
            InvalidTransitionError: Instance is not active
        """
        if not step_id.strip():
            raise ValidationError("step_id is required")

        instance = await self._get(instance_id, tenant_id, for_update=True)
        if instance.status != WorkflowInstanceStatus.ACTIVE.value:
            raise InvalidTransitionError(
                f"Cannot advance a {instance.status} workflow instance",
                instance_id=instance_id,
                status=instance.status,
            )

        now = utc_now()
        closed = await self._close_open_step(instance, now, actor_id, action_taken, notes)
        opened = WorkflowStepHistory(
            tenant_id=tenant_id,
            instance_id=instance.id,
            step_id=step_id,
            step_name=step_name,
            started_at=now,
        )
        self.step_repo.add(opened)
        from_step = instance.current_step_id
        instance.current_step_id = step_id
        instance.updated_at = now
        await self._commit("advance", instance)

        logger.info(
            "Workflow instance advanced",
            instance_id=str(instance.id),
            from_step=from_step,
            to_step=step_id,
            action_taken=action_taken,
        )
        await self._publish(instance, ChangeEventType.UPDATE)
        if closed is not None:
            await self._publish(closed, ChangeEventType.UPDATE)
        await self._publish(opened, ChangeEventType.INSERT)
        return instance

    async def complete_instance(
        self, tenant_id: UUID, instance_id: UUID, actor_id: UUID | None = None
    ) -> WorkflowInstance:
        return await self._change_status(
            tenant_id, instance_id, WorkflowInstanceStatus.COMPLETED, actor_id
        )

    async def cancel_instance(
        self,
        tenant_id: UUID,
        instance_id: UUID,
        actor_id: UUID | None = None,
        notes: str | None = None,
    ) -> WorkflowInstance:
        return await self._change_status(
            tenant_id, instance_id, WorkflowInstanceStatus.CANCELLED, actor_id, notes
        )

    async def pause_instance(
        self, tenant_id: UUID, instance_id: UUID, actor_id: UUID | None = None
    ) -> WorkflowInstance:
        return await self._change_status(
            tenant_id, instance_id, WorkflowInstanceStatus.PAUSED, actor_id
        )

    async def resume_instance(
        self, tenant_id: UUID, instance_id: UUID, actor_id: UUID | None = None
    ) -> WorkflowInstance:
        """Reactivate a paused instance and reopen its current step."""
        return await self._change_status(
            tenant_id, instance_id, WorkflowInstanceStatus.ACTIVE, actor_id
        )

    async def list_instances(
        self,
        tenant_id: UUID,
        workflow_key: str | None = None,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> tuple[list[WorkflowInstance], str | None, bool]:
        """Snapshot read, newest first. ``limit`` is clamped to the configured maximum."""
        settings = get_settings()
        page_size = limit or settings.workflow_snapshot_page_size
        page_size = max(1, min(page_size, settings.workflow_snapshot_max_page_size))
        return await self.instance_repo.list_by_tenant(
            tenant_id=tenant_id,
            workflow_key=workflow_key,
            cursor=cursor,
            limit=page_size,
        )

    async def step_history(self, tenant_id: UUID, instance_id: UUID) -> list[WorkflowStepHistory]:
        await self._get(instance_id, tenant_id)
        return await self.step_repo.list_by_instance(instance_id, tenant_id)

    async def _change_status(
        self,
        tenant_id: UUID,
        instance_id: UUID,
        target: WorkflowInstanceStatus,
        actor_id: UUID | None,
        notes: str | None = None,
    ) -> WorkflowInstance:
        instance = await self._get(instance_id, tenant_id, for_update=True)
        current = instance.status_enum
        if current not in _ALLOWED_FROM[target]:
            raise InvalidTransitionError(
                f"Cannot move a {current.value} workflow instance to {target.value}",
                instance_id=instance_id,
                status=current.value,
                target=target.value,
            )

        now = utc_now()
        changed_steps: list[tuple[WorkflowStepHistory, ChangeEventType]] = []

        if target == WorkflowInstanceStatus.ACTIVE:
            # Resume: the step clock restarts from now
            reopened = WorkflowStepHistory(
                tenant_id=tenant_id,
                instance_id=instance.id,
                step_id=instance.current_step_id or DEFAULT_INITIAL_STEP,
                started_at=now,
            )
            self.step_repo.add(reopened)
            changed_steps.append((reopened, ChangeEventType.INSERT))
        else:
            closed = await self._close_open_step(instance, now, actor_id, target.value, notes)
            if closed is not None:
                changed_steps.append((closed, ChangeEventType.UPDATE))

        instance.status = target.value
        instance.updated_at = now
        if target in (WorkflowInstanceStatus.COMPLETED, WorkflowInstanceStatus.CANCELLED):
            instance.completed_at = now
        await self._commit(target.value, instance)

        logger.info(
            "Workflow instance status changed",
            instance_id=str(instance.id),
            from_status=current.value,
            to_status=target.value,
        )
        await self._publish(instance, ChangeEventType.UPDATE)
        for step, event_type in changed_steps:
            await self._publish(step, event_type)
        return instance

    async def _get(
        self, instance_id: UUID, tenant_id: UUID, for_update: bool = False
    ) -> WorkflowInstance:
        # Writers lock the instance first; the open step is read under that lock.
        instance = await self.instance_repo.get_for_tenant(
            instance_id, tenant_id, for_update=for_update
        )
        if instance is None:
            raise NotFoundError("Workflow instance not found", instance_id=instance_id)
        return instance

    async def _close_open_step(
        self,
        instance: WorkflowInstance,
        now: datetime,
        actor_id: UUID | None,
        action_taken: str | None,
        notes: str | None,
    ) -> WorkflowStepHistory | None:
        step = await self.step_repo.get_open_step(instance.id, instance.tenant_id)
        if step is None:
            return None
        step.actor_id = actor_id
        step.action_taken = action_taken
        step.notes = notes
        step.close(now)
        return step

    async def _commit(self, operation: str, instance: WorkflowInstance) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            with contextlib.suppress(Exception):
                await self.session.rollback()
            raise PersistenceError(
                f"Failed to {operation} workflow instance",
                instance_id=instance.id,
            ) from e

    async def _publish(self, entity: SQLModel, event_type: ChangeEventType) -> None:
        await self.publish(
            entity.__tablename__,  # type: ignore[arg-type]
            entity.tenant_id,  # type: ignore[attr-defined]
            event_type,
            row_to_dict(entity),
        )
