"""Observation approval workflow - severity-driven state transitions.

Every transition follows the same sequence:

1. conditional write predicated on the status that was read (surfaced on failure)
2. audit append on an isolated session (logged on failure, never rolls back 1)
3. notification dispatch (fire-and-forget, logged on failure)
"""

import contextlib
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.safeops.core.actor_context import ActorContext
from src.safeops.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from src.safeops.core.logging import get_logger
from src.safeops.models import (
    AuditAction,
    HSSEValidationStatus,
    Incident,
    ManagerDecision,
    ObservationStatus,
    RoleName,
    ValidationDecision,
)
from src.safeops.models.base import utc_now
from src.safeops.repositories import CorrectiveActionRepository, IncidentRepository
from src.safeops.services.audit_service import AuditLogWriter
from src.safeops.services.notification_service import NotificationDispatcher
from src.safeops.services.observation_transitions import ObservationEvent, next_status
from src.safeops.services.severity_policy import resolve_severity_policy

logger = get_logger(__name__)

VALIDATOR_ROLES = frozenset({RoleName.HSSE_EXPERT, RoleName.HSSE_MANAGER, RoleName.ENVIRONMENTAL})
FINAL_CLOSURE_ROLES = frozenset({RoleName.HSSE_MANAGER, RoleName.ADMIN})
DEPARTMENT_REVIEW_ROLES = frozenset(
    {
        RoleName.DEPT_REPRESENTATIVE,
        RoleName.HSSE_EXPERT,
        RoleName.HSSE_MANAGER,
        RoleName.ADMIN,
    }
)


@dataclass(frozen=True)
class TransitionResult:
    incident_id: UUID
    new_status: ObservationStatus


class ObservationService:
    """Applies approval decisions to a single observation."""

    def __init__(
        self,
        incident_repo: IncidentRepository,
        action_repo: CorrectiveActionRepository,
        session: AsyncSession,
        audit_writer: AuditLogWriter,
        notifier: NotificationDispatcher,
    ):
        self.incident_repo = incident_repo
        self.action_repo = action_repo
        self.session = session
        self.audit_writer = audit_writer
        self.notifier = notifier

    async def validate(
        self,
        incident_id: UUID,
        decision: ValidationDecision,
        actor: ActorContext,
        notes: str | None = None,
    ) -> TransitionResult:
        """Record the HSSE expert decision on an observation.

        Reject returns the observation to the department representative.
        Accept routes by severity: level 5 waits for manager closure; lower
        levels close unless corrective actions are still pending.

        Args:
            incident_id: Observation to validate
            decision: accept or reject
            actor: Caller identity and roles
            notes: Optional reviewer notes

        Returns:
            TransitionResult with the new status

        Raises:
            AuthorizationError: Actor is not an HSSE validator
            NotFoundError: No such observation in the actor's tenant
            InvalidTransitionError: Observation is not awaiting validation
            PersistenceError: The status write failed
        """
        incident = await self._load(incident_id, actor, VALIDATOR_ROLES, observation_only=True)
        policy = resolve_severity_policy(incident.severity)

        values: dict[str, Any] = {
            "hsse_validated_by": actor.actor_id,
            "hsse_validated_at": utc_now(),
            "hsse_validation_notes": notes,
        }
        details: dict[str, Any] = {"decision": decision.value, "notes": notes}

        if decision == ValidationDecision.REJECT:
            event = ObservationEvent.HSSE_REJECT
            action = AuditAction.HSSE_VALIDATION_REJECT
            values["hsse_validation_status"] = HSSEValidationStatus.REJECTED.value
        else:
            action = AuditAction.HSSE_VALIDATION_ACCEPT
            values["hsse_validation_status"] = HSSEValidationStatus.ACCEPTED.value
            values["closure_requires_manager"] = policy.requires_manager_closure
            if policy.requires_manager_closure:
                event = ObservationEvent.HSSE_ACCEPT_MANAGER_REQUIRED
            else:
                pending = await self.action_repo.count_pending(incident.id, actor.tenant_id)
                details["pending_actions"] = pending
                event = (
                    ObservationEvent.HSSE_ACCEPT_ACTIONS_PENDING
                    if pending > 0
                    else ObservationEvent.HSSE_ACCEPT_NO_PENDING_ACTIONS
                )

        return await self._transition(incident, event, actor, values, action, details)

    async def manager_final_closure(
        self,
        incident_id: UUID,
        justification: str,
        actor: ActorContext,
    ) -> TransitionResult:
        """Close a level-5 observation that HSSE has already accepted."""
        if not justification or not justification.strip():
            raise ValidationError("Justification is required for final closure")

        incident = await self._load(incident_id, actor, FINAL_CLOSURE_ROLES)
        values = {
            "hsse_manager_decision": ManagerDecision.APPROVED.value,
            "hsse_manager_decision_by": actor.actor_id,
            "hsse_manager_justification": justification.strip(),
        }
        details = {"decision": ManagerDecision.APPROVED.value, "justification": justification}
        return await self._transition(
            incident,
            ObservationEvent.MANAGER_FINAL_CLOSURE,
            actor,
            values,
            AuditAction.MANAGER_FINAL_CLOSURE,
            details,
        )

    async def submit(self, incident_id: UUID, actor: ActorContext) -> TransitionResult:
        """Send a draft observation to the department representative."""
        incident = await self._load(incident_id, actor, observation_only=True)
        if incident.reporter_id != actor.actor_id and not actor.has_any_role(
            DEPARTMENT_REVIEW_ROLES
        ):
            raise AuthorizationError(
                "Only the reporter may submit a draft", incident_id=incident_id
            )
        resolve_severity_policy(incident.severity)
        return await self._transition(
            incident, ObservationEvent.SUBMIT, actor, {}, AuditAction.SUBMIT, {}
        )

    async def close_on_spot(
        self,
        incident_id: UUID,
        actor: ActorContext,
        notes: str | None = None,
    ) -> TransitionResult:
        """Close a low-severity observation without HSSE review."""
        incident = await self._load(
            incident_id, actor, DEPARTMENT_REVIEW_ROLES, observation_only=True
        )
        policy = resolve_severity_policy(incident.severity)
        if not policy.bypass_validation:
            raise InvalidTransitionError(
                f"Severity {incident.severity} requires HSSE validation",
                incident_id=incident_id,
                severity=incident.severity,
            )
        return await self._transition(
            incident,
            ObservationEvent.CLOSE_ON_SPOT,
            actor,
            {},
            AuditAction.CLOSE_ON_SPOT,
            {"notes": notes},
        )

    async def escalate_to_hsse(
        self,
        incident_id: UUID,
        actor: ActorContext,
        notes: str | None = None,
    ) -> TransitionResult:
        """Forward an observation from the department to HSSE validation."""
        incident = await self._load(
            incident_id, actor, DEPARTMENT_REVIEW_ROLES, observation_only=True
        )
        resolve_severity_policy(incident.severity)
        return await self._transition(
            incident,
            ObservationEvent.ESCALATE_TO_HSSE,
            actor,
            {},
            AuditAction.ESCALATE_TO_HSSE,
            {"notes": notes},
        )

    async def _load(
        self,
        incident_id: UUID,
        actor: ActorContext,
        allowed_roles: frozenset[RoleName] | None = None,
        observation_only: bool = False,
    ) -> Incident:
        # Role failures and missing rows look identical to the caller
        if allowed_roles is not None and not actor.has_any_role(allowed_roles):
            raise AuthorizationError(
                "Actor lacks required role",
                incident_id=incident_id,
                actor_id=actor.actor_id,
            )

        incident = await self.incident_repo.get_for_tenant(incident_id, actor.tenant_id)
        if incident is None:
            raise NotFoundError("Incident not found", incident_id=incident_id)

        if observation_only and not incident.is_observation:
            raise InvalidTransitionError(
                "Only observations follow this approval workflow",
                incident_id=incident_id,
                event_type=incident.event_type,
            )
        return incident

    async def _transition(
        self,
        incident: Incident,
        event: ObservationEvent,
        actor: ActorContext,
        values: dict[str, Any],
        action: AuditAction,
        details: dict[str, Any],
    ) -> TransitionResult:
        from_status = incident.status
        new_status = next_status(from_status, event)

        try:
            updated = await self.incident_repo.update_if_status(
                incident.id,
                actor.tenant_id,
                expected_status=from_status,
                values={**values, "status": new_status.value},
            )
            if updated:
                await self.session.commit()
            else:
                await self.session.rollback()
        except SQLAlchemyError as e:
            with contextlib.suppress(Exception):
                await self.session.rollback()
            raise PersistenceError(
                "Failed to persist observation transition",
                incident_id=incident.id,
                event=event.value,
            ) from e

        if not updated:
            # Another actor moved the observation after we read it
            raise InvalidTransitionError(
                "Observation status changed concurrently",
                incident_id=incident.id,
                expected_status=from_status,
                event=event.value,
            )

        logger.info(
            "Observation transition applied",
            incident_id=str(incident.id),
            transition_event=event.value,
            from_status=from_status,
            to_status=new_status.value,
        )

        await self.audit_writer.append(
            incident_id=incident.id,
            tenant_id=actor.tenant_id,
            actor_id=actor.actor_id,
            action=action,
            details={
                **details,
                "from_status": from_status,
                "to_status": new_status.value,
                "severity": incident.severity,
            },
        )

        await self.notifier.notify(
            entity_id=incident.id,
            tenant_id=actor.tenant_id,
            action=action.value,
            payload={
                "reference_id": incident.reference_id,
                "from_status": from_status,
                "to_status": new_status.value,
                "severity": incident.severity,
            },
        )

        return TransitionResult(incident_id=incident.id, new_status=new_status)
