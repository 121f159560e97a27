"""Service factory dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.safeops.api.dependencies.db import DBSession
from src.safeops.api.dependencies.repositories import (
    ContractorCompanyRepo,
    ContractorWorkerRepo,
    CorrectiveActionRepo,
    DepartmentRepo,
    GatePassRepo,
    IncidentRepo,
    LiveStatusRepo,
    PendingRequestRepo,
    WorkflowInstanceRepo,
    WorkflowStepRepo,
)
from src.safeops.core.db import get_engine
from src.safeops.repositories import IncidentAuditLogRepository
from src.safeops.services.audit_service import AuditLogWriter
from src.safeops.services.live_status import LiveStatusService
from src.safeops.services.notification_service import NotificationDispatcher
from src.safeops.services.observation_service import ObservationService
from src.safeops.services.pending_approvals import PendingApprovalsService
from src.safeops.services.workflow_tracker import WorkflowTrackerService


async def get_audit_writer() -> AsyncGenerator[AuditLogWriter]:
    """Get audit writer with its own isolated session.

    Uses a dedicated session that commits independently from the transition
    write, so a failed audit append never touches the primary record.
    """
    engine = get_engine()
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield AuditLogWriter(IncidentAuditLogRepository(session), session)


def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher()


AuditWriterDep = Annotated[AuditLogWriter, Depends(get_audit_writer)]
NotifierDep = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]


def get_observation_service(
    incident_repo: IncidentRepo,
    action_repo: CorrectiveActionRepo,
    session: DBSession,
    audit_writer: AuditWriterDep,
    notifier: NotifierDep,
) -> ObservationService:
    """Get observation approval service."""
    return ObservationService(incident_repo, action_repo, session, audit_writer, notifier)


def get_workflow_tracker_service(
    instance_repo: WorkflowInstanceRepo,
    step_repo: WorkflowStepRepo,
    session: DBSession,
) -> WorkflowTrackerService:
    """Get workflow tracker service."""
    return WorkflowTrackerService(instance_repo, step_repo, session)


def get_live_status_service(
    instance_repo: WorkflowInstanceRepo,
    step_repo: WorkflowStepRepo,
    live_status_repo: LiveStatusRepo,
    session: DBSession,
) -> LiveStatusService:
    """Get live status service."""
    return LiveStatusService(instance_repo, step_repo, live_status_repo, session)


def get_pending_approvals_service(
    incident_repo: IncidentRepo,
    gate_pass_repo: GatePassRepo,
    worker_repo: ContractorWorkerRepo,
    company_repo: ContractorCompanyRepo,
    department_repo: DepartmentRepo,
    request_repo: PendingRequestRepo,
) -> PendingApprovalsService:
    """Get pending approvals aggregator."""
    return PendingApprovalsService(
        incident_repo, gate_pass_repo, worker_repo, company_repo, department_repo, request_repo
    )


ObservationServiceDep = Annotated[ObservationService, Depends(get_observation_service)]
WorkflowTrackerServiceDep = Annotated[
    WorkflowTrackerService, Depends(get_workflow_tracker_service)
]
LiveStatusServiceDep = Annotated[LiveStatusService, Depends(get_live_status_service)]
PendingApprovalsServiceDep = Annotated[
    PendingApprovalsService, Depends(get_pending_approvals_service)
]
