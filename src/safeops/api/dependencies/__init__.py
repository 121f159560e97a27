"""FastAPI dependency injection definitions."""

from src.safeops.api.dependencies.actor import (
    ActorId,
    CurrentActor,
    TenantId,
    get_actor_context,
    get_actor_id_from_header,
    get_tenant_id_from_header,
)
from src.safeops.api.dependencies.db import DBSession, get_db_session
from src.safeops.api.dependencies.services import (
    AuditWriterDep,
    LiveStatusServiceDep,
    NotifierDep,
    ObservationServiceDep,
    PendingApprovalsServiceDep,
    WorkflowTrackerServiceDep,
    get_audit_writer,
    get_live_status_service,
    get_notification_dispatcher,
    get_observation_service,
    get_pending_approvals_service,
    get_workflow_tracker_service,
)

__all__ = [
    # Database
    "DBSession",
    "get_db_session",
    # Actor
    "ActorId",
    "CurrentActor",
    "TenantId",
    "get_actor_context",
    "get_actor_id_from_header",
    "get_tenant_id_from_header",
    # Services
    "AuditWriterDep",
    "LiveStatusServiceDep",
    "NotifierDep",
    "ObservationServiceDep",
    "PendingApprovalsServiceDep",
    "WorkflowTrackerServiceDep",
    "get_audit_writer",
    "get_live_status_service",
    "get_notification_dispatcher",
    "get_observation_service",
    "get_pending_approvals_service",
    "get_workflow_tracker_service",
]
