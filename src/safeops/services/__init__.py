from src.safeops.services.audit_service import AuditLogWriter
from src.safeops.services.live_status import LiveStatusService
from src.safeops.services.notification_service import NotificationDispatcher
from src.safeops.services.observation_service import ObservationService
from src.safeops.services.pending_approvals import PendingApprovalsService
from src.safeops.services.workflow_tracker import WorkflowTrackerService

__all__ = [
    "AuditLogWriter",
    "LiveStatusService",
    "NotificationDispatcher",
    "ObservationService",
    "PendingApprovalsService",
    "WorkflowTrackerService",
]
