"""Model exports.

Import from here: `from src.safeops.models import Incident, WorkflowInstance`
"""

from src.safeops.models.approval_sources import (
    ContractorCompany,
    ContractorWorker,
    Department,
    MaterialGatePass,
    PendingApprovalRequest,
)
from src.safeops.models.audit import AuditAction, IncidentAuditLog
from src.safeops.models.enums import (
    ApprovalCategory,
    BottleneckSeverity,
    ChangeEventType,
    ConnectionState,
    CorrectiveActionStatus,
    EventType,
    HSSEValidationStatus,
    ManagerDecision,
    ObservationStatus,
    PerformanceTrend,
    RoleName,
    ValidationDecision,
    WorkflowInstanceStatus,
)
from src.safeops.models.incident import CorrectiveAction, Incident
from src.safeops.models.role import Role, UserRoleAssignment
from src.safeops.models.workflow import (
    TERMINAL_INSTANCE_STATUSES,
    WorkflowInstance,
    WorkflowLiveStatus,
    WorkflowStepHistory,
)

__all__ = [
    # Enums
    "ApprovalCategory",
    "AuditAction",
    "BottleneckSeverity",
    "ChangeEventType",
    "ConnectionState",
    "CorrectiveActionStatus",
    "EventType",
    "HSSEValidationStatus",
    "ManagerDecision",
    "ObservationStatus",
    "PerformanceTrend",
    "RoleName",
    "ValidationDecision",
    "WorkflowInstanceStatus",
    # Incident workflow
    "CorrectiveAction",
    "Incident",
    "IncidentAuditLog",
    # Roles
    "Role",
    "UserRoleAssignment",
    # Workflow tracking
    "TERMINAL_INSTANCE_STATUSES",
    "WorkflowInstance",
    "WorkflowLiveStatus",
    "WorkflowStepHistory",
    # Approval sources
    "ContractorCompany",
    "ContractorWorker",
    "Department",
    "MaterialGatePass",
    "PendingApprovalRequest",
]
