from src.safeops.schemas.approvals import ApprovalCounts, PendingApproval
from src.safeops.schemas.incidents import (
    AuditLogRead,
    ClosureResponse,
    FinalClosureRequest,
    TransitionNotes,
    TransitionResponse,
    ValidationRequest,
)
from src.safeops.schemas.pagination import PaginatedResponse
from src.safeops.schemas.workflows import (
    AdvanceRequest,
    BottleneckAlertRead,
    CancelRequest,
    InstanceCreate,
    InstanceListResponse,
    InstanceRead,
    LiveStatusRead,
    StepHistoryRead,
    WorkflowMetricsRead,
)

__all__ = [
    # Approvals
    "ApprovalCounts",
    "PendingApproval",
    # Incidents
    "AuditLogRead",
    "ClosureResponse",
    "FinalClosureRequest",
    "TransitionNotes",
    "TransitionResponse",
    "ValidationRequest",
    # Pagination
    "PaginatedResponse",
    # Workflows
    "AdvanceRequest",
    "BottleneckAlertRead",
    "CancelRequest",
    "InstanceCreate",
    "InstanceListResponse",
    "InstanceRead",
    "LiveStatusRead",
    "StepHistoryRead",
    "WorkflowMetricsRead",
]
