"""Repository layer - data access abstraction."""

from src.safeops.repositories.approval_sources import (
    ContractorCompanyRepository,
    ContractorWorkerRepository,
    DepartmentRepository,
    GatePassRepository,
    PendingApprovalRequestRepository,
)
from src.safeops.repositories.audit import IncidentAuditLogRepository
from src.safeops.repositories.base import BaseRepository
from src.safeops.repositories.incident import CorrectiveActionRepository, IncidentRepository
from src.safeops.repositories.role import RoleRepository
from src.safeops.repositories.workflow import (
    WorkflowInstanceRepository,
    WorkflowLiveStatusRepository,
    WorkflowStepHistoryRepository,
)

__all__ = [
    # Base
    "BaseRepository",
    # Incident workflow
    "CorrectiveActionRepository",
    "IncidentAuditLogRepository",
    "IncidentRepository",
    "RoleRepository",
    # Workflow tracking
    "WorkflowInstanceRepository",
    "WorkflowLiveStatusRepository",
    "WorkflowStepHistoryRepository",
    # Approval sources
    "ContractorCompanyRepository",
    "ContractorWorkerRepository",
    "DepartmentRepository",
    "GatePassRepository",
    "PendingApprovalRequestRepository",
]
