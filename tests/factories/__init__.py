"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import IncidentFactory, WorkflowInstanceFactory, ...
"""

from tests.factories.approvals import (
    ContractorCompanyFactory,
    ContractorWorkerFactory,
    DepartmentFactory,
    MaterialGatePassFactory,
    PendingApprovalRequestFactory,
)
from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.incident import CorrectiveActionFactory, IncidentFactory
from tests.factories.workflow import (
    WorkflowInstanceFactory,
    WorkflowLiveStatusFactory,
    WorkflowStepHistoryFactory,
)

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Incidents
    "CorrectiveActionFactory",
    "IncidentFactory",
    # Workflow tracking
    "WorkflowInstanceFactory",
    "WorkflowLiveStatusFactory",
    "WorkflowStepHistoryFactory",
    # Approval sources
    "ContractorCompanyFactory",
    "ContractorWorkerFactory",
    "DepartmentFactory",
    "MaterialGatePassFactory",
    "PendingApprovalRequestFactory",
]
