"""Repository factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.safeops.api.dependencies.db import DBSession
from src.safeops.repositories import (
    ContractorCompanyRepository,
    ContractorWorkerRepository,
    CorrectiveActionRepository,
    DepartmentRepository,
    GatePassRepository,
    IncidentRepository,
    PendingApprovalRequestRepository,
    WorkflowInstanceRepository,
    WorkflowLiveStatusRepository,
    WorkflowStepHistoryRepository,
)


def get_incident_repository(session: DBSession) -> IncidentRepository:
    return IncidentRepository(session)


def get_corrective_action_repository(session: DBSession) -> CorrectiveActionRepository:
    return CorrectiveActionRepository(session)


def get_workflow_instance_repository(session: DBSession) -> WorkflowInstanceRepository:
    return WorkflowInstanceRepository(session)


def get_workflow_step_repository(session: DBSession) -> WorkflowStepHistoryRepository:
    return WorkflowStepHistoryRepository(session)


def get_live_status_repository(session: DBSession) -> WorkflowLiveStatusRepository:
    return WorkflowLiveStatusRepository(session)


def get_gate_pass_repository(session: DBSession) -> GatePassRepository:
    return GatePassRepository(session)


def get_contractor_worker_repository(session: DBSession) -> ContractorWorkerRepository:
    return ContractorWorkerRepository(session)


def get_contractor_company_repository(session: DBSession) -> ContractorCompanyRepository:
    return ContractorCompanyRepository(session)


def get_department_repository(session: DBSession) -> DepartmentRepository:
    return DepartmentRepository(session)


def get_pending_request_repository(session: DBSession) -> PendingApprovalRequestRepository:
    return PendingApprovalRequestRepository(session)


IncidentRepo = Annotated[IncidentRepository, Depends(get_incident_repository)]
CorrectiveActionRepo = Annotated[
    CorrectiveActionRepository, Depends(get_corrective_action_repository)
]
WorkflowInstanceRepo = Annotated[
    WorkflowInstanceRepository, Depends(get_workflow_instance_repository)
]
WorkflowStepRepo = Annotated[WorkflowStepHistoryRepository, Depends(get_workflow_step_repository)]
LiveStatusRepo = Annotated[WorkflowLiveStatusRepository, Depends(get_live_status_repository)]
GatePassRepo = Annotated[GatePassRepository, Depends(get_gate_pass_repository)]
ContractorWorkerRepo = Annotated[
    ContractorWorkerRepository, Depends(get_contractor_worker_repository)
]
ContractorCompanyRepo = Annotated[
    ContractorCompanyRepository, Depends(get_contractor_company_repository)
]
DepartmentRepo = Annotated[DepartmentRepository, Depends(get_department_repository)]
PendingRequestRepo = Annotated[
    PendingApprovalRequestRepository, Depends(get_pending_request_repository)
]
