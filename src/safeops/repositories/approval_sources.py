"""Read-only repositories over the approval source tables.

Every query takes the tenant id and filters on it. Name lookups take a
deduplicated id collection and issue a single ``IN`` query.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlmodel import col, select

from src.safeops.models import (
    ContractorCompany,
    ContractorWorker,
    Department,
    MaterialGatePass,
    PendingApprovalRequest,
)
from src.safeops.repositories.base import BaseRepository

PENDING_GATE_PASS_STATUSES = ("pending_pm_approval", "pending_safety_approval")


class GatePassRepository(BaseRepository[MaterialGatePass]):
    model = MaterialGatePass

    async def list_pending(self, tenant_id: UUID) -> list[MaterialGatePass]:
        result = await self.session.execute(
            select(MaterialGatePass).where(
                MaterialGatePass.tenant_id == tenant_id,
                col(MaterialGatePass.status).in_(PENDING_GATE_PASS_STATUSES),
                col(MaterialGatePass.deleted_at).is_(None),
            )
        )
        return list(result.scalars().all())


class ContractorWorkerRepository(BaseRepository[ContractorWorker]):
    model = ContractorWorker

    async def list_pending(self, tenant_id: UUID) -> list[ContractorWorker]:
        result = await self.session.execute(
            select(ContractorWorker).where(
                ContractorWorker.tenant_id == tenant_id,
                ContractorWorker.approval_status == "pending",
                col(ContractorWorker.deleted_at).is_(None),
            )
        )
        return list(result.scalars().all())


class ContractorCompanyRepository(BaseRepository[ContractorCompany]):
    model = ContractorCompany

    async def list_pending(self, tenant_id: UUID) -> list[ContractorCompany]:
        result = await self.session.execute(
            select(ContractorCompany).where(
                ContractorCompany.tenant_id == tenant_id,
                ContractorCompany.status == "pending",
                col(ContractorCompany.deleted_at).is_(None),
            )
        )
        return list(result.scalars().all())

    async def names_by_ids(self, tenant_id: UUID, ids: Iterable[UUID]) -> dict[UUID, str]:
        unique_ids = list(set(ids))
        if not unique_ids:
            return {}
        result = await self.session.execute(
            select(ContractorCompany.id, ContractorCompany.company_name).where(
                ContractorCompany.tenant_id == tenant_id,
                col(ContractorCompany.id).in_(unique_ids),
            )
        )
        return {row[0]: row[1] for row in result.all()}


class DepartmentRepository(BaseRepository[Department]):
    model = Department

    async def names_by_ids(self, tenant_id: UUID, ids: Iterable[UUID]) -> dict[UUID, str]:
        unique_ids = list(set(ids))
        if not unique_ids:
            return {}
        result = await self.session.execute(
            select(Department.id, Department.name).where(
                Department.tenant_id == tenant_id,
                col(Department.id).in_(unique_ids),
            )
        )
        return {row[0]: row[1] for row in result.all()}


class PendingApprovalRequestRepository(BaseRepository[PendingApprovalRequest]):
    model = PendingApprovalRequest

    async def list_pending(self, tenant_id: UUID) -> list[PendingApprovalRequest]:
        result = await self.session.execute(
            select(PendingApprovalRequest).where(
                PendingApprovalRequest.tenant_id == tenant_id,
                PendingApprovalRequest.status == "pending",
            )
        )
        return list(result.scalars().all())
