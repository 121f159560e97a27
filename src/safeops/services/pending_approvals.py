"""Unified pending-approvals feed.

Merges the approval queues of incidents, gate passes, contractor workers,
contractor companies and generic approval requests into one normalized,
tenant-scoped list.

``days_pending`` counts from ``updated_at`` for incidents and from
``created_at`` for every other source. Dashboards already depend on these
numbers, so the asymmetry is kept as is.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from src.safeops.core.exceptions import AggregationError
from src.safeops.core.logging import get_logger
from src.safeops.models import (
    ApprovalCategory,
    ContractorCompany,
    ContractorWorker,
    Incident,
    MaterialGatePass,
    PendingApprovalRequest,
)
from src.safeops.models.base import as_naive_utc, utc_now
from src.safeops.repositories import (
    ContractorCompanyRepository,
    ContractorWorkerRepository,
    DepartmentRepository,
    GatePassRepository,
    IncidentRepository,
    PendingApprovalRequestRepository,
)
from src.safeops.schemas.approvals import ApprovalCounts, PendingApproval

logger = get_logger(__name__)

INCIDENT_APPROVAL_STATUSES = (
    "pending_dept_rep_approval",
    "pending_dept_rep_incident_review",
    "pending_manager_approval",
    "pending_hsse_rejection_review",
    "pending_hsse_validation",
    "pending_legal_review",
)

# Normalized status for sources whose own status is just "pending"
PENDING_APPROVAL_STATUS = "pending_approval"

KNOWN_PRIORITIES = frozenset({"low", "medium", "high", "critical"})

# Checked in order; first substring match wins, otherwise asset
_APPROVAL_TYPE_CATEGORIES = (
    ("visitor", ApprovalCategory.VISITOR),
    ("contractor", ApprovalCategory.CONTRACTOR),
    ("worker", ApprovalCategory.WORKER),
    ("gate", ApprovalCategory.GATE_PASS),
)

_ONE_DAY = timedelta(days=1)


class _TenantRow(Protocol):
    tenant_id: UUID


def _owned[T: _TenantRow](rows: list[T], tenant_id: UUID) -> list[T]:
    return [row for row in rows if row.tenant_id == tenant_id]


def days_pending(reference: datetime, now: datetime) -> int:
    """Whole UTC days elapsed since ``reference``, never negative."""
    elapsed = as_naive_utc(now) - as_naive_utc(reference)
    return max(0, elapsed // _ONE_DAY)


def category_for_approval_type(approval_type: str | None) -> ApprovalCategory:
    lowered = (approval_type or "").lower()
    for needle, category in _APPROVAL_TYPE_CATEGORIES:
        if needle in lowered:
            return category
    return ApprovalCategory.ASSET


def short_reference(id: UUID) -> str:
    """First 8 hex chars of the id, upper-cased (for sources with no reference)."""
    return str(id)[:8].upper()


def normalize_incident(
    incident: Incident, now: datetime, department_names: dict[UUID, str]
) -> PendingApproval:
    return PendingApproval(
        id=incident.id,
        reference_id=incident.reference_id or "",
        title=incident.title,
        category=ApprovalCategory.INCIDENT,
        sub_type=incident.event_type,
        status=incident.status,
        created_at=incident.created_at,
        updated_at=incident.updated_at,
        days_pending=days_pending(incident.updated_at, now),
        department_name=department_names.get(incident.department_id, "")
        if incident.department_id
        else "",
    )


def normalize_gate_pass(
    gate_pass: MaterialGatePass, now: datetime, company_names: dict[UUID, str]
) -> PendingApproval:
    return PendingApproval(
        id=gate_pass.id,
        reference_id=gate_pass.reference_number or "",
        title=gate_pass.material_description or "Gate Pass",
        category=ApprovalCategory.GATE_PASS,
        sub_type=gate_pass.pass_type,
        status=gate_pass.status,
        created_at=gate_pass.created_at,
        updated_at=gate_pass.updated_at or gate_pass.created_at,
        days_pending=days_pending(gate_pass.created_at, now),
        company_name=company_names.get(gate_pass.company_id, "") if gate_pass.company_id else "",
    )


def normalize_worker(
    worker: ContractorWorker, now: datetime, company_names: dict[UUID, str]
) -> PendingApproval:
    return PendingApproval(
        id=worker.id,
        reference_id=short_reference(worker.id),
        title=worker.full_name,
        category=ApprovalCategory.WORKER,
        sub_type=worker.worker_type,
        status=PENDING_APPROVAL_STATUS,
        created_at=worker.created_at,
        updated_at=worker.updated_at or worker.created_at,
        days_pending=days_pending(worker.created_at, now),
        company_name=company_names.get(worker.company_id, "") if worker.company_id else "",
    )


def normalize_contractor(company: ContractorCompany, now: datetime) -> PendingApproval:
    return PendingApproval(
        id=company.id,
        reference_id=short_reference(company.id),
        title=company.company_name,
        category=ApprovalCategory.CONTRACTOR,
        status=PENDING_APPROVAL_STATUS,
        created_at=company.created_at,
        updated_at=company.updated_at or company.created_at,
        days_pending=days_pending(company.created_at, now),
        company_name=company.company_name,
    )


def normalize_request(request: PendingApprovalRequest, now: datetime) -> PendingApproval:
    priority = (request.priority or "").lower()
    return PendingApproval(
        id=request.id,
        reference_id=request.reference_number or request.reference_id or "",
        title=request.title or "Approval Request",
        category=category_for_approval_type(request.approval_type),
        sub_type=request.approval_type,
        status=request.status,
        created_at=request.created_at,
        updated_at=request.updated_at or request.created_at,
        days_pending=days_pending(request.created_at, now),
        priority=priority if priority in KNOWN_PRIORITIES else None,
        requester_name=request.requested_by_name,
    )


def counts_by_category(approvals: Iterable[PendingApproval]) -> ApprovalCounts:
    """Total plus one count per category."""
    counts = {category.value: 0 for category in ApprovalCategory}
    total = 0
    for approval in approvals:
        counts[approval.category.value] += 1
        total += 1
    return ApprovalCounts(total=total, **counts)


def filter_and_sort(
    approvals: Iterable[PendingApproval],
    min_days_pending: int = 0,
    category: ApprovalCategory | None = None,
) -> list[PendingApproval]:
    """Apply the caller filters; oldest waits first, then earliest created."""
    selected = [
        a
        for a in approvals
        if a.days_pending >= min_days_pending and (category is None or a.category == category)
    ]
    return sorted(selected, key=lambda a: (-a.days_pending, as_naive_utc(a.created_at)))


class PendingApprovalsService:
    """Reads every approval source for one tenant and normalizes the rows."""

    def __init__(
        self,
        incident_repo: IncidentRepository,
        gate_pass_repo: GatePassRepository,
        worker_repo: ContractorWorkerRepository,
        company_repo: ContractorCompanyRepository,
        department_repo: DepartmentRepository,
        request_repo: PendingApprovalRequestRepository,
    ):
        self.incident_repo = incident_repo
        self.gate_pass_repo = gate_pass_repo
        self.worker_repo = worker_repo
        self.company_repo = company_repo
        self.department_repo = department_repo
        self.request_repo = request_repo

    async def aggregate(
        self,
        tenant_id: UUID | None,
        min_days_pending: int = 0,
        category: ApprovalCategory | None = None,
        now: datetime | None = None,
    ) -> list[PendingApproval]:
        """Build the unified feed.

        Args:
            tenant_id: Owning tenant. None yields an empty feed.
            min_days_pending: Drop items waiting fewer whole days than this
            category: Optional single category to keep
            now: Reference time, defaults to the current UTC time

        Returns:
            Normalized approvals sorted by days pending, longest first
        """
        if tenant_id is None:
            return []

        now = as_naive_utc(now) if now else utc_now()
        try:
            incidents = await self.incident_repo.list_by_statuses(
                tenant_id, INCIDENT_APPROVAL_STATUSES
            )
            gate_passes = await self.gate_pass_repo.list_pending(tenant_id)
            workers = await self.worker_repo.list_pending(tenant_id)
            companies = await self.company_repo.list_pending(tenant_id)
            requests = await self.request_repo.list_pending(tenant_id)

            # Fail closed: a row from another tenant never reaches the feed
            incidents = _owned(incidents, tenant_id)
            gate_passes = _owned(gate_passes, tenant_id)
            workers = _owned(workers, tenant_id)
            companies = _owned(companies, tenant_id)
            requests = _owned(requests, tenant_id)

            department_names = await self.department_repo.names_by_ids(
                tenant_id, (i.department_id for i in incidents if i.department_id)
            )
            company_ids = [g.company_id for g in gate_passes if g.company_id]
            company_ids += [w.company_id for w in workers if w.company_id]
            company_names = await self.company_repo.names_by_ids(tenant_id, company_ids)
        except SQLAlchemyError as e:
            raise AggregationError("Failed to load pending approvals", tenant_id=tenant_id) from e

        approvals: list[PendingApproval] = []
        approvals += [normalize_incident(i, now, department_names) for i in incidents]
        approvals += [normalize_gate_pass(g, now, company_names) for g in gate_passes]
        approvals += [normalize_worker(w, now, company_names) for w in workers]
        approvals += [normalize_contractor(c, now) for c in companies]
        approvals += [normalize_request(r, now) for r in requests]

        result = filter_and_sort(approvals, min_days_pending, category)
        logger.debug(
            "Pending approvals aggregated",
            tenant_id=str(tenant_id),
            total=len(approvals),
            returned=len(result),
        )
        return result

    async def counts(self, tenant_id: UUID | None) -> ApprovalCounts:
        return counts_by_category(await self.aggregate(tenant_id))
