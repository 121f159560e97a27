"""Tests for the unified pending-approvals feed."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.safeops.core.exceptions import AggregationError
from src.safeops.models import ApprovalCategory
from src.safeops.services.pending_approvals import (
    INCIDENT_APPROVAL_STATUSES,
    PendingApprovalsService,
    category_for_approval_type,
    counts_by_category,
    days_pending,
    short_reference,
)
from tests.factories import (
    ContractorCompanyFactory,
    ContractorWorkerFactory,
    IncidentFactory,
    MaterialGatePassFactory,
    PendingApprovalRequestFactory,
)

pytestmark = pytest.mark.unit

NOW = datetime(2026, 3, 10, 12, 0)


def source_repo(method="list_pending", rows=None):
    repo = MagicMock()
    setattr(repo, method, AsyncMock(return_value=rows or []))
    repo.names_by_ids = AsyncMock(return_value={})
    return repo


@pytest.fixture
def repos():
    return {
        "incident_repo": source_repo("list_by_statuses"),
        "gate_pass_repo": source_repo(),
        "worker_repo": source_repo(),
        "company_repo": source_repo(),
        "department_repo": source_repo("names_by_ids"),
        "request_repo": source_repo(),
    }


@pytest.fixture
def service(repos) -> PendingApprovalsService:
    return PendingApprovalsService(**repos)


class TestDaysPending:
    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            (NOW, 0),
            (NOW - timedelta(hours=23, minutes=59), 0),
            (NOW - timedelta(days=1), 1),
            (NOW - timedelta(days=6, hours=20), 6),
            (NOW + timedelta(days=2), 0),
        ],
    )
    def test_whole_days_never_negative(self, reference, expected):
        assert days_pending(reference, NOW) == expected

    def test_aware_and_naive_values_agree(self):
        aware_now = NOW.replace(tzinfo=UTC)

        assert days_pending(NOW - timedelta(days=3), aware_now) == 3


class TestCategoryForApprovalType:
    @pytest.mark.parametrize(
        ("approval_type", "expected"),
        [
            ("visitor_access", ApprovalCategory.VISITOR),
            ("Contractor_Onboarding", ApprovalCategory.CONTRACTOR),
            ("worker_induction", ApprovalCategory.WORKER),
            ("gate_exit", ApprovalCategory.GATE_PASS),
            ("asset_purchase", ApprovalCategory.ASSET),
            ("", ApprovalCategory.ASSET),
            (None, ApprovalCategory.ASSET),
        ],
    )
    def test_mapping(self, approval_type, expected):
        assert category_for_approval_type(approval_type) == expected


def test_short_reference():
    ident = uuid4()

    assert short_reference(ident) == ident.hex[:8].upper()


class TestAggregate:
    async def test_no_tenant_returns_empty(self, service, repos):
        assert await service.aggregate(None) == []
        repos["incident_repo"].list_by_statuses.assert_not_awaited()

    async def test_incidents_count_from_updated_at(self, service, repos, tenant_id):
        incident = IncidentFactory.build(
            tenant_id=tenant_id,
            created_at=NOW - timedelta(days=20),
            updated_at=NOW - timedelta(days=2),
        )
        gate_pass = MaterialGatePassFactory.build(
            tenant_id=tenant_id,
            created_at=NOW - timedelta(days=5),
            updated_at=NOW - timedelta(days=1),
        )
        repos["incident_repo"].list_by_statuses.return_value = [incident]
        repos["gate_pass_repo"].list_pending.return_value = [gate_pass]

        approvals = await service.aggregate(tenant_id, now=NOW)

        by_category = {a.category: a for a in approvals}
        assert by_category[ApprovalCategory.INCIDENT].days_pending == 2
        assert by_category[ApprovalCategory.GATE_PASS].days_pending == 5

    async def test_incident_statuses_requested(self, service, repos, tenant_id):
        await service.aggregate(tenant_id, now=NOW)

        repos["incident_repo"].list_by_statuses.assert_awaited_once_with(
            tenant_id, INCIDENT_APPROVAL_STATUSES
        )

    async def test_foreign_tenant_rows_dropped(self, service, repos, tenant_id):
        repos["gate_pass_repo"].list_pending.return_value = [
            MaterialGatePassFactory.build(tenant_id=tenant_id),
            MaterialGatePassFactory.build(tenant_id=uuid4()),
        ]
        repos["request_repo"].list_pending.return_value = [
            PendingApprovalRequestFactory.build(tenant_id=uuid4())
        ]

        approvals = await service.aggregate(tenant_id, now=NOW)

        assert len(approvals) == 1
        assert approvals[0].category == ApprovalCategory.GATE_PASS

    async def test_names_resolved_in_one_lookup(self, service, repos, tenant_id):
        company = ContractorCompanyFactory.build(tenant_id=tenant_id, status="approved")
        dept_id = uuid4()
        repos["incident_repo"].list_by_statuses.return_value = [
            IncidentFactory.build(tenant_id=tenant_id, department_id=dept_id) for _ in range(3)
        ]
        repos["gate_pass_repo"].list_pending.return_value = [
            MaterialGatePassFactory.build(tenant_id=tenant_id, company_id=company.id)
            for _ in range(2)
        ]
        repos["worker_repo"].list_pending.return_value = [
            ContractorWorkerFactory.build(tenant_id=tenant_id, company_id=company.id)
        ]
        repos["department_repo"].names_by_ids.return_value = {dept_id: "Operations"}
        repos["company_repo"].names_by_ids.return_value = {company.id: company.company_name}

        approvals = await service.aggregate(tenant_id, now=NOW)

        repos["department_repo"].names_by_ids.assert_awaited_once()
        repos["company_repo"].names_by_ids.assert_awaited_once()
        incidents = [a for a in approvals if a.category == ApprovalCategory.INCIDENT]
        assert {a.department_name for a in incidents} == {"Operations"}
        others = [a for a in approvals if a.category != ApprovalCategory.INCIDENT]
        assert {a.company_name for a in others} == {company.company_name}

    async def test_missing_names_default_to_empty(self, service, repos, tenant_id):
        repos["worker_repo"].list_pending.return_value = [
            ContractorWorkerFactory.build(tenant_id=tenant_id, company_id=uuid4())
        ]

        [worker] = await service.aggregate(tenant_id, now=NOW)

        assert worker.company_name == ""
        assert worker.status == "pending_approval"
        assert worker.reference_id == short_reference(worker.id)

    async def test_request_normalization(self, service, repos, tenant_id):
        repos["request_repo"].list_pending.return_value = [
            PendingApprovalRequestFactory.build(
                tenant_id=tenant_id, approval_type="visitor_pass", priority="HIGH"
            ),
            PendingApprovalRequestFactory.build(tenant_id=tenant_id, priority="whenever"),
        ]

        approvals = await service.aggregate(tenant_id, now=NOW)

        priorities = {a.category: a.priority for a in approvals}
        assert priorities == {ApprovalCategory.VISITOR: "high", ApprovalCategory.ASSET: None}

    async def test_filters_and_sort(self, service, repos, tenant_id):
        repos["gate_pass_repo"].list_pending.return_value = [
            MaterialGatePassFactory.build(tenant_id=tenant_id, created_at=NOW - timedelta(days=d))
            for d in (1, 9, 4)
        ]
        repos["company_repo"].list_pending.return_value = [
            ContractorCompanyFactory.build(tenant_id=tenant_id, created_at=NOW - timedelta(days=7))
        ]

        approvals = await service.aggregate(tenant_id, now=NOW)
        assert [a.days_pending for a in approvals] == [9, 7, 4, 1]

        filtered = await service.aggregate(
            tenant_id, min_days_pending=4, category=ApprovalCategory.GATE_PASS, now=NOW
        )
        assert [a.days_pending for a in filtered] == [9, 4]

    async def test_query_failure_raises_aggregation_error(self, service, repos, tenant_id):
        repos["worker_repo"].list_pending.side_effect = OperationalError(
            "SELECT", {}, Exception("gone")
        )

        with pytest.raises(AggregationError):
            await service.aggregate(tenant_id)


class TestCounts:
    async def test_counts_per_category(self, service, repos, tenant_id):
        repos["incident_repo"].list_by_statuses.return_value = [
            IncidentFactory.build(tenant_id=tenant_id)
        ]
        repos["request_repo"].list_pending.return_value = [
            PendingApprovalRequestFactory.build(tenant_id=tenant_id),
            PendingApprovalRequestFactory.build(tenant_id=tenant_id, approval_type="gate_exit"),
        ]

        counts = await service.counts(tenant_id)

        assert counts.total == 3
        assert counts.incident == 1
        assert counts.asset == 1
        assert counts.gate_pass == 1
        assert counts.visitor == 0

    async def test_counts_without_tenant(self, service):
        counts = await service.counts(None)

        assert counts.total == 0

    def test_counts_by_category_empty(self):
        assert counts_by_category([]).model_dump() == {
            "total": 0,
            "incident": 0,
            "gate_pass": 0,
            "worker": 0,
            "contractor": 0,
            "visitor": 0,
            "asset": 0,
        }
