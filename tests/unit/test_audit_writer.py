"""Unit tests for AuditLogWriter."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from src.safeops.models import AuditAction
from src.safeops.services.audit_service import MAX_DETAIL_TEXT, AuditLogWriter

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_audit_repo() -> MagicMock:
    """Create mock audit repository."""
    repo = MagicMock()
    repo.add = MagicMock()
    repo.list_by_incident = AsyncMock(return_value=([], None, False))
    return repo


@pytest.fixture
def writer(mock_audit_repo, mock_session) -> AuditLogWriter:
    return AuditLogWriter(mock_audit_repo, mock_session)


class TestAppend:
    async def test_append_creates_entry(self, writer, mock_audit_repo, mock_session, tenant_id):
        incident_id = uuid4()
        actor_id = uuid4()

        entry = await writer.append(
            incident_id=incident_id,
            tenant_id=tenant_id,
            actor_id=actor_id,
            action=AuditAction.HSSE_VALIDATION_ACCEPT,
            details={"from_status": "pending_hsse_validation", "to_status": "closed"},
        )

        assert entry is not None
        mock_audit_repo.add.assert_called_once_with(entry)
        mock_session.commit.assert_awaited_once()
        assert entry.incident_id == incident_id
        assert entry.tenant_id == tenant_id
        assert entry.actor_id == actor_id
        assert entry.action == "hsse_validation_accept"
        assert entry.details["to_status"] == "closed"

    async def test_append_accepts_plain_action_string(self, writer, tenant_id):
        entry = await writer.append(uuid4(), tenant_id, uuid4(), "custom_action")

        assert entry.action == "custom_action"
        assert entry.details == {}

    async def test_append_includes_request_id(self, writer, tenant_id):
        with patch("src.safeops.services.audit_service.correlation_id") as mock_cid:
            mock_cid.get.return_value = "req-123"
            entry = await writer.append(uuid4(), tenant_id, uuid4(), AuditAction.SUBMIT)

        assert entry.request_id == "req-123"

    async def test_append_truncates_long_text(self, writer, tenant_id):
        entry = await writer.append(
            uuid4(),
            tenant_id,
            uuid4(),
            AuditAction.MANAGER_FINAL_CLOSURE,
            details={"justification": "x" * 5000, "severity": 5},
        )

        assert len(entry.details["justification"]) == MAX_DETAIL_TEXT
        assert entry.details["severity"] == 5

    async def test_commit_failure_returns_none_and_rolls_back(
        self, writer, mock_session, tenant_id
    ):
        mock_session.commit.side_effect = Exception("connection lost")

        entry = await writer.append(uuid4(), tenant_id, uuid4(), AuditAction.CLOSE_ON_SPOT)

        assert entry is None
        mock_session.rollback.assert_awaited_once()

    async def test_failure_is_logged(self, writer, mock_session, tenant_id):
        mock_session.commit.side_effect = Exception("connection lost")

        with patch("src.safeops.services.audit_service.logger") as mock_logger:
            await writer.append(uuid4(), tenant_id, uuid4(), AuditAction.CLOSE_ON_SPOT)

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["error"] == "connection lost"

    async def test_rollback_failure_is_swallowed(self, writer, mock_session, tenant_id):
        mock_session.commit.side_effect = Exception("connection lost")
        mock_session.rollback.side_effect = Exception("still lost")

        assert await writer.append(uuid4(), tenant_id, uuid4(), AuditAction.SUBMIT) is None


async def test_list_for_incident_is_tenant_scoped(writer, mock_audit_repo, tenant_id):
    incident_id = uuid4()

    await writer.list_for_incident(incident_id, tenant_id, cursor="abc", limit=10)

    mock_audit_repo.list_by_incident.assert_awaited_once_with(
        incident_id=incident_id, tenant_id=tenant_id, cursor="abc", limit=10
    )
