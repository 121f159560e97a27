"""Incident audit trail writer - append-only compliance record."""

import contextlib
from typing import Any
from uuid import UUID

from asgi_correlation_id import correlation_id
from sqlalchemy.ext.asyncio import AsyncSession

from src.safeops.core.logging import get_logger
from src.safeops.models import AuditAction, IncidentAuditLog
from src.safeops.repositories import IncidentAuditLogRepository

logger = get_logger(__name__)

MAX_DETAIL_TEXT = 2000


class AuditLogWriter:
    """Appends one entry per successful incident transition.

    Runs on its own session and commits independently of the transition it
    records. Never raises: a failed append leaves the already-committed
    transition in place and is logged as a warning.
    """

    def __init__(self, audit_repo: IncidentAuditLogRepository, session: AsyncSession):
        self.audit_repo = audit_repo
        self.session = session

    async def append(
        self,
        incident_id: UUID,
        tenant_id: UUID,
        actor_id: UUID,
        action: AuditAction | str,
        details: dict[str, Any] | None = None,
    ) -> IncidentAuditLog | None:
        """Record an audit entry.

        Args:
            incident_id: Incident the transition applied to
            tenant_id: Owning tenant
            actor_id: User who performed the transition
            action: The transition performed
            details: JSON-serializable context (statuses, notes, counts)

        Returns:
            The created entry, or None if recording failed
        """
        action_value = action.value if isinstance(action, AuditAction) else action
        try:
            entry = IncidentAuditLog(
                incident_id=incident_id,
                tenant_id=tenant_id,
                actor_id=actor_id,
                action=action_value,
                details=_clip(details or {}),
                request_id=correlation_id.get(),
            )
            self.audit_repo.add(entry)
            await self.session.commit()

            logger.debug(
                "Audit entry recorded",
                action=action_value,
                incident_id=str(incident_id),
            )
            return entry

        except Exception as e:
            # The transition stays committed without its entry
            logger.warning(
                "Failed to record audit entry",
                action=action_value,
                incident_id=str(incident_id),
                tenant_id=str(tenant_id),
                error=str(e),
            )
            with contextlib.suppress(Exception):
                await self.session.rollback()
            return None

    async def list_for_incident(
        self,
        incident_id: UUID,
        tenant_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[IncidentAuditLog], str | None, bool]:
        """List the audit trail of one incident, newest first."""
        return await self.audit_repo.list_by_incident(
            incident_id=incident_id,
            tenant_id=tenant_id,
            cursor=cursor,
            limit=limit,
        )


def _clip(details: dict[str, Any]) -> dict[str, Any]:
    """Truncate long free-text values so one entry cannot bloat the log table."""
    return {
        key: value[:MAX_DETAIL_TEXT] if isinstance(value, str) else value
        for key, value in details.items()
    }
