"""Repositories for incidents and their corrective actions."""

from collections.abc import Iterable
from typing import Any, cast
from uuid import UUID

from sqlalchemy import func, update
from sqlalchemy.engine import CursorResult
from sqlmodel import col, select

from src.safeops.models import CorrectiveAction, CorrectiveActionStatus, Incident
from src.safeops.models.base import utc_now
from src.safeops.repositories.base import BaseRepository

# Corrective actions in these states no longer block observation closure
RESOLVED_ACTION_STATUSES = (
    CorrectiveActionStatus.VERIFIED.value,
    CorrectiveActionStatus.COMPLETED.value,
    CorrectiveActionStatus.CANCELLED.value,
)


class IncidentRepository(BaseRepository[Incident]):
    """Repository for Incident entity."""

    model = Incident

    async def get_for_tenant(self, id: UUID, tenant_id: UUID) -> Incident | None:
        """Get a non-deleted incident within a tenant."""
        result = await self.session.execute(
            select(Incident).where(
                Incident.id == id,
                Incident.tenant_id == tenant_id,
                col(Incident.deleted_at).is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def update_if_status(
        self,
        incident_id: UUID,
        tenant_id: UUID,
        expected_status: str,
        values: dict[str, Any],
    ) -> bool:
        """Apply ``values`` only if the row is still in ``expected_status``.

        This is the compare-and-set guarding concurrent approvers: the second
        of two racing transitions matches zero rows.

        Returns:
            True if exactly one row was updated
        """
        stmt = (
            update(Incident)
            .where(
                col(Incident.id) == incident_id,
                col(Incident.tenant_id) == tenant_id,
                col(Incident.status) == expected_status,
                col(Incident.deleted_at).is_(None),
            )
            .values(**values, updated_at=utc_now())
        )
        result = await self.session.execute(stmt)
        return cast(CursorResult[Any], result).rowcount == 1

    async def list_by_statuses(self, tenant_id: UUID, statuses: Iterable[str]) -> list[Incident]:
        """List non-deleted incidents in any of ``statuses``, oldest update first."""
        result = await self.session.execute(
            select(Incident)
            .where(
                Incident.tenant_id == tenant_id,
                col(Incident.status).in_(list(statuses)),
                col(Incident.deleted_at).is_(None),
            )
            .order_by(col(Incident.updated_at).asc())
        )
        return list(result.scalars().all())


class CorrectiveActionRepository(BaseRepository[CorrectiveAction]):
    """Read-only access to corrective actions."""

    model = CorrectiveAction

    async def count_pending(self, incident_id: UUID, tenant_id: UUID) -> int:
        """Count actions that are not yet resolved and not soft-deleted."""
        result = await self.session.execute(
            select(func.count())
            .select_from(CorrectiveAction)
            .where(
                CorrectiveAction.incident_id == incident_id,
                CorrectiveAction.tenant_id == tenant_id,
                col(CorrectiveAction.status).not_in(RESOLVED_ACTION_STATUSES),
                col(CorrectiveAction.deleted_at).is_(None),
            )
        )
        return int(result.scalar_one())
