"""Repository for IncidentAuditLog entity."""

from uuid import UUID

from sqlmodel import select

from src.safeops.models import IncidentAuditLog
from src.safeops.repositories.base import BaseRepository


class IncidentAuditLogRepository(BaseRepository[IncidentAuditLog]):
    """Append/read access to the incident audit trail. No update or delete."""

    model = IncidentAuditLog

    async def list_by_incident(
        self,
        incident_id: UUID,
        tenant_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
    ) -> tuple[list[IncidentAuditLog], str | None, bool]:
        """List audit entries for one incident, newest first.

        Args:
            incident_id: Incident to filter by
            tenant_id: Owning tenant
            cursor: Pagination cursor
            limit: Maximum items to return

        Returns:
            Tuple of (entries, next_cursor, has_more)
        """
        query = select(IncidentAuditLog).where(
            IncidentAuditLog.incident_id == incident_id,
            IncidentAuditLog.tenant_id == tenant_id,
        )
        return await self.paginate(query, cursor, limit, IncidentAuditLog.created_at)

    async def list_by_tenant(
        self,
        tenant_id: UUID,
        cursor: str | None = None,
        limit: int = 50,
        action: str | None = None,
    ) -> tuple[list[IncidentAuditLog], str | None, bool]:
        """List audit entries for a tenant, optionally filtered by action."""
        query = select(IncidentAuditLog).where(IncidentAuditLog.tenant_id == tenant_id)
        if action:
            query = query.where(IncidentAuditLog.action == action)
        return await self.paginate(query, cursor, limit, IncidentAuditLog.created_at)
