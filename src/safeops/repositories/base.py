"""Base repository with tenant-scoped data access."""

from typing import Any
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from src.safeops.schemas.pagination import decode_cursor, encode_cursor


class BaseRepository[ModelType: SQLModel]:
    """Data access for one table model.

    Repositories never commit; services own the transaction. Every lookup
    takes the tenant id and filters on it, so there is no unscoped read.
    """

    model: type[ModelType]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_tenant(self, id: UUID, tenant_id: UUID) -> ModelType | None:
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == id,  # type: ignore[attr-defined]
                self.model.tenant_id == tenant_id,  # type: ignore[attr-defined]
            )
        )
        return result.scalar_one_or_none()

    def add(self, entity: ModelType) -> None:
        """Stage ``entity`` on the session (no flush/commit)."""
        self.session.add(entity)

    async def paginate(
        self,
        query: Any,  # SelectOfScalar - SQLModel query
        cursor: str | None,
        limit: int,
        position: Any,
    ) -> tuple[list[ModelType], str | None, bool]:
        """Keyset pagination, newest first.

        Rows are ordered by ``(position, id)`` descending, so rows sharing a
        timestamp are neither skipped nor repeated across pages. A malformed
        cursor restarts from the first page.

        Args:
            query: Base select, already tenant-filtered
            cursor: Cursor returned with the previous page
            limit: Page size
            position: Datetime column to order by (e.g. ``created_at``)

        Returns:
            Tuple of (items, next_cursor, has_more)
        """
        row_id = self.model.id  # type: ignore[attr-defined]

        if cursor:
            try:
                after_position, after_id = decode_cursor(cursor)
            except ValueError:
                pass
            else:
                query = query.where(
                    or_(
                        position < after_position,
                        and_(position == after_position, row_id < after_id),
                    )
                )

        query = query.order_by(position.desc(), row_id.desc()).limit(limit + 1)
        result = await self.session.execute(query)
        items = list(result.scalars().all())

        has_more = len(items) > limit
        items = items[:limit]
        next_cursor = None
        if has_more:
            last = items[-1]
            next_cursor = encode_cursor(getattr(last, position.key), last.id)

        return items, next_cursor, has_more
