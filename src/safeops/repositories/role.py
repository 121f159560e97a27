"""Repository for the role lookup."""

from uuid import UUID

from sqlmodel import col, select

from src.safeops.models import Role, UserRoleAssignment
from src.safeops.repositories.base import BaseRepository


class RoleRepository(BaseRepository[UserRoleAssignment]):
    """Resolves the role names a user currently holds in a tenant."""

    model = UserRoleAssignment

    async def get_role_names(self, user_id: UUID, tenant_id: UUID) -> frozenset[str]:
        """Return active (non-revoked) role names for the user in the tenant."""
        result = await self.session.execute(
            select(Role.name)
            .join(UserRoleAssignment, col(UserRoleAssignment.role_id) == col(Role.id))
            .where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.tenant_id == tenant_id,
                col(UserRoleAssignment.deleted_at).is_(None),
            )
        )
        return frozenset(result.scalars().all())
