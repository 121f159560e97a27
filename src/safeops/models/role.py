"""Role assignment models backing the role lookup."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.safeops.models.base import utc_now


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=50, unique=True, index=True)  # RoleName value
    created_at: datetime = Field(default_factory=utc_now)


class UserRoleAssignment(SQLModel, table=True):
    """Role held by a user within one tenant. Revoked by soft delete."""

    __tablename__ = "user_role_assignments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    tenant_id: UUID = Field(index=True)
    role_id: UUID = Field(foreign_key="roles.id")
    created_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)
