"""Source tables read by the unified pending-approvals feed.

These rows are owned by the contractor, gate-pass and asset modules; the
workflow core only reads them.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.safeops.models.base import utc_now


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    name: str = Field(max_length=200)
    created_at: datetime = Field(default_factory=utc_now)


class ContractorCompany(SQLModel, table=True):
    __tablename__ = "contractor_companies"
    __table_args__ = (Index("ix_contractor_companies_tenant_status", "tenant_id", "status"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    company_name: str = Field(max_length=200)
    status: str = Field(default="pending", max_length=30)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
    deleted_at: datetime | None = Field(default=None)


class ContractorWorker(SQLModel, table=True):
    __tablename__ = "contractor_workers"
    __table_args__ = (
        Index("ix_contractor_workers_tenant_approval", "tenant_id", "approval_status"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    company_id: UUID | None = Field(default=None, foreign_key="contractor_companies.id")
    full_name: str = Field(max_length=200)
    worker_type: str | None = Field(default=None, max_length=50)
    approval_status: str = Field(default="pending", max_length=30)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
    deleted_at: datetime | None = Field(default=None)


class MaterialGatePass(SQLModel, table=True):
    __tablename__ = "material_gate_passes"
    __table_args__ = (Index("ix_material_gate_passes_tenant_status", "tenant_id", "status"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    company_id: UUID | None = Field(default=None, foreign_key="contractor_companies.id")
    reference_number: str | None = Field(default=None, max_length=50)
    material_description: str | None = Field(default=None, max_length=500)
    pass_type: str | None = Field(default=None, max_length=50)
    status: str = Field(max_length=50)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
    deleted_at: datetime | None = Field(default=None)


class PendingApprovalRequest(SQLModel, table=True):
    """Generic approval request (asset purchases, visitor passes, ...)."""

    __tablename__ = "pending_approvals"
    __table_args__ = (Index("ix_pending_approvals_tenant_status", "tenant_id", "status"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    reference_id: str | None = Field(default=None, max_length=50)
    reference_number: str | None = Field(default=None, max_length=50)
    title: str | None = Field(default=None, max_length=300)
    approval_type: str | None = Field(default=None, max_length=100)
    priority: str | None = Field(default=None, max_length=20)
    requested_by_name: str | None = Field(default=None, max_length=200)
    status: str = Field(default="pending", max_length=30)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
