"""Incident audit log model - append-only compliance trail."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Column, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from src.safeops.models.base import utc_now


class AuditAction(str, Enum):
    """Audit action types for type-safe logging."""

    SUBMIT = "observation_submit"
    CLOSE_ON_SPOT = "close_on_spot"
    ESCALATE_TO_HSSE = "escalate_to_hsse"
    HSSE_VALIDATION_ACCEPT = "hsse_validation_accept"
    HSSE_VALIDATION_REJECT = "hsse_validation_reject"
    MANAGER_FINAL_CLOSURE = "manager_final_closure"


class IncidentAuditLog(SQLModel, table=True):
    """One row per successful incident transition.

    Rows are never updated or deleted; compliance reporting reads them in
    ``created_at`` order.
    """

    __tablename__ = "incident_audit_logs"
    __table_args__ = (
        Index("ix_incident_audit_logs_incident_created", "incident_id", "created_at"),
        Index("ix_incident_audit_logs_tenant_created", "tenant_id", "created_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    incident_id: UUID = Field(foreign_key="incidents.id")
    tenant_id: UUID
    actor_id: UUID
    action: str = Field(max_length=50)  # AuditAction value
    details: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSONB, nullable=True),
    )
    request_id: str | None = Field(default=None, max_length=36)  # Correlation ID
    created_at: datetime = Field(default_factory=utc_now)
