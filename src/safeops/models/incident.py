"""Incident/observation and corrective action models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.safeops.models.base import utc_now
from src.safeops.models.enums import EventType, ObservationStatus


class Incident(SQLModel, table=True):
    """HSSE event (incident or observation) moving through the approval workflow."""

    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_tenant_status", "tenant_id", "status"),
        Index("ix_incidents_tenant_updated", "tenant_id", "updated_at"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    reference_id: str | None = Field(default=None, max_length=50)
    title: str = Field(max_length=300)
    event_type: str = Field(default=EventType.OBSERVATION.value, max_length=30)
    severity: int = Field(ge=1, le=5)
    status: str = Field(default=ObservationStatus.DRAFT.value, max_length=50)
    department_id: UUID | None = Field(default=None)
    reporter_id: UUID | None = Field(default=None)

    # Severity-derived workflow flag
    closure_requires_manager: bool = Field(default=False)

    # HSSE expert validation
    hsse_validation_status: str | None = Field(default=None, max_length=20)
    hsse_validated_by: UUID | None = Field(default=None)
    hsse_validated_at: datetime | None = Field(default=None)
    hsse_validation_notes: str | None = Field(default=None, max_length=2000)

    # HSSE manager final closure (level 5)
    hsse_manager_decision: str | None = Field(default=None, max_length=20)
    hsse_manager_decision_by: UUID | None = Field(default=None)
    hsse_manager_justification: str | None = Field(default=None, max_length=2000)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)

    @property
    def status_enum(self) -> ObservationStatus:
        """Get status as ObservationStatus enum."""
        return ObservationStatus(self.status)

    @property
    def is_observation(self) -> bool:
        return self.event_type == EventType.OBSERVATION.value

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class CorrectiveAction(SQLModel, table=True):
    """Remedial task linked to an incident. Read-only for the workflow core."""

    __tablename__ = "corrective_actions"
    __table_args__ = (Index("ix_corrective_actions_incident_status", "incident_id", "status"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(index=True)
    incident_id: UUID = Field(foreign_key="incidents.id")
    title: str = Field(max_length=300)
    status: str = Field(max_length=30)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)
