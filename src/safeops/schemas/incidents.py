"""Observation approval schemas for API request/response."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.safeops.models import ObservationStatus, ValidationDecision


class ValidationRequest(BaseModel):
    """HSSE expert decision on an observation."""

    decision: ValidationDecision
    notes: str | None = Field(default=None, max_length=2000)


class FinalClosureRequest(BaseModel):
    """HSSE manager closure of a level-5 observation."""

    justification: str = Field(min_length=1, max_length=2000)

    @field_validator("justification")
    @classmethod
    def validate_justification(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Justification cannot be empty or whitespace only")
        return v


class TransitionNotes(BaseModel):
    """Optional free-text notes for department-level transitions."""

    notes: str | None = Field(default=None, max_length=2000)


class TransitionResponse(BaseModel):
    incident_id: UUID
    new_status: ObservationStatus


class ClosureResponse(BaseModel):
    incident_id: UUID
    status: ObservationStatus = ObservationStatus.CLOSED


class AuditLogRead(BaseModel):
    """Incident audit entry for API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    incident_id: UUID
    tenant_id: UUID
    actor_id: UUID
    action: str
    details: dict[str, Any] | None
    request_id: str | None
    created_at: datetime
