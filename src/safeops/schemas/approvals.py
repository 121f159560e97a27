from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.safeops.models import ApprovalCategory


class PendingApproval(BaseModel):
    """One item of the unified pending-approvals feed. Never persisted."""

    id: UUID
    reference_id: str = ""
    title: str
    category: ApprovalCategory
    sub_type: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime
    days_pending: int = Field(ge=0)
    priority: str | None = None
    requester_name: str | None = None
    department_name: str | None = None
    company_name: str | None = None


class ApprovalCounts(BaseModel):
    total: int = 0
    incident: int = 0
    gate_pass: int = 0
    worker: int = 0
    contractor: int = 0
    visitor: int = 0
    asset: int = 0
