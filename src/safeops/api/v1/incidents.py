"""Observation approval endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query

from src.safeops.api.dependencies import AuditWriterDep, CurrentActor, ObservationServiceDep
from src.safeops.core.exceptions import AuthorizationError
from src.safeops.schemas import (
    AuditLogRead,
    ClosureResponse,
    FinalClosureRequest,
    PaginatedResponse,
    TransitionNotes,
    TransitionResponse,
    ValidationRequest,
)
from src.safeops.services.observation_service import (
    DEPARTMENT_REVIEW_ROLES,
    FINAL_CLOSURE_ROLES,
    VALIDATOR_ROLES,
)

router = APIRouter(prefix="/incidents", tags=["incidents"])

AUDIT_READER_ROLES = VALIDATOR_ROLES | FINAL_CLOSURE_ROLES | DEPARTMENT_REVIEW_ROLES

CursorQuery = Annotated[str | None, Query(description="Pagination cursor")]
LimitQuery = Annotated[int, Query(ge=1, le=100, description="Items per page")]

_NOT_FOUND = {404: {"description": "Observation not found"}}
_CONFLICT = {409: {"description": "Transition not allowed from the current status"}}


@router.post(
    "/{incident_id}/submit",
    response_model=TransitionResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def submit_observation(
    incident_id: UUID,
    actor: CurrentActor,
    service: ObservationServiceDep,
) -> TransitionResponse:
    """Send a draft observation to the department representative."""
    result = await service.submit(incident_id, actor)
    return TransitionResponse(incident_id=result.incident_id, new_status=result.new_status)


@router.post(
    "/{incident_id}/close-on-spot",
    response_model=TransitionResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def close_on_spot(
    incident_id: UUID,
    actor: CurrentActor,
    service: ObservationServiceDep,
    body: TransitionNotes | None = None,
) -> TransitionResponse:
    """Close a level 1-2 observation without HSSE review."""
    result = await service.close_on_spot(incident_id, actor, body.notes if body else None)
    return TransitionResponse(incident_id=result.incident_id, new_status=result.new_status)


@router.post(
    "/{incident_id}/escalate",
    response_model=TransitionResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def escalate_to_hsse(
    incident_id: UUID,
    actor: CurrentActor,
    service: ObservationServiceDep,
    body: TransitionNotes | None = None,
) -> TransitionResponse:
    """Forward an observation to HSSE validation."""
    result = await service.escalate_to_hsse(incident_id, actor, body.notes if body else None)
    return TransitionResponse(incident_id=result.incident_id, new_status=result.new_status)


@router.post(
    "/{incident_id}/hsse-validation",
    response_model=TransitionResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def hsse_validation(
    incident_id: UUID,
    body: ValidationRequest,
    actor: CurrentActor,
    service: ObservationServiceDep,
) -> TransitionResponse:
    """Accept or reject an observation as an HSSE validator."""
    result = await service.validate(incident_id, body.decision, actor, body.notes)
    return TransitionResponse(incident_id=result.incident_id, new_status=result.new_status)


@router.post(
    "/{incident_id}/final-closure",
    response_model=ClosureResponse,
    responses={**_NOT_FOUND, **_CONFLICT},
)
async def final_closure(
    incident_id: UUID,
    body: FinalClosureRequest,
    actor: CurrentActor,
    service: ObservationServiceDep,
) -> ClosureResponse:
    """HSSE manager closure of a level-5 observation."""
    result = await service.manager_final_closure(incident_id, body.justification, actor)
    return ClosureResponse(incident_id=result.incident_id)


@router.get(
    "/{incident_id}/audit",
    response_model=PaginatedResponse[AuditLogRead],
    responses=_NOT_FOUND,
)
async def get_incident_audit(
    incident_id: UUID,
    actor: CurrentActor,
    audit_writer: AuditWriterDep,
    cursor: CursorQuery = None,
    limit: LimitQuery = 50,
) -> PaginatedResponse[AuditLogRead]:
    """Audit trail of one incident, newest first."""
    if not actor.has_any_role(AUDIT_READER_ROLES):
        raise AuthorizationError("Actor lacks required role", incident_id=incident_id)

    logs, next_cursor, has_more = await audit_writer.list_for_incident(
        incident_id=incident_id,
        tenant_id=actor.tenant_id,
        cursor=cursor,
        limit=limit,
    )
    return PaginatedResponse[AuditLogRead](
        items=[AuditLogRead.model_validate(log) for log in logs],
        next_cursor=next_cursor,
        has_more=has_more,
    )
