"""Actor identity dependencies.

Authentication happens upstream (gateway). The gateway forwards the verified
tenant and user ids as headers; roles are looked up here per request.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from src.safeops.api.dependencies.db import DBSession
from src.safeops.core.actor_context import ActorContext
from src.safeops.core.logging import bind_actor_context
from src.safeops.repositories import RoleRepository


def _parse_uuid(value: str, header: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header} header must be a UUID",
        ) from e


async def get_tenant_id_from_header(
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Extract tenant ID from header."""
    if not x_tenant_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header is required",
        )
    return _parse_uuid(x_tenant_id, "X-Tenant-ID")


async def get_actor_id_from_header(
    x_actor_id: Annotated[str | None, Header()] = None,
) -> UUID:
    """Extract the authenticated user ID from header."""
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-ID header is required",
        )
    return _parse_uuid(x_actor_id, "X-Actor-ID")


TenantId = Annotated[UUID, Depends(get_tenant_id_from_header)]
ActorId = Annotated[UUID, Depends(get_actor_id_from_header)]


async def get_actor_context(
    tenant_id: TenantId,
    actor_id: ActorId,
    session: DBSession,
) -> ActorContext:
    """Build the request-scoped actor with its roles in the tenant."""
    roles = await RoleRepository(session).get_role_names(actor_id, tenant_id)
    bind_actor_context(actor_id, tenant_id)
    return ActorContext(actor_id=actor_id, tenant_id=tenant_id, roles=roles)


CurrentActor = Annotated[ActorContext, Depends(get_actor_context)]
