"""Request-scoped identity of the caller.

Built once per request by the API layer and passed explicitly into every
service call. Nothing in the core reads identity from ambient state.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from src.safeops.models.enums import RoleName


@dataclass(frozen=True)
class ActorContext:
    """Immutable actor identity for the current request."""

    actor_id: UUID
    tenant_id: UUID
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_any_role(self, allowed: Iterable[RoleName | str]) -> bool:
        """True if the actor holds at least one of ``allowed``."""
        names = {r.value if isinstance(r, RoleName) else r for r in allowed}
        return not self.roles.isdisjoint(names)
