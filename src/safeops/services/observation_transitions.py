"""Static transition table for the observation approval workflow."""

from enum import Enum

from src.safeops.core.exceptions import InvalidTransitionError
from src.safeops.models.enums import ObservationStatus


class ObservationEvent(str, Enum):
    """Events that move an observation between states."""

    SUBMIT = "submit"
    CLOSE_ON_SPOT = "close_on_spot"
    ESCALATE_TO_HSSE = "escalate_to_hsse"
    HSSE_REJECT = "hsse_reject"
    HSSE_ACCEPT_MANAGER_REQUIRED = "hsse_accept_manager_required"
    HSSE_ACCEPT_ACTIONS_PENDING = "hsse_accept_actions_pending"
    HSSE_ACCEPT_NO_PENDING_ACTIONS = "hsse_accept_no_pending_actions"
    MANAGER_FINAL_CLOSURE = "manager_final_closure"


_S = ObservationStatus
_E = ObservationEvent

TRANSITIONS: dict[tuple[ObservationStatus, ObservationEvent], ObservationStatus] = {
    (_S.DRAFT, _E.SUBMIT): _S.PENDING_DEPT_REP_APPROVAL,
    (_S.PENDING_DEPT_REP_APPROVAL, _E.CLOSE_ON_SPOT): _S.CLOSED,
    (_S.PENDING_DEPT_REP_APPROVAL, _E.ESCALATE_TO_HSSE): _S.PENDING_HSSE_VALIDATION,
    (_S.PENDING_HSSE_VALIDATION, _E.HSSE_REJECT): _S.PENDING_DEPT_REP_APPROVAL,
    (_S.PENDING_HSSE_VALIDATION, _E.HSSE_ACCEPT_MANAGER_REQUIRED): _S.PENDING_FINAL_CLOSURE,
    (_S.PENDING_HSSE_VALIDATION, _E.HSSE_ACCEPT_ACTIONS_PENDING): _S.OBSERVATION_ACTIONS_PENDING,
    (_S.PENDING_HSSE_VALIDATION, _E.HSSE_ACCEPT_NO_PENDING_ACTIONS): _S.CLOSED,
    # Re-check of the corrective-action gate after HSSE already accepted
    (_S.OBSERVATION_ACTIONS_PENDING, _E.HSSE_ACCEPT_ACTIONS_PENDING): (
        _S.OBSERVATION_ACTIONS_PENDING
    ),
    (_S.OBSERVATION_ACTIONS_PENDING, _E.HSSE_ACCEPT_NO_PENDING_ACTIONS): _S.CLOSED,
    (_S.PENDING_FINAL_CLOSURE, _E.MANAGER_FINAL_CLOSURE): _S.CLOSED,
}

TERMINAL_STATUSES = frozenset({ObservationStatus.CLOSED})


def next_status(current: ObservationStatus | str, event: ObservationEvent) -> ObservationStatus:
    """Look up the target state for ``event`` from ``current``.

    Raises:
        InvalidTransitionError: If the pair is not in the table, or ``current``
            is not a known observation status.
    """
    try:
        state = ObservationStatus(current)
    except ValueError:
        raise InvalidTransitionError(
            f"Unknown observation status '{current}'",
            status=current,
            event=event.value,
        ) from None

    target = TRANSITIONS.get((state, event))
    if target is None:
        raise InvalidTransitionError(
            f"Cannot {event.value} an observation in status '{state.value}'",
            status=state.value,
            event=event.value,
        )
    return target


def events_from(current: ObservationStatus) -> list[ObservationEvent]:
    """Events accepted from ``current``, in table order."""
    return [event for (state, event) in TRANSITIONS if state == current]
