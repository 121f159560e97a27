"""Tests for the observation transition table."""

import pytest

from src.safeops.core.exceptions import InvalidTransitionError
from src.safeops.models import ObservationStatus
from src.safeops.services.observation_transitions import (
    TERMINAL_STATUSES,
    TRANSITIONS,
    ObservationEvent,
    events_from,
    next_status,
)

pytestmark = pytest.mark.unit

S = ObservationStatus
E = ObservationEvent


@pytest.mark.parametrize(
    ("current", "event", "expected"),
    [
        (S.DRAFT, E.SUBMIT, S.PENDING_DEPT_REP_APPROVAL),
        (S.PENDING_DEPT_REP_APPROVAL, E.CLOSE_ON_SPOT, S.CLOSED),
        (S.PENDING_DEPT_REP_APPROVAL, E.ESCALATE_TO_HSSE, S.PENDING_HSSE_VALIDATION),
        (S.PENDING_HSSE_VALIDATION, E.HSSE_REJECT, S.PENDING_DEPT_REP_APPROVAL),
        (S.PENDING_HSSE_VALIDATION, E.HSSE_ACCEPT_MANAGER_REQUIRED, S.PENDING_FINAL_CLOSURE),
        (S.PENDING_HSSE_VALIDATION, E.HSSE_ACCEPT_ACTIONS_PENDING, S.OBSERVATION_ACTIONS_PENDING),
        (S.PENDING_HSSE_VALIDATION, E.HSSE_ACCEPT_NO_PENDING_ACTIONS, S.CLOSED),
        (S.OBSERVATION_ACTIONS_PENDING, E.HSSE_ACCEPT_NO_PENDING_ACTIONS, S.CLOSED),
        (S.PENDING_FINAL_CLOSURE, E.MANAGER_FINAL_CLOSURE, S.CLOSED),
    ],
)
def test_allowed_transitions(current, event, expected):
    assert next_status(current, event) == expected


def test_accepts_raw_status_strings():
    assert next_status("pending_final_closure", E.MANAGER_FINAL_CLOSURE) == S.CLOSED


@pytest.mark.parametrize("event", list(ObservationEvent))
def test_closed_is_terminal(event):
    with pytest.raises(InvalidTransitionError):
        next_status(S.CLOSED, event)


def test_terminal_statuses_have_no_outgoing_events():
    for status in TERMINAL_STATUSES:
        assert events_from(status) == []


def test_every_pair_not_in_table_is_invalid():
    for status in ObservationStatus:
        for event in ObservationEvent:
            if (status, event) in TRANSITIONS:
                continue
            with pytest.raises(InvalidTransitionError):
                next_status(status, event)


def test_manager_closure_requires_pending_final_closure():
    with pytest.raises(InvalidTransitionError):
        next_status(S.PENDING_HSSE_VALIDATION, E.MANAGER_FINAL_CLOSURE)


def test_reject_only_from_hsse_validation():
    with pytest.raises(InvalidTransitionError):
        next_status(S.OBSERVATION_ACTIONS_PENDING, E.HSSE_REJECT)


def test_unknown_status_is_invalid_transition():
    with pytest.raises(InvalidTransitionError, match="Unknown observation status"):
        next_status("pending_legal_review", E.SUBMIT)


def test_invalid_transition_is_http_conflict():
    with pytest.raises(InvalidTransitionError) as exc_info:
        next_status(S.DRAFT, E.MANAGER_FINAL_CLOSURE)
    assert exc_info.value.status_code == 409
    assert exc_info.value.context["status"] == "draft"


def test_events_from_pending_hsse_validation():
    assert set(events_from(S.PENDING_HSSE_VALIDATION)) == {
        E.HSSE_REJECT,
        E.HSSE_ACCEPT_MANAGER_REQUIRED,
        E.HSSE_ACCEPT_ACTIONS_PENDING,
        E.HSSE_ACCEPT_NO_PENDING_ACTIONS,
    }
