"""Severity level to approval-path resolution.

Pure lookups, no I/O. Levels are ordinals 1 (lowest) to 5 (highest).
"""

from dataclasses import dataclass

from src.safeops.core.exceptions import ValidationError

MIN_SEVERITY = 1
MAX_SEVERITY = 5


@dataclass(frozen=True)
class SeverityPolicy:
    """Which reviews a given severity level requires before closure."""

    level: int
    bypass_validation: bool
    requires_expert_validation: bool
    requires_manager_closure: bool
    blocked_until_verified: bool


_POLICIES: dict[int, SeverityPolicy] = {
    1: SeverityPolicy(1, True, False, False, False),
    2: SeverityPolicy(2, True, False, False, False),
    3: SeverityPolicy(3, False, True, False, False),
    4: SeverityPolicy(4, False, True, False, True),
    5: SeverityPolicy(5, False, True, True, True),
}

_FATAL_INJURIES = frozenset({"fatality", "permanent_disability"})
_LOST_TIME_INJURIES = frozenset({"lost_time_injury", "lost_time", "lwdc"})

_LEGACY_SEVERITY_MAP = {
    "low": 1,
    "medium": 2,
    "high": 3,
    "critical": 4,
}


def resolve_severity_policy(severity: int) -> SeverityPolicy:
    """Return the approval policy for ``severity``.

    Raises:
        ValidationError: If severity is outside 1..5. Values are never clamped.
    """
    # bool is an int subclass; True must not resolve as level 1
    if isinstance(severity, bool) or not isinstance(severity, int):
        raise ValidationError("Severity must be an integer level", severity=severity)
    policy = _POLICIES.get(severity)
    if policy is None:
        raise ValidationError(
            f"Severity must be between {MIN_SEVERITY} and {MAX_SEVERITY}",
            severity=severity,
        )
    return policy


def minimum_severity(
    injury_classification: str | None = None,
    erp_activated: bool = False,
    event_type: str | None = None,
) -> tuple[int, str | None]:
    """Lowest level a reporter may select given the event's facts.

    Returns:
        Tuple of (minimum level, reason key). Reason is None when unconstrained.
    """
    if injury_classification in _FATAL_INJURIES:
        return 5, "fatality_or_permanent_disability"
    if injury_classification in _LOST_TIME_INJURIES:
        return 4, "lost_time_injury"
    if erp_activated:
        return 4, "erp_activated"
    if event_type == "emergency_crisis":
        return 4, "emergency_crisis"
    return MIN_SEVERITY, None


def map_legacy_severity(value: str | None) -> int | None:
    """Translate a legacy low/medium/high/critical label to a level."""
    if not value:
        return None
    return _LEGACY_SEVERITY_MAP.get(value.strip().lower())
