"""Shared enums for models."""

from enum import Enum


class EventType(str, Enum):
    """Kind of HSSE event recorded in the incidents table."""

    INCIDENT = "incident"
    OBSERVATION = "observation"


class ObservationStatus(str, Enum):
    """Closed set of states an observation moves through."""

    DRAFT = "draft"
    PENDING_DEPT_REP_APPROVAL = "pending_dept_rep_approval"
    OBSERVATION_ACTIONS_PENDING = "observation_actions_pending"
    PENDING_HSSE_VALIDATION = "pending_hsse_validation"
    PENDING_FINAL_CLOSURE = "pending_final_closure"
    CLOSED = "closed"


class ValidationDecision(str, Enum):
    """HSSE expert decision on an observation."""

    ACCEPT = "accept"
    REJECT = "reject"


class HSSEValidationStatus(str, Enum):
    """Recorded outcome of HSSE validation."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"


class ManagerDecision(str, Enum):
    """HSSE manager decision on a level-5 closure."""

    APPROVED = "approved"


class CorrectiveActionStatus(str, Enum):
    """Corrective action lifecycle (owned by the actions module)."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    VERIFIED = "verified"
    CANCELLED = "cancelled"


class RoleName(str, Enum):
    """Role names consulted by the approval workflow."""

    ADMIN = "admin"
    HSSE_EXPERT = "hsse_expert"
    HSSE_MANAGER = "hsse_manager"
    ENVIRONMENTAL = "environmental"
    DEPT_REPRESENTATIVE = "dept_representative"


class WorkflowInstanceStatus(str, Enum):
    """Generic workflow instance status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class PerformanceTrend(str, Enum):
    """Direction of average completion time for a workflow key."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class BottleneckSeverity(str, Enum):
    """Alert level derived from the number of instances stuck on a step."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ApprovalCategory(str, Enum):
    """Category of a normalized pending approval."""

    INCIDENT = "incident"
    GATE_PASS = "gate_pass"
    WORKER = "worker"
    CONTRACTOR = "contractor"
    VISITOR = "visitor"
    ASSET = "asset"


class ChangeEventType(str, Enum):
    """Row-level change kinds published on the change feed."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class ConnectionState(str, Enum):
    """Change-feed subscription state exposed to consumers."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"
