"""Live status rollups and bottleneck detection for tracked workflows.

The folds in this module are pure: they take instances and open step rows and
return rollups. ``LiveStatusService`` only loads their inputs and, on refresh,
materializes the result into ``workflow_live_status``.

Performance trend rule: compare the mean completion time of instances
completed in the current window ``(now - window, now]`` with that of the
previous equal window. A relative change inside the tolerance band (10% by
default, inclusive) is ``stable``; faster is ``improving``; slower is
``declining``. If either window has no completions the trend is ``stable``.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from statistics import fmean
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.safeops.core.config import get_settings
from src.safeops.core.exceptions import AggregationError, PersistenceError
from src.safeops.core.logging import get_logger
from src.safeops.models import (
    BottleneckSeverity,
    PerformanceTrend,
    WorkflowInstance,
    WorkflowInstanceStatus,
    WorkflowLiveStatus,
    WorkflowStepHistory,
)
from src.safeops.models.base import as_naive_utc, utc_day_start, utc_now
from src.safeops.repositories import (
    WorkflowInstanceRepository,
    WorkflowLiveStatusRepository,
    WorkflowStepHistoryRepository,
)

logger = get_logger(__name__)

MEDIUM_BOTTLENECK_THRESHOLD = 5
HIGH_BOTTLENECK_THRESHOLD = 10


@dataclass(frozen=True)
class BottleneckAlert:
    workflow_key: str
    step_id: str
    count: int
    severity: BottleneckSeverity


@dataclass(frozen=True)
class WorkflowMetrics:
    """Cross-workflow dashboard summary."""

    total_active: int
    completed_today: int
    avg_completion_hours: float | None
    bottlenecks: list[BottleneckAlert] = field(default_factory=list)
    status_breakdown: dict[str, int] = field(default_factory=dict)
    performance_trend: PerformanceTrend = PerformanceTrend.STABLE
    instances_by_workflow: dict[str, int] = field(default_factory=dict)


def bottleneck_severity(count: int) -> BottleneckSeverity:
    """<5 low, 5-9 medium, >=10 high."""
    if count >= HIGH_BOTTLENECK_THRESHOLD:
        return BottleneckSeverity.HIGH
    if count >= MEDIUM_BOTTLENECK_THRESHOLD:
        return BottleneckSeverity.MEDIUM
    return BottleneckSeverity.LOW


def classify_trend(
    current_avg: float | None,
    previous_avg: float | None,
    tolerance: float = 0.10,
) -> PerformanceTrend:
    if current_avg is None or previous_avg is None or previous_avg <= 0:
        return PerformanceTrend.STABLE
    change = (current_avg - previous_avg) / previous_avg
    if change < -tolerance:
        return PerformanceTrend.IMPROVING
    if change > tolerance:
        return PerformanceTrend.DECLINING
    return PerformanceTrend.STABLE


def _completion_hours(started_at: datetime, completed_at: datetime) -> float:
    elapsed = as_naive_utc(completed_at) - as_naive_utc(started_at)
    return max(0.0, elapsed.total_seconds() / 3600)


def _mean_completion_hours(
    instances: Iterable[WorkflowInstance], start: datetime, end: datetime
) -> float | None:
    hours = [
        _completion_hours(i.started_at, i.completed_at)
        for i in instances
        if i.status == WorkflowInstanceStatus.COMPLETED.value
        and i.completed_at is not None
        and start < as_naive_utc(i.completed_at) <= end
    ]
    return fmean(hours) if hours else None


def find_bottleneck(open_steps: Iterable[WorkflowStepHistory]) -> tuple[str | None, int]:
    """Step with the most open rows. Ties go to the alphabetically first step."""
    counts = Counter(step.step_id for step in open_steps if step.is_open)
    if not counts:
        return None, 0
    step_id, count = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return step_id, count


def compute_live_status(
    tenant_id: UUID,
    workflow_key: str,
    instances: Sequence[WorkflowInstance],
    open_steps: Iterable[WorkflowStepHistory],
    now: datetime,
    window_days: int = 30,
    tolerance: float = 0.10,
) -> WorkflowLiveStatus:
    """Rollup for one workflow key. Rows for other keys are ignored.

    Args:
        tenant_id: Owning tenant
        workflow_key: Key to roll up
        instances: Instances of the tenant (any key, any status)
        open_steps: Open step rows of the tenant
        now: Reference time (naive UTC or aware)
        window_days: Length of the averaging window
        tolerance: Relative change treated as stable

    Returns:
        Unsaved WorkflowLiveStatus row
    """
    now = as_naive_utc(now)
    keyed = [i for i in instances if i.workflow_key == workflow_key]
    active_ids = {i.id for i in keyed if i.status == WorkflowInstanceStatus.ACTIVE.value}

    day_start = utc_day_start(now)
    day_end = day_start + timedelta(days=1)
    completed_today = sum(
        1
        for i in keyed
        if i.status == WorkflowInstanceStatus.COMPLETED.value
        and i.completed_at is not None
        and day_start <= as_naive_utc(i.completed_at) < day_end
    )

    window = timedelta(days=window_days)
    current_avg = _mean_completion_hours(keyed, now - window, now)
    previous_avg = _mean_completion_hours(keyed, now - 2 * window, now - window)

    bottleneck_step, bottleneck_count = find_bottleneck(
        s for s in open_steps if s.instance_id in active_ids
    )

    return WorkflowLiveStatus(
        tenant_id=tenant_id,
        workflow_key=workflow_key,
        active_instances=len(active_ids),
        completed_today=completed_today,
        avg_completion_time_hours=current_avg,
        bottleneck_step=bottleneck_step,
        bottleneck_count=bottleneck_count,
        performance_trend=classify_trend(current_avg, previous_avg, tolerance).value,
        last_updated=now,
    )


def compute_all_live_status(
    tenant_id: UUID,
    instances: Sequence[WorkflowInstance],
    open_steps: Sequence[WorkflowStepHistory],
    now: datetime,
    window_days: int = 30,
    tolerance: float = 0.10,
    extra_keys: Iterable[str] = (),
) -> list[WorkflowLiveStatus]:
    """One rollup per workflow key seen in ``instances`` plus ``extra_keys``."""
    keys = sorted({i.workflow_key for i in instances} | set(extra_keys))
    return [
        compute_live_status(tenant_id, key, instances, open_steps, now, window_days, tolerance)
        for key in keys
    ]


def bottleneck_alerts(rollups: Iterable[WorkflowLiveStatus]) -> list[BottleneckAlert]:
    """Alerts for every key with a bottleneck, worst first."""
    alerts = [
        BottleneckAlert(
            workflow_key=r.workflow_key,
            step_id=r.bottleneck_step,
            count=r.bottleneck_count,
            severity=bottleneck_severity(r.bottleneck_count),
        )
        for r in rollups
        if r.bottleneck_step is not None and r.bottleneck_count > 0
    ]
    return sorted(alerts, key=lambda a: (-a.count, a.workflow_key))


def majority_trend(trends: Iterable[PerformanceTrend | str]) -> PerformanceTrend:
    """Most common trend; a tie for first place, or no input, is stable."""
    counts = Counter(PerformanceTrend(t) for t in trends)
    ranked = counts.most_common()
    if not ranked or (len(ranked) > 1 and ranked[0][1] == ranked[1][1]):
        return PerformanceTrend.STABLE
    return ranked[0][0]


def compute_workflow_metrics(
    rollups: Sequence[WorkflowLiveStatus],
    instances: Iterable[WorkflowInstance],
) -> WorkflowMetrics:
    """Fold per-key rollups and raw instances into the dashboard summary."""
    status_breakdown: dict[str, int] = {s.value: 0 for s in WorkflowInstanceStatus}
    by_workflow: dict[str, int] = defaultdict(int)
    for instance in instances:
        status_breakdown[instance.status] = status_breakdown.get(instance.status, 0) + 1
        by_workflow[instance.workflow_key] += 1

    averages = [
        r.avg_completion_time_hours for r in rollups if r.avg_completion_time_hours is not None
    ]

    return WorkflowMetrics(
        total_active=sum(r.active_instances for r in rollups),
        completed_today=sum(r.completed_today for r in rollups),
        avg_completion_hours=round(fmean(averages), 2) if averages else None,
        bottlenecks=bottleneck_alerts(rollups),
        status_breakdown=status_breakdown,
        performance_trend=majority_trend(r.performance_trend for r in rollups),
        instances_by_workflow=dict(sorted(by_workflow.items())),
    )


class LiveStatusService:
    """Loads fold inputs from the store and materializes rollups."""

    def __init__(
        self,
        instance_repo: WorkflowInstanceRepository,
        step_repo: WorkflowStepHistoryRepository,
        live_status_repo: WorkflowLiveStatusRepository,
        session: AsyncSession,
    ):
        self.instance_repo = instance_repo
        self.step_repo = step_repo
        self.live_status_repo = live_status_repo
        self.session = session

    async def _load(
        self, tenant_id: UUID, now: datetime
    ) -> tuple[list[WorkflowInstance], list[WorkflowStepHistory]]:
        settings = get_settings()
        since = now - timedelta(days=2 * settings.live_status_window_days)
        try:
            instances = await self.instance_repo.list_for_rollup(tenant_id, since)
            open_steps = await self.step_repo.list_open_for_active_instances(tenant_id)
        except SQLAlchemyError as e:
            raise AggregationError("Failed to load workflow data", tenant_id=tenant_id) from e
        return instances, open_steps

    async def compute(
        self, tenant_id: UUID, now: datetime | None = None
    ) -> tuple[list[WorkflowLiveStatus], list[WorkflowInstance]]:
        """Recompute rollups on read. Nothing is written."""
        settings = get_settings()
        now = as_naive_utc(now) if now else utc_now()
        instances, open_steps = await self._load(tenant_id, now)
        rollups = compute_all_live_status(
            tenant_id,
            instances,
            open_steps,
            now,
            settings.live_status_window_days,
            settings.live_status_trend_tolerance,
        )
        return rollups, instances

    async def metrics(self, tenant_id: UUID) -> WorkflowMetrics:
        rollups, instances = await self.compute(tenant_id)
        return compute_workflow_metrics(rollups, instances)

    async def bottlenecks(self, tenant_id: UUID) -> list[BottleneckAlert]:
        rollups, _ = await self.compute(tenant_id)
        return bottleneck_alerts(rollups)

    async def list_materialized(self, tenant_id: UUID) -> list[WorkflowLiveStatus]:
        return await self.live_status_repo.list_by_tenant(tenant_id)

    async def refresh(self, tenant_id: UUID) -> list[WorkflowLiveStatus]:
        """Rebuild and upsert every rollup for the tenant.

        Keys that were materialized before but have no recent instances are
        rewritten with zero counts instead of keeping stale numbers.
        """
        settings = get_settings()
        now = utc_now()
        instances, open_steps = await self._load(tenant_id, now)
        existing = await self.live_status_repo.list_by_tenant(tenant_id)
        rollups = compute_all_live_status(
            tenant_id,
            instances,
            open_steps,
            now,
            settings.live_status_window_days,
            settings.live_status_trend_tolerance,
            extra_keys=[row.workflow_key for row in existing],
        )

        try:
            for rollup in rollups:
                await self.live_status_repo.upsert(rollup)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(
                "Failed to materialize live status", tenant_id=tenant_id
            ) from e

        logger.info("Live status refreshed", tenant_id=str(tenant_id), workflow_keys=len(rollups))
        return rollups
