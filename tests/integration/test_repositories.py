"""Repository behaviour against a real PostgreSQL database."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.safeops.core.exceptions import InvalidTransitionError
from src.safeops.models import ObservationStatus, WorkflowInstanceStatus
from src.safeops.models.base import utc_now
from src.safeops.repositories import (
    IncidentRepository,
    WorkflowInstanceRepository,
    WorkflowLiveStatusRepository,
    WorkflowStepHistoryRepository,
)
from src.safeops.services.workflow_tracker import WorkflowTrackerService
from tests.factories import (
    IncidentFactory,
    WorkflowInstanceFactory,
    WorkflowLiveStatusFactory,
    WorkflowStepHistoryFactory,
)

pytestmark = pytest.mark.integration


class TestIncidentRepository:
    async def test_conditional_update_lets_one_writer_win(
        self, db_session, other_session, tenant_id
    ):
        incident = IncidentFactory.build(tenant_id=tenant_id)
        IncidentRepository(db_session).add(incident)
        await db_session.commit()

        expected = ObservationStatus.PENDING_HSSE_VALIDATION.value
        first = await IncidentRepository(db_session).update_if_status(
            incident.id, tenant_id, expected, {"status": ObservationStatus.CLOSED.value}
        )
        await db_session.commit()
        second = await IncidentRepository(other_session).update_if_status(
            incident.id,
            tenant_id,
            expected,
            {"status": ObservationStatus.OBSERVATION_ACTIONS_PENDING.value},
        )
        await other_session.commit()

        assert (first, second) == (True, False)
        stored = await IncidentRepository(other_session).get_for_tenant(incident.id, tenant_id)
        assert stored.status == ObservationStatus.CLOSED.value

    async def test_other_tenant_cannot_read_or_update(self, db_session, tenant_id):
        incident = IncidentFactory.build(tenant_id=tenant_id)
        repo = IncidentRepository(db_session)
        repo.add(incident)
        await db_session.commit()

        intruder = uuid4()
        assert await repo.get_for_tenant(incident.id, intruder) is None
        assert not await repo.update_if_status(
            incident.id, intruder, incident.status, {"status": "closed"}
        )

    async def test_soft_deleted_rows_are_invisible(self, db_session, tenant_id):
        incident = IncidentFactory.build(tenant_id=tenant_id, deleted_at=utc_now())
        repo = IncidentRepository(db_session)
        repo.add(incident)
        await db_session.commit()

        assert await repo.get_for_tenant(incident.id, tenant_id) is None
        assert await repo.list_by_statuses(tenant_id, [incident.status]) == []


class TestWorkflowRepositories:
    async def test_open_step_lookup(self, db_session, tenant_id):
        instance = WorkflowInstanceFactory.build(tenant_id=tenant_id)
        closed = WorkflowStepHistoryFactory.build(
            tenant_id=tenant_id,
            instance_id=instance.id,
            step_id="pending_pm",
            started_at=utc_now() - timedelta(hours=2),
            completed_at=utc_now() - timedelta(hours=1),
            duration_seconds=3600,
        )
        open_row = WorkflowStepHistoryFactory.build(
            tenant_id=tenant_id, instance_id=instance.id, step_id="pending_hsse"
        )
        WorkflowInstanceRepository(db_session).add(instance)
        await db_session.flush()
        steps = WorkflowStepHistoryRepository(db_session)
        steps.add(closed)
        steps.add(open_row)
        await db_session.commit()

        found = await steps.get_open_step(instance.id, tenant_id)

        assert found.id == open_row.id
        assert await steps.get_open_step(instance.id, uuid4()) is None
        assert [s.step_id for s in await steps.list_by_instance(instance.id, tenant_id)] == [
            "pending_pm",
            "pending_hsse",
        ]

    async def test_snapshot_is_tenant_scoped(self, db_session, tenant_id):
        repo = WorkflowInstanceRepository(db_session)
        mine = WorkflowInstanceFactory.build(tenant_id=tenant_id)
        repo.add(mine)
        repo.add(WorkflowInstanceFactory.build(tenant_id=uuid4()))
        await db_session.commit()

        items, _, has_more = await repo.list_by_tenant(tenant_id=tenant_id, limit=50)

        assert [i.id for i in items] == [mine.id]
        assert has_more is False

    async def test_pages_do_not_skip_rows_sharing_a_timestamp(self, db_session, tenant_id):
        repo = WorkflowInstanceRepository(db_session)
        started = utc_now()
        for _ in range(5):
            repo.add(WorkflowInstanceFactory.build(tenant_id=tenant_id, started_at=started))
        await db_session.commit()

        seen = []
        cursor = None
        while True:
            items, cursor, has_more = await repo.list_by_tenant(
                tenant_id=tenant_id, cursor=cursor, limit=2
            )
            seen.extend(i.id for i in items)
            if not has_more:
                break

        assert len(seen) == 5
        assert len(set(seen)) == 5

    async def test_live_status_upsert_replaces_row(self, db_session, tenant_id):
        repo = WorkflowLiveStatusRepository(db_session)
        await repo.upsert(WorkflowLiveStatusFactory.build(tenant_id=tenant_id, active_instances=3))
        await db_session.commit()
        await repo.upsert(WorkflowLiveStatusFactory.build(tenant_id=tenant_id, active_instances=0))
        await db_session.commit()

        rows = await repo.list_by_tenant(tenant_id)

        assert len(rows) == 1
        assert rows[0].active_instances == 0


def tracker_for(session):
    return WorkflowTrackerService(
        WorkflowInstanceRepository(session),
        WorkflowStepHistoryRepository(session),
        session,
        publish=AsyncMock(return_value=True),
    )


async def seed_instance(session, tenant_id):
    instance = WorkflowInstanceFactory.build(tenant_id=tenant_id, current_step_id="pending_pm")
    WorkflowInstanceRepository(session).add(instance)
    await session.flush()
    WorkflowStepHistoryRepository(session).add(
        WorkflowStepHistoryFactory.build(
            tenant_id=tenant_id, instance_id=instance.id, step_id="pending_pm"
        )
    )
    await session.commit()
    return instance


class TestConcurrentTracking:
    async def test_concurrent_advances_leave_one_open_step(
        self, db_session, other_session, tenant_id
    ):
        instance = await seed_instance(db_session, tenant_id)

        await asyncio.gather(
            tracker_for(db_session).advance_step(
                tenant_id, instance.id, "pending_hsse", uuid4(), "approved"
            ),
            tracker_for(other_session).advance_step(
                tenant_id, instance.id, "pending_manager", uuid4(), "approved"
            ),
        )

        db_session.expire_all()
        steps = await WorkflowStepHistoryRepository(db_session).list_by_instance(
            instance.id, tenant_id
        )
        open_steps = [s for s in steps if s.completed_at is None]
        stored = await WorkflowInstanceRepository(db_session).get_for_tenant(instance.id, tenant_id)
        assert len(steps) == 3
        assert len(open_steps) == 1
        assert open_steps[0].step_id == stored.current_step_id

    async def test_complete_racing_advance_leaves_no_open_step(
        self, db_session, other_session, tenant_id
    ):
        instance = await seed_instance(db_session, tenant_id)

        results = await asyncio.gather(
            tracker_for(db_session).complete_instance(tenant_id, instance.id),
            tracker_for(other_session).advance_step(
                tenant_id, instance.id, "pending_hsse", uuid4(), "approved"
            ),
            return_exceptions=True,
        )

        db_session.expire_all()
        stored = await WorkflowInstanceRepository(db_session).get_for_tenant(instance.id, tenant_id)
        steps = await WorkflowStepHistoryRepository(db_session).list_by_instance(
            instance.id, tenant_id
        )
        assert stored.status == WorkflowInstanceStatus.COMPLETED.value
        assert all(s.completed_at is not None for s in steps)
        if isinstance(results[1], Exception):
            assert isinstance(results[1], InvalidTransitionError)
