"""Row-level change feed over Redis pub/sub.

Writers publish a full-row event after each committed write on a channel
scoped to one table and one tenant. Readers take a snapshot as the baseline
and apply events keyed by row id, last write wins. That merge is only sound
because every event carries the complete row, never a partial patch.

The write side (``publish_change``) is called by the workflow tracker. The
read side (``ChangeFeedSubscriber``, ``merge_snapshot``) is the consumer
helper for dashboard backends that hold a live view: this service exposes no
streaming endpoint of its own, so it is constructed by the embedding process,
e.g.::

    subscriber = ChangeFeedSubscriber("workflow_instances", tenant_id, fetch_snapshot)
    task = asyncio.create_task(subscriber.run())
    ...
    rows = subscriber.rows
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Iterable
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError
from redis.asyncio import Redis
from sqlmodel import SQLModel

from src.safeops.core.config import get_settings
from src.safeops.core.exceptions import AggregationError
from src.safeops.core.logging import get_logger
from src.safeops.core.redis import get_redis
from src.safeops.models import ChangeEventType, ConnectionState
from src.safeops.models.base import utc_now

logger = get_logger(__name__)

Row = dict[str, Any]
SnapshotFetcher = Callable[[], Awaitable[list[Row]]]
RedisFactory = Callable[[], Awaitable[Redis | None]]


class ChangeEvent(BaseModel):
    """One insert/update/delete of a full row."""

    table: str
    tenant_id: str
    event_type: ChangeEventType
    row: Row
    published_at: str = Field(default_factory=lambda: utc_now().isoformat())

    @property
    def row_id(self) -> str:
        return str(self.row["id"])


def channel_name(table: str, tenant_id: UUID | str, prefix: str | None = None) -> str:
    """Channel carrying changes to ``table`` for one tenant."""
    prefix = prefix or get_settings().change_feed_channel_prefix
    return f"{prefix}:{table}:{tenant_id}"


def row_to_dict(entity: SQLModel) -> Row:
    """JSON-safe full row for a table model."""
    return entity.model_dump(mode="json")


async def publish_change(
    table: str,
    tenant_id: UUID,
    event_type: ChangeEventType,
    row: Row,
) -> bool:
    """Publish a change event after its write has committed.

    Never raises. A lost event is recovered by the subscriber's snapshot
    refetch on its next reconnect.

    Returns:
        True if handed to Redis, False if Redis is unavailable or publish failed
    """
    redis = await get_redis()
    if not redis:
        return False

    event = ChangeEvent(table=table, tenant_id=str(tenant_id), event_type=event_type, row=row)
    try:
        await redis.publish(channel_name(table, tenant_id), event.model_dump_json())
        return True
    except Exception as e:
        logger.warning(
            "Failed to publish change event",
            table=table,
            event_type=event_type.value,
            row_id=event.row_id,
            error=str(e),
        )
        return False


def merge_change(rows: dict[str, Row], event: ChangeEvent) -> dict[str, Row]:
    """Apply one event to an id-keyed row map. Pure; returns a new map.

    Duplicate and out-of-order delivery converge because an event replaces
    the whole row. Deleting an unknown id is a no-op.
    """
    merged = dict(rows)
    if event.event_type == ChangeEventType.DELETE:
        merged.pop(event.row_id, None)
    else:
        merged[event.row_id] = event.row
    return merged


def merge_snapshot(snapshot: Iterable[Row], events: Iterable[ChangeEvent]) -> dict[str, Row]:
    """Fold ``events`` over a snapshot baseline."""
    rows = {str(row["id"]): row for row in snapshot}
    for event in events:
        rows = merge_change(rows, event)
    return rows


class ChangeFeedSubscriber:
    """Keeps an id-keyed view of one table for one tenant.

    ``run`` subscribes, fetches the snapshot, then applies pushed events until
    stopped. Transport failures never propagate: the state moves to ``error``,
    the loop backs off exponentially, and the next connect fetches a fresh
    snapshot so events missed during the outage are not lost.
    """

    def __init__(
        self,
        table: str,
        tenant_id: UUID,
        fetch_snapshot: SnapshotFetcher,
        redis_factory: RedisFactory | None = None,
        initial_delay: float | None = None,
        max_delay: float | None = None,
        on_state_change: Callable[[ConnectionState], None] | None = None,
    ):
        settings = get_settings()
        self.table = table
        self.tenant_id = tenant_id
        self.channel = channel_name(table, tenant_id)
        self.fetch_snapshot = fetch_snapshot
        self.redis_factory = redis_factory or get_redis
        self.initial_delay = (
            initial_delay
            if initial_delay is not None
            else settings.change_feed_reconnect_initial_delay
        )
        self.max_delay = (
            max_delay if max_delay is not None else settings.change_feed_reconnect_max_delay
        )
        self.on_state_change = on_state_change

        self.state = ConnectionState.IDLE
        self.rows: dict[str, Row] = {}
        self.snapshot_count = 0
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    def apply(self, event: ChangeEvent) -> None:
        """Merge an event if it belongs to this view."""
        if event.table != self.table or event.tenant_id != str(self.tenant_id):
            return
        self.rows = merge_change(self.rows, event)

    async def refresh_snapshot(self) -> None:
        """Replace the view with a fresh snapshot."""
        snapshot = await self.fetch_snapshot()
        self.rows = {str(row["id"]): row for row in snapshot}
        self.snapshot_count += 1

    async def run(self) -> None:
        """Subscribe and keep the view current until ``stop`` is called."""
        delay = self.initial_delay
        while not self._stop.is_set():
            self._set_state(ConnectionState.CONNECTING)
            try:
                await self._listen()
                delay = self.initial_delay
            except asyncio.CancelledError:
                self._set_state(ConnectionState.IDLE)
                raise
            except Exception as e:
                self._set_state(ConnectionState.ERROR)
                logger.warning(
                    "Change feed subscription failed, reconnecting",
                    channel=self.channel,
                    retry_in=delay,
                    error=str(e),
                )
                await self._wait(delay)
                delay = min(delay * 2, self.max_delay)
        self._set_state(ConnectionState.IDLE)

    async def _listen(self) -> None:
        redis = await self.redis_factory()
        if redis is None:
            raise AggregationError("Change feed transport unavailable", channel=self.channel)

        pubsub = redis.pubsub()
        try:
            # Subscribe before the snapshot so nothing committed in between is missed
            await pubsub.subscribe(self.channel)
            await self.refresh_snapshot()
            self._set_state(ConnectionState.CONNECTED)

            while not self._stop.is_set():
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=0.1)
                if message is None or message.get("type") != "message":
                    continue
                try:
                    event = ChangeEvent.model_validate_json(message["data"])
                except ValidationError as e:
                    logger.warning(
                        "Dropping malformed change event",
                        channel=self.channel,
                        error=str(e),
                    )
                    continue
                self.apply(event)
        finally:
            try:
                await pubsub.unsubscribe(self.channel)
            finally:
                await pubsub.aclose()

    async def _wait(self, seconds: float) -> None:
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)

    def _set_state(self, state: ConnectionState) -> None:
        if state == self.state:
            return
        self.state = state
        logger.debug("Change feed state", channel=self.channel, state=state.value)
        if self.on_state_change:
            self.on_state_change(state)
