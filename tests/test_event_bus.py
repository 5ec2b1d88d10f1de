"""Tests for the in-process event bus."""

import asyncio

from schemas.volunteer import AvailabilityStatus
from schemas.events import BaseEvent, VolunteerStatusChanged, PointsAwarded
from services.event_bus import EventBus


def _status_event(volunteer_id="VOL-1", status=AvailabilityStatus.BUSY):
    return VolunteerStatusChanged(
        volunteer_id=volunteer_id,
        previous_status=AvailabilityStatus.AVAILABLE,
        status=status,
    )


def _points_event(volunteer_id="VOL-1", points=10):
    return PointsAwarded(volunteer_id=volunteer_id, points=points, reason="test", balance=points)


class TestPublishAndDrain:
    async def test_publish_only_enqueues(self):
        bus = EventBus()
        received = []
        bus.subscribe(VolunteerStatusChanged, received.append)

        bus.publish(_status_event())

        assert received == []
        assert bus.pending_count == 1
        assert await bus.drain() == 1
        assert len(received) == 1
        assert bus.pending_count == 0

    async def test_fifo_order(self):
        bus = EventBus()
        received = []
        bus.subscribe(BaseEvent, lambda e: received.append(e.topic))

        bus.publish(_status_event())
        bus.publish(_points_event())
        bus.publish(_status_event(status=AvailabilityStatus.OFFLINE))
        await bus.drain()

        assert received == ["volunteer-status-changed", "points-awarded", "volunteer-status-changed"]

    async def test_typed_subscription(self):
        bus = EventBus()
        received = []
        bus.subscribe(PointsAwarded, received.append)

        bus.publish(_status_event())
        bus.publish(_points_event())
        await bus.drain()

        assert [type(e) for e in received] == [PointsAwarded]

    async def test_async_handlers_awaited(self):
        bus = EventBus()
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event.entity_id)

        bus.subscribe(PointsAwarded, handler)
        bus.publish(_points_event(volunteer_id="VOL-9"))
        await bus.drain()

        assert received == ["VOL-9"]

    async def test_failing_handler_does_not_block_others(self):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("subscriber down")

        bus.subscribe(PointsAwarded, broken)
        bus.subscribe(PointsAwarded, received.append)
        bus.publish(_points_event())
        bus.publish(_points_event(points=20))

        assert await bus.drain() == 2
        assert [e.points for e in received] == [10, 20]

    async def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(PointsAwarded, received.append)
        bus.unsubscribe(PointsAwarded, received.append)

        bus.publish(_points_event())
        await bus.drain()

        assert received == []

    async def test_events_published_by_handlers_are_delivered(self):
        bus = EventBus()
        received = []

        def relay(event):
            received.append(event.topic)
            bus.publish(_points_event())

        bus.subscribe(VolunteerStatusChanged, relay)
        bus.subscribe(PointsAwarded, lambda e: received.append(e.topic))
        bus.publish(_status_event())

        assert await bus.drain() == 2
        assert received == ["volunteer-status-changed", "points-awarded"]


class TestRunLoop:
    async def test_run_delivers_as_events_arrive(self):
        bus = EventBus()
        delivered = asyncio.Event()
        bus.subscribe(PointsAwarded, lambda e: delivered.set())

        task = asyncio.create_task(bus.run())
        await asyncio.sleep(0)
        bus.publish(_points_event())

        await asyncio.wait_for(delivered.wait(), timeout=1)
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
