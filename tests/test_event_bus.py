"""Event bus: priorities, filters, middleware, fault tolerance, unsubscription"""

import pytest

from models.domain.part import LATCH, FRONT_COVER
from models.enums import PartState
from models.events import EventType, PartStateChangedEvent
from services.event_bus import EventBus


def changed(part=LATCH, new=PartState.OPEN):
    return PartStateChangedEvent(part, new.opposite, new)


@pytest.mark.asyncio
async def test_handlers_run_by_priority_sync_and_async():
    bus = EventBus()
    calls = []

    async def low(event):
        calls.append("low")

    def high(event):
        calls.append("high")

    bus.subscribe(EventType.PART_STATE_CHANGED, low, priority=0)
    bus.subscribe(EventType.PART_STATE_CHANGED, high, priority=10)
    await bus.publish(changed())

    assert calls == ["high", "low"]


@pytest.mark.asyncio
async def test_filter_and_failing_handler():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.PART_STATE_CHANGED, broken, priority=5)
    bus.subscribe(
        EventType.PART_STATE_CHANGED,
        received.append,
        filter_fn=lambda e: e.part == FRONT_COVER
    )

    await bus.publish(changed(LATCH))
    await bus.publish(changed(FRONT_COVER))

    assert [e.part for e in received] == [FRONT_COVER]


@pytest.mark.asyncio
async def test_middleware_can_block_events():
    bus = EventBus()
    received = []
    bus.subscribe(EventType.PART_STATE_CHANGED, received.append)
    bus.add_middleware(lambda e: None if e.new is PartState.CLOSED else e)

    await bus.publish(changed(new=PartState.CLOSED))
    await bus.publish(changed(new=PartState.OPEN))

    assert len(received) == 1
    assert len(bus.get_event_history()) == 1


@pytest.mark.asyncio
async def test_unsubscribe_during_dispatch_skips_removed_handler():
    bus = EventBus()
    calls = []
    entries = {}

    def first(event):
        calls.append("first")
        bus.unsubscribe(EventType.PART_STATE_CHANGED, entries["second"])

    def second(event):
        calls.append("second")

    entries["first"] = bus.subscribe(EventType.PART_STATE_CHANGED, first, priority=1)
    entries["second"] = bus.subscribe(EventType.PART_STATE_CHANGED, second)

    await bus.publish(changed())
    await bus.publish(changed())

    assert calls == ["first", "first"]
    assert bus.handler_count(EventType.PART_STATE_CHANGED) == 1
    assert bus.unsubscribe(EventType.PART_STATE_CHANGED, entries["second"]) is False


def test_event_payload_is_json_friendly():
    data = changed(FRONT_COVER).to_data()
    assert data == {"part": "FRONT_COVER", "old": "CLOSED", "new": "OPEN"}
