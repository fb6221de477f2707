"""Broadcaster history, channels and queue overflow"""

import pytest

from models.domain.part import LATCH
from models.enums import PartState
from models.events import PartStateChangedEvent, TransitionRejectedEvent
from services.event_broadcaster import EventBroadcaster
from services.event_bus import EventBus


@pytest.mark.asyncio
async def test_bus_events_and_log_lines_are_kept_per_channel():
    bus = EventBus()
    broadcaster = EventBroadcaster()
    broadcaster.attach(bus)

    await bus.publish(PartStateChangedEvent(LATCH, PartState.CLOSED, PartState.OPEN))
    broadcaster.log("2026-10-17T10:00:00Z", "WARN", "CASCADE", "rejected")
    await bus.publish(TransitionRejectedEvent(LATCH, PartState.CLOSED, "Front cover is open"))

    events = broadcaster.get_recent(channel="event")
    assert [e["type"] for e in events] == ["PART_STATE_CHANGED", "TRANSITION_REJECTED"]
    assert events[1]["data"]["reason"] == "Front cover is open"
    assert [e["message"] for e in broadcaster.get_recent(channel="log")] == ["rejected"]
    assert len(broadcaster.get_recent(limit=2)) == 2


def test_full_queue_drops_oldest():
    broadcaster = EventBroadcaster(queue_size=2)
    for n in range(3):
        broadcaster.log(str(n), "INFO", "GENERAL", f"line {n}")

    assert broadcaster.queue.qsize() == 2
    assert broadcaster.queue.get_nowait()["message"] == "line 1"
