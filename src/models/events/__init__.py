"""
Event system for the book viewer

Backend events published on the EventBus; PLAYBACK_FINISHED doubles as the
Completion Signal consumed by the state machine.
"""

from models.events.types import EventType
from models.events.base import Event
from models.events.sources import EventSource

from models.events.playback_events import (
    PlaybackStartedEvent,
    PlaybackFinishedEvent,
    PlaybackHaltedEvent,
)

from models.events.book_events import (
    PartStateChangedEvent,
    TransitionAcceptedEvent,
    TransitionRejectedEvent,
    CascadeFinishedEvent,
    CascadeCancelledEvent,
    ModelLoadedEvent,
)

__all__ = [
    "EventType",
    "Event",
    "EventSource",

    "PlaybackStartedEvent",
    "PlaybackFinishedEvent",
    "PlaybackHaltedEvent",

    "PartStateChangedEvent",
    "TransitionAcceptedEvent",
    "TransitionRejectedEvent",
    "CascadeFinishedEvent",
    "CascadeCancelledEvent",
    "ModelLoadedEvent",
]
