from dataclasses import dataclass
from typing import Optional

from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource
from models.domain.playback import InFlightPlayback
from models.enums import PlaybackDirection


@dataclass(init=False)
class PlaybackStartedEvent(Event):
    playback_id: int
    clip_name: str
    direction: PlaybackDirection
    start_time: float

    def __init__(self, playback: InFlightPlayback):
        super().__init__(
            type=EventType.PLAYBACK_STARTED,
            source=EventSource.PLAYBACK_DRIVER,
        )
        self.playback_id = playback.playback_id
        self.clip_name = playback.clip_name
        self.direction = playback.direction
        self.start_time = playback.start_time


@dataclass(init=False)
class PlaybackFinishedEvent(Event):
    """Completion Signal: one per finished non-looping playback"""
    playback: InFlightPlayback

    def __init__(self, playback: InFlightPlayback):
        super().__init__(
            type=EventType.PLAYBACK_FINISHED,
            source=EventSource.PLAYBACK_DRIVER,
        )
        self.playback = playback

    @property
    def playback_id(self) -> int:
        return self.playback.playback_id

    def to_data(self):
        return {
            "playback_id": self.playback.playback_id,
            "clip_name": self.playback.clip_name,
            "direction": self.playback.direction.name,
        }


@dataclass(init=False)
class PlaybackHaltedEvent(Event):
    playback_id: int
    clip_name: str
    direction: PlaybackDirection
    position: Optional[float]

    def __init__(self, playback: InFlightPlayback, position: Optional[float]):
        super().__init__(
            type=EventType.PLAYBACK_HALTED,
            source=EventSource.PLAYBACK_DRIVER,
        )
        self.playback_id = playback.playback_id
        self.clip_name = playback.clip_name
        self.direction = playback.direction
        self.position = position
