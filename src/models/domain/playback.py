"""
Playback domain models
"""

import time
from dataclasses import dataclass, field
from models.enums import PlaybackDirection
from models.domain.clip import AnimationClip


@dataclass(frozen=True)
class InFlightPlayback:
    """
    Active, non-looping, clamped playback of one clip in one direction.

    Exists from start until it finishes (Completion Signal) or is halted.
    """
    playback_id: int
    clip: AnimationClip
    direction: PlaybackDirection
    start_time: float
    started_at: float = field(default_factory=time.monotonic)

    @property
    def clip_name(self) -> str:
        return self.clip.name


@dataclass(frozen=True)
class FinishedAction:
    """Engine notification: a non-looping action reached its clamped end"""
    clip_name: str
    direction: PlaybackDirection
    time: float
