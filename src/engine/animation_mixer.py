"""
AnimationMixer — in-process animation engine.

Advances one ClipAction per clip on every update(delta). Actions are
non-looping; a clamped action holds the pose of the end it reached and is
reported once as finished. Halting an action freezes its pose time, so a
later playback can resume from where the pose stopped.

Engine contract used by the playback driver:
  start_playback(clip, start_time, direction, clamp_at_end)
  halt_playback(clip_name)
  update(delta) → finished actions
  position(clip_name) → pose time
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from models.domain.clip import AnimationClip
from models.domain.playback import FinishedAction
from models.enums import PlaybackDirection
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PLAYBACK)


@dataclass
class ClipAction:
    """Playback cursor of one clip"""
    clip: AnimationClip
    time: float = 0.0
    time_scale: float = 1.0
    running: bool = False
    clamp_at_end: bool = True

    @property
    def direction(self) -> PlaybackDirection:
        return PlaybackDirection.FORWARD if self.time_scale >= 0 else PlaybackDirection.REVERSE

    def advance(self, delta: float) -> bool:
        """Move the cursor; True when the action reached its end on this update"""
        if not self.running:
            return False

        self.time += delta * self.time_scale
        duration = self.clip.duration

        if self.time_scale >= 0 and self.time >= duration:
            self.time = duration if self.clamp_at_end else 0.0
        elif self.time_scale < 0 and self.time <= 0.0:
            self.time = 0.0
        else:
            return False

        self.running = False
        return True


class AnimationMixer:
    """Owns the ClipActions of the loaded model"""

    def __init__(self):
        self._actions: Dict[str, ClipAction] = {}
        self.updates = 0

    def start_playback(
        self,
        clip: AnimationClip,
        start_time: float,
        direction: PlaybackDirection,
        clamp_at_end: bool = True
    ) -> ClipAction:
        """(Re)start the clip's action; re-seeks an action already running"""
        action = self._actions.get(clip.name)
        if action is None or action.clip is not clip:
            action = ClipAction(clip=clip)
            self._actions[clip.name] = action

        action.time = max(0.0, min(start_time, clip.duration))
        action.time_scale = direction.time_scale
        action.clamp_at_end = clamp_at_end
        action.running = True

        log.debug(
            f"Action started: {clip.name}",
            direction=direction.name,
            start_time=f"{action.time:.3f}"
        )
        return action

    def halt_playback(self, clip_name: str) -> Optional[float]:
        """Stop advancing the action; the pose stays where it is"""
        action = self._actions.get(clip_name)
        if action is None:
            return None
        action.running = False
        return action.time

    def position(self, clip_name: str) -> Optional[float]:
        action = self._actions.get(clip_name)
        return action.time if action else None

    def is_running(self, clip_name: str) -> bool:
        action = self._actions.get(clip_name)
        return bool(action and action.running)

    def update(self, delta: float) -> List[FinishedAction]:
        """Advance every running action by delta seconds"""
        self.updates += 1
        finished = []
        for name, action in list(self._actions.items()):
            if action.advance(delta):
                finished.append(FinishedAction(name, action.direction, action.time))
        return finished

    def clear(self) -> None:
        """Drop every action (model reload)"""
        self._actions.clear()

    def __repr__(self) -> str:
        running = sum(1 for a in self._actions.values() if a.running)
        return f"AnimationMixer(actions={len(self._actions)}, running={running})"
