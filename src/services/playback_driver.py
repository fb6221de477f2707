"""
Playback Driver - starts, tracks and halts clip playbacks on the mixer

Owns the in-flight set: at most one InFlightPlayback per clip, keyed by
clip name. Each playback is tagged with its direction so the completion
can be resolved to Open (forward) or Closed (reverse).
"""

from typing import Dict, List, Optional

from engine.animation_mixer import AnimationMixer
from models.domain.clip import AnimationClip
from models.domain.playback import InFlightPlayback
from models.enums import PartState, PlaybackDirection
from models.events import PlaybackStartedEvent, PlaybackHaltedEvent
from services.completion_signal import CompletionSignal
from services.event_bus import EventBus
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PLAYBACK)


class PlaybackDriver:

    def __init__(
        self,
        mixer: AnimationMixer,
        completion_signal: CompletionSignal,
        event_bus: Optional[EventBus] = None
    ):
        self.mixer = mixer
        self.completion_signal = completion_signal
        self.event_bus = event_bus

        self._in_flight: Dict[str, InFlightPlayback] = {}
        self._next_id = 1
        self.completed = 0

    # === Commands ===

    async def play(
        self,
        clip: AnimationClip,
        direction: PlaybackDirection,
        start_time: Optional[float] = None
    ) -> InFlightPlayback:
        """
        Start clip in direction, non-looping and clamped at its end.

        Forward starts at 0 and reverse at the clip's duration, unless the
        pose was left mid-clip by a halted playback: then it continues from
        that pose. A prior in-flight record for the same clip is superseded
        and will never fire its completion.
        """
        previous = self._in_flight.pop(clip.name, None)
        if previous is not None:
            self.completion_signal.discard(previous.playback_id)
            log.debug(
                f"Playback superseded: {clip.name}",
                playback_id=previous.playback_id,
                direction=previous.direction.name
            )

        if start_time is None:
            start_time = self.resume_position(clip, direction)

        playback = InFlightPlayback(
            playback_id=self._next_id,
            clip=clip,
            direction=direction,
            start_time=start_time,
        )
        self._next_id += 1

        self.mixer.start_playback(clip, start_time, direction, clamp_at_end=True)
        self._in_flight[clip.name] = playback

        log.info(
            f"Playback started: {clip.name}",
            playback_id=playback.playback_id,
            direction=direction.name,
            start_time=f"{start_time:.3f}/{clip.duration:.3f}"
        )
        if self.event_bus:
            await self.event_bus.publish(PlaybackStartedEvent(playback))
        return playback

    async def halt(self, clip_name: str) -> Optional[InFlightPlayback]:
        """Stop an in-flight playback; no completion fires for it"""
        playback = self._in_flight.pop(clip_name, None)
        if playback is None:
            return None

        position = self.mixer.halt_playback(clip_name)
        self.completion_signal.discard(playback.playback_id)

        log.info(
            f"Playback halted: {clip_name}",
            playback_id=playback.playback_id,
            direction=playback.direction.name,
            position=f"{position:.3f}" if position is not None else "-"
        )
        if self.event_bus:
            await self.event_bus.publish(PlaybackHaltedEvent(playback, position))
        return playback

    async def halt_all(self) -> int:
        names = list(self._in_flight)
        for name in names:
            await self.halt(name)
        return len(names)

    def clear(self) -> None:
        """Forget every playback and pose (model reload)"""
        for playback in self._in_flight.values():
            self.completion_signal.discard(playback.playback_id, notify=False)
        self._in_flight.clear()
        self.mixer.clear()

    # === Tick ===

    async def tick(self, delta: float) -> int:
        """
        Advance the mixer and raise the Completion Signal for every
        playback that reached its clamped end.

        Continuations run inside this call; a playback they start begins
        advancing on the next tick.
        """
        finished = self.mixer.update(delta)
        fired = 0
        for action in finished:
            playback = self._in_flight.get(action.clip_name)
            if playback is None or playback.direction is not action.direction:
                continue

            del self._in_flight[action.clip_name]
            self.completed += 1
            fired += 1

            log.debug(
                f"Playback finished: {action.clip_name}",
                playback_id=playback.playback_id,
                direction=playback.direction.name
            )
            await self.completion_signal.emit(playback)
        return fired

    # === Queries ===

    def get(self, clip_name: str) -> Optional[InFlightPlayback]:
        return self._in_flight.get(clip_name)

    def is_playing(self, clip_name: str) -> bool:
        return clip_name in self._in_flight

    def active(self) -> List[InFlightPlayback]:
        return list(self._in_flight.values())

    def position(self, clip_name: str) -> Optional[float]:
        return self.mixer.position(clip_name)

    def resume_position(self, clip: AnimationClip, direction: PlaybackDirection) -> float:
        """Start time for a new playback of clip in direction"""
        position = self.mixer.position(clip.name)
        if position is not None and 0.0 < position < clip.duration:
            return position
        return 0.0 if direction is PlaybackDirection.FORWARD else clip.duration

    def at_rest(self, clip: AnimationClip, state: PartState) -> bool:
        """
        True when nothing plays the clip and its pose sits at the end
        matching state. A clip never played rests at its start (closed).
        """
        if self.is_playing(clip.name):
            return False
        position = self.mixer.position(clip.name)
        if position is None:
            return state is PartState.CLOSED
        if state is PartState.OPEN:
            return position >= clip.duration
        return position <= 0.0
