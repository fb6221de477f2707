"""
Completion Signal - one notification per finished non-looping playback

Carried on the EventBus as PLAYBACK_FINISHED. Continuations register a
one-shot waiter scoped to a single playback id; the waiter removes its
own bus subscription when it fires or when the playback is discarded
(halted or superseded).
"""

from typing import Awaitable, Callable, Dict, Optional, Union

from models.domain.playback import InFlightPlayback
from models.events import EventType, PlaybackFinishedEvent
from services.event_bus import EventBus, EventHandler
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.PLAYBACK)

FinishedCallback = Callable[[InFlightPlayback], Union[None, Awaitable[None]]]
DiscardedCallback = Callable[[int], None]


class _Waiter:
    def __init__(self, entry: EventHandler, on_discarded: Optional[DiscardedCallback]):
        self.entry = entry
        self.on_discarded = on_discarded


class CompletionSignal:

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._waiters: Dict[int, _Waiter] = {}

    async def emit(self, playback: InFlightPlayback) -> None:
        """Publish the completion; waiters run inside this call"""
        await self.event_bus.publish(PlaybackFinishedEvent(playback))

    def once(
        self,
        playback_id: int,
        on_finished: FinishedCallback,
        on_discarded: Optional[DiscardedCallback] = None
    ) -> None:
        """Call on_finished exactly once when playback_id finishes"""
        self.discard(playback_id, notify=False)

        async def _on_event(event: PlaybackFinishedEvent):
            self._remove(playback_id)
            result = on_finished(event.playback)
            if result is not None:
                await result

        _on_event.__name__ = f"completion_waiter_{playback_id}"

        entry = self.event_bus.subscribe(
            EventType.PLAYBACK_FINISHED,
            _on_event,
            priority=10,
            filter_fn=lambda e: e.playback_id == playback_id
        )
        self._waiters[playback_id] = _Waiter(entry, on_discarded)

    def discard(self, playback_id: int, notify: bool = True) -> bool:
        """Drop the waiter of a playback that will never finish"""
        waiter = self._remove(playback_id)
        if waiter is None:
            return False

        log.debug(f"Completion waiter discarded: playback {playback_id}")
        if notify and waiter.on_discarded:
            waiter.on_discarded(playback_id)
        return True

    def has_waiter(self, playback_id: int) -> bool:
        return playback_id in self._waiters

    def pending_count(self) -> int:
        return len(self._waiters)

    def clear(self) -> None:
        for playback_id in list(self._waiters):
            self.discard(playback_id, notify=False)

    def _remove(self, playback_id: int) -> Optional[_Waiter]:
        waiter = self._waiters.pop(playback_id, None)
        if waiter is not None:
            self.event_bus.unsubscribe(EventType.PLAYBACK_FINISHED, waiter.entry)
        return waiter
