"""
Event Bus - Central event routing system

Implements pub-sub pattern:
- Publishers: publish(event)
- Subscribers: subscribe(event_type, handler, priority, filter_fn) / unsubscribe(...)
- Middleware: add_middleware(middleware_fn)

Playback completions travel over this bus as PLAYBACK_FINISHED events, so
everything chained on a completion runs inside the publish() call of the
tick that produced it.
"""

import asyncio
from typing import Callable, List, Dict, Optional
from dataclasses import dataclass
from models.events import Event, EventType
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


@dataclass(eq=False)
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]
    active: bool = True


class EventBus:
    """
    Central event bus for pub-sub event handling

    Features:
    - Priority-based handler execution (high priority first)
    - Per-handler filtering (fine-grained control)
    - Middleware pipeline (logging, blocking)
    - Async/sync handler support (auto-detected)
    - Fault tolerance (one handler crash doesn't stop others)
    - Safe (un)subscription from inside a running handler

    Example:
        bus = EventBus()

        bus.subscribe(
            EventType.PLAYBACK_FINISHED,
            on_finished,
            filter_fn=lambda e: e.playback_id == 7
        )

        await bus.publish(PlaybackFinishedEvent(playback))
    """

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._middleware: List[Callable[[Event], Optional[Event]]] = []

        # Event history (circular buffer for debugging)
        self._event_history: List[Event] = []
        self._history_limit = 100

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> EventHandler:
        """
        Subscribe to event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
            filter_fn: Optional filter (return True = handle, False = skip)

        Returns:
            The registration, usable with unsubscribe()
        """
        handler_entry = EventHandler(handler, priority, filter_fn)
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append(handler_entry)

        # Stable sort keeps registration order within one priority
        handlers.sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )
        return handler_entry

    def unsubscribe(self, event_type: EventType, entry: EventHandler) -> bool:
        """
        Remove a registration returned by subscribe().

        The entry is deactivated first, so a publish() already iterating
        its snapshot skips it.

        Returns:
            True if the registration was found
        """
        entry.active = False
        handlers = self._handlers.get(event_type, [])
        if entry in handlers:
            handlers.remove(entry)
            return True
        return False

    def handler_count(self, event_type: EventType) -> int:
        return len(self._handlers.get(event_type, []))

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to event processing pipeline

        Middleware can modify events (return modified event), block events
        (return None) or just observe them. Runs in registration order.
        """
        self._middleware.append(middleware)
        log.debug(
            "Middleware registered",
            middleware=middleware.__name__
        )

    async def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers

        Flow:
        1. Apply middleware (can modify or block event)
        2. Save to event history
        3. Snapshot handlers for event type
        4. Execute active handlers by priority (high → low), applying filters
        5. Catch and log handler exceptions (fault tolerance)
        """
        for middleware in self._middleware:
            processed_event = middleware(event)
            if processed_event is None:
                return
            event = processed_event

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

        handlers = list(self._handlers.get(event.type, []))
        if not handlers:
            return

        for handler_entry in handlers:
            if not handler_entry.active:
                continue
            if handler_entry.filter_fn and not handler_entry.filter_fn(event):
                continue

            try:
                result = handler_entry.handler(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                log.error(
                    f"Event handler failed: {getattr(handler_entry.handler, '__name__', '?')} for {event.type.name}",
                    error=str(e),
                    exc_info=True
                )

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """Recent events, newest last"""
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        self._event_history.clear()
