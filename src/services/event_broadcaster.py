"""
Event broadcasting service for real-time clients.

Streams bus events (state changes, rejected requests, cascade progress)
and log lines to connected clients. An asyncio queue decouples producers
from transport: the bus handler and the logger only enqueue, a background
worker fans messages out to raw WebSocket connections (/ws/events) and to
the Socket.IO server when one is attached.
"""

import asyncio
from collections import deque
from typing import Any, Dict, List, Optional, Set, TYPE_CHECKING

from fastapi import WebSocket

from models.events import Event, EventType
from lifecycle.task_registry import create_tracked_task, TaskCategory
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from socketio import AsyncServer
    from services.event_bus import EventBus

log = get_logger().for_category(LogCategory.WEBSOCKET)

BROADCAST_EVENTS = (
    EventType.PART_STATE_CHANGED,
    EventType.TRANSITION_ACCEPTED,
    EventType.TRANSITION_REJECTED,
    EventType.CASCADE_FINISHED,
    EventType.CASCADE_CANCELLED,
    EventType.PLAYBACK_STARTED,
    EventType.PLAYBACK_HALTED,
    EventType.MODEL_LOADED,
)


class ConnectionManager:
    """Active raw WebSocket connections"""

    def __init__(self) -> None:
        self.active_connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self.active_connections.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self.active_connections.discard(websocket)

    def get_connection_count(self) -> int:
        return len(self.active_connections)

    async def send_all(self, message: Dict[str, Any]) -> None:
        async with self._lock:
            connections = list(self.active_connections)

        dead = []
        for websocket in connections:
            try:
                await websocket.send_json(message)
            except Exception as e:
                log.debug(f"Dropping WebSocket client: {type(e).__name__}")
                dead.append(websocket)

        for websocket in dead:
            await self.disconnect(websocket)


class EventBroadcaster:
    """
    Fans out bus events and log lines to real-time clients.

    Non-blocking for producers: when the queue is full the oldest message
    is dropped.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.history: deque = deque(maxlen=queue_size)
        self.manager = ConnectionManager()
        self.socketio_server: Optional["AsyncServer"] = None
        self._broadcast_task: Optional[asyncio.Task] = None

    def set_socketio_server(self, socketio_server: "AsyncServer") -> None:
        self.socketio_server = socketio_server
        log.debug("Socket.IO server registered with EventBroadcaster")

    def attach(self, event_bus: "EventBus") -> None:
        """Subscribe to the bus events worth streaming"""
        for event_type in BROADCAST_EVENTS:
            event_bus.subscribe(event_type, self.on_event, priority=-10)
        log.debug("EventBroadcaster subscribed to EventBus", events=len(BROADCAST_EVENTS))

    def start(self) -> None:
        """Start the background broadcasting task."""
        if self._broadcast_task is None:
            self._broadcast_task = create_tracked_task(
                self._broadcast_worker(),
                category=TaskCategory.SYSTEM,
                description="EventBroadcaster: event/log broadcasting worker"
            )

    async def stop(self) -> None:
        if self._broadcast_task:
            self._broadcast_task.cancel()
            try:
                await self._broadcast_task
            except asyncio.CancelledError:
                pass
            self._broadcast_task = None

    # === Producers ===

    def on_event(self, event: Event) -> None:
        self._enqueue({
            "channel": "event",
            "type": event.type.name,
            "source": event.source.name if event.source else None,
            "timestamp": event.timestamp,
            "data": event.to_data(),
        })

    def log(self, timestamp: str, level: str, category: str, message: str) -> None:
        """Logger hook, see Logger.set_broadcaster()"""
        self._enqueue({
            "channel": "log",
            "timestamp": timestamp,
            "level": level,
            "category": category,
            "message": message,
        })

    def get_recent(self, limit: int = 100, channel: Optional[str] = None) -> List[Dict[str, Any]]:
        entries = [m for m in self.history if channel is None or m["channel"] == channel]
        return entries[-min(limit, 1000):]

    def _enqueue(self, message: Dict[str, Any]) -> None:
        self.history.append(message)
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            try:
                self.queue.get_nowait()
                self.queue.put_nowait(message)
            except asyncio.QueueEmpty:
                pass

    # === Worker ===

    async def _broadcast_worker(self) -> None:
        while True:
            try:
                message = await self.queue.get()
                await self.manager.send_all(message)

                if self.socketio_server:
                    name = "book:event" if message["channel"] == "event" else "log:entry"
                    try:
                        await self.socketio_server.emit(name, message)
                    except Exception as sio_err:
                        # Log lines are not reported, a failing transport would feed itself
                        if message["channel"] == "event":
                            log.error(f"Error broadcasting event via Socket.IO: {sio_err}")

            except asyncio.CancelledError:
                break
            except Exception as ex:
                log.error(f"Error when broadcasting message: {ex}")
