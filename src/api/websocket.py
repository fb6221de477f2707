"""
WebSocket handler for real-time event streaming.

Clients connected to /ws/events receive every broadcast bus event (state
changes, rejected requests, cascade progress) and log line as JSON:

    {"channel": "event", "type": "TRANSITION_REJECTED", "source": "STATE_MACHINE",
     "timestamp": 1791000000.0, "data": {"part": "PAGE_1", "desired": "OPEN",
     "reason": "Cannot turn pages while the book is closed"}}

    {"channel": "log", "timestamp": "...", "level": "WARN", "category": "CASCADE",
     "message": "..."}
"""

import asyncio
from fastapi import WebSocket, WebSocketDisconnect

from services.event_broadcaster import EventBroadcaster
from utils.logger import get_category_logger, LogCategory

log = get_category_logger(LogCategory.WEBSOCKET)


async def websocket_events_endpoint(websocket: WebSocket, broadcaster: EventBroadcaster, history: int = 50):
    """
    Stream broadcast messages until the client disconnects.

    On connect the client first receives the most recent event messages,
    then the live stream. Incoming data is ignored (one-way stream).
    """
    await websocket.accept()
    client_addr = websocket.client
    log.info(f"WebSocket connection accepted from {client_addr}")

    try:
        for message in broadcaster.get_recent(history, channel="event"):
            await websocket.send_json(message)

        await broadcaster.manager.connect(websocket)
        log.info(f"Active WebSocket connections: {broadcaster.manager.get_connection_count()}")

        while True:
            try:
                await websocket.receive_text()
            except asyncio.CancelledError:
                log.debug("WS cancelled (shutdown)")
                break

    except WebSocketDisconnect:
        log.info(f"WebSocket client {client_addr} disconnected normally")
    except Exception as e:
        log.error(f"WebSocket error from {client_addr}: {type(e).__name__}: {e}", exc_info=True)
    finally:
        await broadcaster.manager.disconnect(websocket)
