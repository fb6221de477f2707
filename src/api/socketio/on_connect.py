from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.WEBSOCKET)


def register_on_connect(sio, services: ServiceContainer):
    """
    Registers connection lifecycle handlers for Socket.IO.
    Sends initial state (parts, recent events) on client connect.
    """

    @sio.event
    async def connect(sid, environ, auth=None):
        client_ip = environ.get('REMOTE_ADDR', 'unknown')
        log.info(f"Client connected: {sid} from {client_ip}")

        if services.viewer.loaded:
            await sio.emit("book:parts", {"parts": services.viewer.describe_parts()}, room=sid)
        else:
            log.warn(f"Skipping initial parts snapshot for {sid}: no model loaded")

        if services.broadcaster is not None:
            history = services.broadcaster.get_recent(limit=50, channel="event")
            await sio.emit("book:history", {"events": history}, room=sid)

    @sio.event
    async def disconnect(sid):
        log.info(f"Client disconnected: {sid}")

    @sio.on("book:request_parts")
    async def request_parts(sid, data=None):
        """Client asks for a fresh parts snapshot"""
        await sio.emit("book:parts", {"parts": services.viewer.describe_parts()}, room=sid)
