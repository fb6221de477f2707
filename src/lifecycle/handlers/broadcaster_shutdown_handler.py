from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from services.event_broadcaster import EventBroadcaster

log = get_logger().for_category(LogCategory.SHUTDOWN)


class BroadcasterShutdownHandler(IShutdownHandler):
    """
    Detaches the broadcaster from the logger and stops its worker, after
    the API server is gone.

    Priority: 80
    """

    def __init__(self, broadcaster: "EventBroadcaster"):
        self.broadcaster = broadcaster

    @property
    def shutdown_priority(self) -> int:
        return 80

    async def shutdown(self) -> None:
        log.info("Stopping event broadcaster...")
        get_logger().set_broadcaster(None)
        await self.broadcaster.stop()
