from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from engine.render_loop import RenderLoop

log = get_logger().for_category(LogCategory.SHUTDOWN)


class RenderLoopShutdownHandler(IShutdownHandler):
    """
    Stops the tick loop first, so no completion or cascade step runs while
    the rest of the viewer is torn down.

    Priority: 130 (FIRST)
    """

    def __init__(self, render_loop: "RenderLoop"):
        self.render_loop = render_loop

    @property
    def shutdown_priority(self) -> int:
        return 130

    async def shutdown(self) -> None:
        log.info("Stopping render loop...")
        await self.render_loop.stop()
