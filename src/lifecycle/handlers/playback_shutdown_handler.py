from __future__ import annotations
from typing import TYPE_CHECKING

from lifecycle.shutdown_protocol import IShutdownHandler
from utils.logger import get_logger, LogCategory

if TYPE_CHECKING:
    from services.book_state_machine import BookStateMachine
    from services.playback_driver import PlaybackDriver

log = get_logger().for_category(LogCategory.SHUTDOWN)


class PlaybackShutdownHandler(IShutdownHandler):
    """
    Drops the active cascade chain and halts every in-flight playback.

    Priority: 110 (after the render loop, before the API server)
    """

    def __init__(self, state_machine: "BookStateMachine", driver: "PlaybackDriver"):
        self.state_machine = state_machine
        self.driver = driver

    @property
    def shutdown_priority(self) -> int:
        return 110

    async def shutdown(self) -> None:
        in_flight = len(self.driver.active())
        log.info("Halting playbacks...", in_flight=in_flight)
        self.state_machine.reset()
        await self.driver.halt_all()
