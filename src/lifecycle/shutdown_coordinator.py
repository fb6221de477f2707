"""
Shutdown coordinator that orchestrates graceful shutdown of all components.

Manages signal handlers, critical task monitoring and shutdown sequencing
across the registered handlers in priority order.
"""

import asyncio
import signal
from typing import FrozenSet, List, Optional

from lifecycle.shutdown_protocol import IShutdownHandler
from lifecycle.task_registry import TaskCategory, TaskRegistry
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.SHUTDOWN)

# A failure in one of these categories takes the whole viewer down
CRITICAL_CATEGORIES: FrozenSet[TaskCategory] = frozenset({TaskCategory.API, TaskCategory.RENDER})


class ShutdownCoordinator:
    """
    Coordinates graceful shutdown of multiple components.

    Example:
        coordinator = ShutdownCoordinator()
        coordinator.register(RenderLoopShutdownHandler(render_loop))
        coordinator.register(APIServerShutdownHandler(api_wrapper))

        coordinator.setup_signal_handlers(loop)
        await coordinator.wait_for_shutdown()
        await coordinator.shutdown_all()
    """

    def __init__(
        self,
        timeout_per_handler: float = 5.0,
        total_timeout: float = 15.0,
        critical_categories: FrozenSet[TaskCategory] = CRITICAL_CATEGORIES,
        poll_interval: float = 0.2
    ):
        """
        Args:
            timeout_per_handler: Timeout for each individual handler (seconds)
            total_timeout: Total timeout for entire shutdown sequence (seconds)
            critical_categories: Task categories whose failure triggers shutdown
            poll_interval: How often the registry is re-read while waiting
        """
        self._handlers: List[IShutdownHandler] = []
        self._shutdown_event: Optional[asyncio.Event] = None
        self._timeout_per_handler = timeout_per_handler
        self._total_timeout = total_timeout
        self._critical_categories = critical_categories
        self._poll_interval = poll_interval
        self.reason: Optional[str] = None

    def register(self, handler: IShutdownHandler) -> None:
        """
        Register a shutdown handler.

        Raises:
            ValueError: Handler lacks shutdown_priority or shutdown()
        """
        if not hasattr(handler, "shutdown_priority"):
            raise ValueError(f"Handler {handler} missing shutdown_priority property")
        if not callable(getattr(handler, "shutdown", None)):
            raise ValueError(f"Handler {handler} missing shutdown() method")

        self._handlers.append(handler)
        log.debug(f"Registered shutdown handler: {handler.__class__.__name__}")

    @property
    def handlers(self) -> List[IShutdownHandler]:
        """Handlers in execution order (highest priority first)"""
        return sorted(self._handlers, key=lambda h: h.shutdown_priority, reverse=True)

    def setup_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        """Install SIGINT / SIGTERM handlers that trigger shutdown"""
        event = self._ensure_event()

        def on_signal(sig: signal.Signals) -> None:
            self.reason = sig.name
            log.info(f"Signal {sig.name} received → triggering shutdown")
            event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: on_signal(s))

        log.info("Signal handlers installed (SIGINT, SIGTERM)")

    def request_shutdown(self, reason: str) -> None:
        """Trigger shutdown from code (tests, fatal startup errors)"""
        self.reason = reason
        self._ensure_event().set()

    def _ensure_event(self) -> asyncio.Event:
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
        return self._shutdown_event

    def _critical_failure(self) -> Optional[str]:
        """Description of the first failed critical task, if any"""
        for record in TaskRegistry.instance().failed():
            if record.info.category in self._critical_categories:
                return f"{record.info.description} ({record.finished_with_error})"
        return None

    async def wait_for_shutdown(self) -> None:
        """
        Return once a shutdown was requested (signal or request_shutdown())
        or a task in a critical category failed.
        """
        event = self._ensure_event()

        while not event.is_set():
            failure = self._critical_failure()
            if failure:
                log.error(f"Critical task failed: {failure}")
                self.reason = f"Task failure: {failure}"
                return

            try:
                await asyncio.wait_for(event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                continue

        log.debug("Shutdown requested", reason=self.reason)

    async def shutdown_all(self) -> None:
        """
        Run every handler in priority order with a per-handler timeout.

        A failing or hanging handler is logged and skipped; the rest still run
        unless the total timeout is exceeded.
        """
        log.info("Initiating graceful shutdown sequence...", reason=self.reason or "UNKNOWN")
        loop = asyncio.get_running_loop()
        start_time = loop.time()

        for handler in self.handlers:
            handler_name = handler.__class__.__name__

            elapsed = loop.time() - start_time
            if elapsed > self._total_timeout:
                log.error(f"Total shutdown timeout exceeded ({elapsed:.1f}s > {self._total_timeout}s)")
                break

            try:
                log.debug(f"Shutting down {handler_name} (priority={handler.shutdown_priority})...")
                await asyncio.wait_for(handler.shutdown(), timeout=self._timeout_per_handler)
                log.debug(f"✓ {handler_name} shutdown complete")
            except asyncio.TimeoutError:
                log.error(f"{handler_name} shutdown timeout ({self._timeout_per_handler}s)")
            except Exception as e:
                log.error(f"Error shutting down {handler_name}: {e}", exc_info=True)

        log.info("✓ Shutdown sequence complete")

    def get_handler(self, handler_type: type) -> Optional[IShutdownHandler]:
        for handler in self._handlers:
            if isinstance(handler, handler_type):
                return handler
        return None
