"""
Shutdown handler protocol for component-based graceful shutdown.

Each component that needs cleanup implements IShutdownHandler to take part
in the shutdown sequence run by ShutdownCoordinator.
"""

from typing import Protocol


class IShutdownHandler(Protocol):
    """
    Protocol for components that need graceful shutdown.

    Handlers run in descending shutdown_priority order.

    Example:
        class RenderLoopShutdownHandler:
            @property
            def shutdown_priority(self) -> int:
                return 120  # Stop ticking before anything else

            async def shutdown(self) -> None:
                await self.render_loop.stop()
    """

    @property
    def shutdown_priority(self) -> int:
        """Higher priority shuts down earlier."""
        ...

    async def shutdown(self) -> None:
        """Called during coordinated shutdown."""
        ...
