from __future__ import annotations

import asyncio
import uvicorn
from typing import Any, Optional

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.API)


class APIServerWrapper:
    """
    Runs uvicorn inside the application's event loop with uvicorn's own
    signal handlers disabled, so SIGINT/SIGTERM go through ShutdownCoordinator.

    start() serves until stop() is called; schedule it with
    create_tracked_task(category=TaskCategory.API).
    """

    def __init__(self, app: Any, host: str = "0.0.0.0", port: int = 8000, log_level: str = "warning"):
        """
        Args:
            app: ASGI app (FastAPI, or FastAPI wrapped by Socket.IO)
            host: Bind address
            port: Bind port
            log_level: uvicorn's own log level
        """
        self.app = app
        self.host = host
        self.port = port
        self.log_level = log_level
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()

    def _create_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            app=self.app,
            host=self.host,
            port=self.port,
            loop="asyncio",
            log_level=self.log_level,
            access_log=False,
            server_header=False,
        )
        server = uvicorn.Server(config)
        server.install_signal_handlers = lambda: None  # type: ignore[method-assign]
        return server

    async def start(self) -> None:
        """Serve until stop() is called or uvicorn exits on its own."""
        if self.is_running:
            raise RuntimeError("API server already started")

        self._server = self._create_server()
        self._stop_event.clear()

        log.info(f"Launching API server on http://{self.host}:{self.port}")
        self._serve_task = asyncio.create_task(self._server.serve(), name="UvicornServe")

        stop_waiter = asyncio.create_task(self._stop_event.wait())
        try:
            done, _ = await asyncio.wait({self._serve_task, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)
            if self._serve_task in done and not self._serve_task.cancelled():
                # uvicorn returned by itself (bind failure, startup error)
                error = self._serve_task.exception()
                if error is not None:
                    raise error
                if not self._stop_event.is_set():
                    raise RuntimeError(f"API server exited unexpectedly (port {self.port})")
        except asyncio.CancelledError:
            log.debug("API server task cancelled, stopping server")
            await self.stop()
            raise
        finally:
            stop_waiter.cancel()

    async def stop(self, shutdown_timeout: float = 2.0) -> None:
        """Ask uvicorn to exit; cancel it if it does not within the timeout."""
        self._stop_event.set()
        if self._server is None:
            return

        log.info("Stopping API server...")
        self._server.should_exit = True
        self._server.force_exit = True

        if self._serve_task and not self._serve_task.done():
            try:
                await asyncio.wait_for(asyncio.shield(self._serve_task), timeout=shutdown_timeout)
            except asyncio.TimeoutError:
                log.warn("API server shutdown timeout, cancelling serve task")
                self._serve_task.cancel()
                await asyncio.gather(self._serve_task, return_exceptions=True)
            except asyncio.CancelledError:
                pass

        self._server = None
        self._serve_task = None
        log.info("API server stopped")

    @property
    def is_running(self) -> bool:
        return self._serve_task is not None and not self._serve_task.done()
