"""
main_asyncio.py — Application entry point for the book viewer
--------------------------------------------------------------

Responsible for:
- loading configuration and the book manifest
- wiring services (Dependency Injection through ServiceContainer)
- starting the render loop, event broadcaster and API server
- graceful shutdown on Ctrl+C, SIGTERM or a failed critical task
"""

import sys

# Set UTF-8 encoding for output before anything logs (tree glyphs, arrows)
if hasattr(sys.stdout, 'reconfigure') and sys.stdout.encoding != 'UTF-8':
    sys.stdout.reconfigure(encoding='utf-8')  # type: ignore
if hasattr(sys.stderr, 'reconfigure') and sys.stderr.encoding != 'UTF-8':
    sys.stderr.reconfigure(encoding='utf-8')  # type: ignore

import asyncio
import os

from api.dependencies import set_service_container
from api.main import create_app
from api.socketio.registry import register_socketio
from api.socketio.server import create_socketio_server, wrap_app_with_socketio
from lifecycle import ShutdownCoordinator
from lifecycle.api_server_wrapper import APIServerWrapper
from lifecycle.handlers import (
    AllTasksCancellationHandler,
    APIServerShutdownHandler,
    BroadcasterShutdownHandler,
    PlaybackShutdownHandler,
    RenderLoopShutdownHandler,
)
from lifecycle.task_registry import create_tracked_task, TaskCategory, TaskRegistry
from managers import AssetManager, ConfigManager
from models.enums import LogCategory
from services.event_broadcaster import EventBroadcaster
from services.event_bus import EventBus
from services.middleware import log_middleware
from services.service_container import ServiceContainer
from utils.logger import get_logger, configure_logger

log = get_logger().for_category(LogCategory.SYSTEM)

# Overrides config/config.yaml (absolute, or relative to src/)
CONFIG_ENV = "BOOK_VIEWER_CONFIG"


async def main() -> None:
    log.info("Starting book viewer...")

    # ========================================================================
    # 1. CONFIG & LOGGING
    # ========================================================================

    broadcaster = EventBroadcaster()
    get_logger().set_broadcaster(broadcaster)

    config_manager = ConfigManager(os.environ.get(CONFIG_ENV, "config/config.yaml"))
    config = config_manager.load()
    configure_logger(config.logging.level, use_colors=config.logging.colors)

    # ========================================================================
    # 2. SERVICES
    # ========================================================================

    event_bus = EventBus()
    event_bus.add_middleware(log_middleware)

    services = ServiceContainer.build(config_manager, AssetManager(), event_bus=event_bus, broadcaster=broadcaster)
    broadcaster.attach(event_bus)
    broadcaster.start()

    # ========================================================================
    # 3. MODEL
    # ========================================================================

    model_path = config_manager.model_path
    if model_path is None:
        log.warn("No model configured (model.path), API will report 503 until /book/reload")
    else:
        try:
            scene = services.asset_manager.load_manifest(model_path)
            parts = await services.viewer.load_model(scene)
            log.info(f"Book ready: {len(parts)} parts", parts=", ".join(p.key for p in parts))
        except Exception as e:
            log.error(f"Failed to load model {model_path}: {e}", exc_info=True)

    # ========================================================================
    # 4. RENDER LOOP
    # ========================================================================

    await services.render_loop.start()

    # ========================================================================
    # 5. API SERVER (FastAPI + Socket.IO)
    # ========================================================================

    set_service_container(services)

    app = create_app(docs_enabled=config.api.docs_enabled, cors_origins=config.api.cors_origins or None)
    sio = create_socketio_server(config.api.cors_origins)
    register_socketio(sio, services)

    api_wrapper = APIServerWrapper(wrap_app_with_socketio(app, sio), host=config.api.host, port=config.api.port)
    api_task = create_tracked_task(
        api_wrapper.start(),
        category=TaskCategory.API,
        description="FastAPI/Uvicorn Server"
    )

    # ========================================================================
    # 6. SHUTDOWN COORDINATOR
    # ========================================================================

    coordinator = ShutdownCoordinator()
    coordinator.register(RenderLoopShutdownHandler(services.render_loop))
    coordinator.register(PlaybackShutdownHandler(services.state_machine, services.driver))
    coordinator.register(APIServerShutdownHandler(api_wrapper))
    coordinator.register(BroadcasterShutdownHandler(broadcaster))
    coordinator.register(AllTasksCancellationHandler(exclude_tasks=[api_task]))
    coordinator.setup_signal_handlers(asyncio.get_running_loop())

    log.info("Viewer initialized. Waiting for exit signal...")
    await coordinator.wait_for_shutdown()
    await coordinator.shutdown_all()

    set_service_container(None)
    log.info("Book viewer shut down cleanly.", tasks=TaskRegistry.instance().summary())


def run() -> None:
    """Console script entry point"""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        log.info("Keyboard interrupt received")
    except Exception as e:
        log.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
