from .all_tasks_cancellation_handler import AllTasksCancellationHandler
from .api_server_shutdown_handler import APIServerShutdownHandler
from .broadcaster_shutdown_handler import BroadcasterShutdownHandler
from .playback_shutdown_handler import PlaybackShutdownHandler
from .render_loop_shutdown_handler import RenderLoopShutdownHandler

__all__ = [
    "AllTasksCancellationHandler",
    "APIServerShutdownHandler",
    "BroadcasterShutdownHandler",
    "PlaybackShutdownHandler",
    "RenderLoopShutdownHandler",
]
