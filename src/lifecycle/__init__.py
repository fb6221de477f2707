"""
Lifecycle subsystem
-------------------

Graceful shutdown, task tracking and shutdown handlers:
    from lifecycle import ShutdownCoordinator, TaskRegistry
    from lifecycle.handlers import RenderLoopShutdownHandler
"""

from .shutdown_coordinator import ShutdownCoordinator
from .task_registry import TaskRegistry, TaskCategory, TaskInfo, create_tracked_task
from .shutdown_protocol import IShutdownHandler

__all__ = [
    "ShutdownCoordinator",
    "TaskRegistry",
    "TaskCategory",
    "TaskInfo",
    "IShutdownHandler",
    "create_tracked_task",
]
