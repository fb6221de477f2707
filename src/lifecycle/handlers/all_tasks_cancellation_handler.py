import asyncio
from typing import List, Optional

from utils.logger import get_logger, LogCategory
from lifecycle.shutdown_protocol import IShutdownHandler
from lifecycle.task_registry import TaskRegistry

log = get_logger().for_category(LogCategory.SHUTDOWN)


class AllTasksCancellationHandler(IShutdownHandler):
    """
    Cancels every tracked task still running, except the task executing
    this handler and any explicitly excluded ones.

    Priority: 30 (LAST)
    """

    shutdown_priority = 30

    def __init__(self, exclude_tasks: Optional[List[asyncio.Task]] = None, grace: float = 0.5):
        self.exclude_tasks = exclude_tasks or []
        self.grace = grace

    async def shutdown(self) -> None:
        current = asyncio.current_task()
        exclude = [t for t in [current, *self.exclude_tasks] if t is not None]
        tasks = TaskRegistry.instance().get_tasks_for_shutdown(exclude=exclude)

        if not tasks:
            log.debug("No tracked tasks left to cancel")
            return

        log.info(f"Cancelling {len(tasks)} tracked tasks")
        for task in tasks:
            task.cancel(msg="shutdown")

        done, pending = await asyncio.wait(tasks, timeout=self.grace)
        if pending:
            log.warn(f"{len(pending)} tasks still running after cancellation")
