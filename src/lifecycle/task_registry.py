"""
Task Registry
-------------

Centralized tracking of asyncio tasks created across the viewer (render
loop, API server, broadcaster worker). Feeds the /system/tasks endpoints
and lets the shutdown coordinator watch critical tasks.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.TASK)


class TaskCategory(Enum):
    """Logical grouping of asynchronous tasks."""
    API = auto()
    RENDER = auto()
    EVENTBUS = auto()
    SYSTEM = auto()
    BACKGROUND = auto()
    GENERAL = auto()


@dataclass(frozen=True)
class TaskInfo:
    """Metadata captured at task creation time."""
    id: int
    category: TaskCategory
    description: str
    created_at: str  # ISO UTC string
    created_by: Optional[str] = None


@dataclass
class TaskRecord:
    task: asyncio.Task
    info: TaskInfo
    cancelled: bool = False
    finished_with_error: Optional[BaseException] = None
    finished_at: Optional[str] = None

    @property
    def status(self) -> str:
        if not self.task.done():
            return "running"
        if self.cancelled:
            return "cancelled"
        if self.finished_with_error is not None:
            return "failed"
        return "completed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.info.id,
            "category": self.info.category.name,
            "description": self.info.description,
            "created_at": self.info.created_at,
            "created_by": self.info.created_by,
            "finished_at": self.finished_at,
            "status": self.status,
            "error": str(self.finished_with_error) if self.finished_with_error else None,
        }


class TaskRegistry:
    """
    Global registry for tracked asyncio tasks.

    Failures are logged when the task finishes, so a crashed render loop
    shows up in the log even if nobody awaits it.
    """

    _instance: Optional["TaskRegistry"] = None

    def __init__(self) -> None:
        self._records: Dict[asyncio.Task, TaskRecord] = {}
        self._next_id: int = 1

    @classmethod
    def instance(cls) -> "TaskRegistry":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the singleton (tests)"""
        cls._instance = None

    def register(
        self,
        task: asyncio.Task,
        category: TaskCategory,
        description: str,
        created_by: Optional[str] = None
    ) -> int:
        task_id = self._next_id
        self._next_id += 1

        info = TaskInfo(
            id=task_id,
            category=category,
            description=description,
            created_at=datetime.now(timezone.utc).isoformat(),
            created_by=created_by,
        )
        self._records[task] = TaskRecord(task=task, info=info)
        task.add_done_callback(self._on_task_done)

        log.debug(f"[Task {task_id}] Registered ({category.name}) - {description}")
        return task_id

    def _on_task_done(self, task: asyncio.Task) -> None:
        record = self._records.get(task)
        if record is None:
            return

        record.finished_at = datetime.now(timezone.utc).isoformat()
        if task.cancelled():
            record.cancelled = True
            log.debug(f"[Task {record.info.id}] Cancelled")
            return

        exc = task.exception()
        if exc is not None:
            record.finished_with_error = exc
            log.error(
                f"[Task {record.info.id}] FAILED: {record.info.description}",
                error=f"{type(exc).__name__}: {exc}"
            )
        else:
            log.debug(f"[Task {record.info.id}] Completed successfully")

    def get_record(self, task: asyncio.Task) -> Optional[TaskRecord]:
        return self._records.get(task)

    # -----------------------------
    # Queries
    # -----------------------------

    def list_all(self) -> List[TaskRecord]:
        return list(self._records.values())

    def active(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if not r.task.done()]

    def failed(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.finished_with_error is not None]

    def cancelled(self) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.cancelled]

    def by_category(self, category: TaskCategory) -> List[TaskRecord]:
        return [r for r in self._records.values() if r.info.category is category]

    def get_stats(self) -> Dict[str, int]:
        return {
            "total": len(self._records),
            "active": len(self.active()),
            "failed": len(self.failed()),
            "cancelled": len(self.cancelled()),
        }

    def summary(self) -> str:
        """Human-readable summary for logs."""
        stats = self.get_stats()
        return ", ".join(f"{k}={v}" for k, v in stats.items())

    def get_all_as_dicts(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in sorted(self._records.values(), key=lambda r: r.info.id)]

    def get_tasks_for_shutdown(self, exclude: Optional[List[asyncio.Task]] = None) -> List[asyncio.Task]:
        """Still running tasks, minus the excluded ones."""
        exclude = exclude or []
        tasks = [r.task for r in self.active() if r.task not in exclude]
        log.debug(f"Shutdown: {len(tasks)} tasks to cancel")
        return tasks


def create_tracked_task(
    coro,
    *,
    category: TaskCategory,
    description: str,
    created_by: Optional[str] = None
) -> asyncio.Task:
    """
    Create and register a task in a single call.

    Example:
        create_tracked_task(loop.run(), category=TaskCategory.RENDER, description="RenderLoop")
    """
    task = asyncio.get_running_loop().create_task(coro)
    TaskRegistry.instance().register(task, category=category, description=description, created_by=created_by)
    return task
