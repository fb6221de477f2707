"""
System endpoints - Render loop status, task introspection and recent events
"""

from fastapi import APIRouter, Depends, Query
from typing import Dict, Any
from datetime import datetime, timezone
from lifecycle.task_registry import TaskRegistry
from services.service_container import ServiceContainer
from utils.logger import get_logger, LogCategory
from api.dependencies import get_service_container

log = get_logger().for_category(LogCategory.API)

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/status")
async def get_status(services: ServiceContainer = Depends(get_service_container)) -> Dict[str, Any]:
    """
    Runtime status.

    Returns:
        - model: Loaded model name (or None)
        - render_loop: Tick metrics (fps, ticks, completions)
        - cascade: Active chain (request and remaining steps) or None
        - completion_waiters: Pending one-shot completion subscriptions
    """
    chain = services.state_machine.active_chain
    scene = services.viewer.scene
    return {
        "model": scene.name if scene else None,
        "render_loop": services.render_loop.get_metrics(),
        "cascade": {
            "id": chain.id,
            "request": f"{chain.part.key} → {chain.desired.name}",
            "current": str(chain.current) if chain.current else None,
            "remaining": chain.describe(),
        } if chain else None,
        "completion_waiters": services.completion_signal.pending_count(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/events")
async def get_recent_events(
    limit: int = Query(50, ge=1, le=1000),
    services: ServiceContainer = Depends(get_service_container)
) -> Dict[str, Any]:
    """Recent bus events kept in the EventBus history"""
    events = services.event_bus.get_event_history(limit)
    return {
        "count": len(events),
        "events": [
            {
                "type": e.type.name,
                "source": e.source.name if e.source else None,
                "timestamp": e.timestamp,
                "data": e.to_data(),
            }
            for e in events
        ]
    }


@router.get("/tasks/summary")
async def get_task_summary() -> Dict[str, Any]:
    """
    Get high-level task summary.

    Returns:
        - summary: Human-readable summary string
        - total: Total tasks tracked (all time)
        - active: Currently running tasks
        - failed: Tasks that ended with exceptions
        - cancelled: Tasks that were cancelled
    """
    registry = TaskRegistry.instance()
    return {
        "summary": registry.summary(),
        "total": len(registry.list_all()),
        "active": len(registry.active()),
        "failed": len(registry.failed()),
        "cancelled": len(registry.cancelled())
    }


@router.get("/tasks")
async def get_all_tasks() -> Dict[str, Any]:
    """
    Get detailed information about all tracked tasks.

    Returns:
        - count: Total number of tasks
        - tasks: List of task details including ID, category, description, status, etc.
    """
    registry = TaskRegistry.instance()
    tasks = registry.get_all_as_dicts()
    return {
        "count": len(tasks),
        "tasks": tasks
    }


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "degraded"
        - reason: Reason if not healthy
        - tasks: Task summary statistics
        - timestamp: Current timestamp
    """
    registry = TaskRegistry.instance()
    failed = registry.failed()

    status = "healthy"
    reason = None
    if len(failed) > 0:
        status = "degraded"
        reason = f"{len(failed)} background task(s) have failed"

    return {
        "status": status,
        "reason": reason,
        "tasks": registry.get_stats(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
