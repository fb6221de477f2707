"""
Logger API routes for exposing log levels, categories and recent log lines.

Provides:
- GET /api/v1/logger/levels - List available log levels
- GET /api/v1/logger/categories - List available log categories
- GET /api/v1/logger/recent - Recent log lines kept by the broadcaster
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_service_container
from api.schemas.logger import LogLevelResponse, LogCategoryResponse, LogMessage
from models.enums import LogLevel, LogCategory
from services.service_container import ServiceContainer

router = APIRouter(
    prefix="/logger",
    tags=["Logger"],
)


@router.get("/levels", response_model=LogLevelResponse)
async def get_log_levels():
    """List of log level names (DEBUG, INFO, WARN, ERROR)"""
    return LogLevelResponse(levels=[level.name for level in LogLevel])


@router.get("/categories", response_model=LogCategoryResponse)
async def get_log_categories():
    """List of log category names available in the application"""
    return LogCategoryResponse(categories=[category.name for category in LogCategory])


@router.get("/recent", response_model=List[LogMessage])
async def get_recent_logs(
    limit: int = Query(100, ge=1, le=1000),
    services: ServiceContainer = Depends(get_service_container)
):
    """
    Recently logged messages (REST fallback for the /ws/events stream).

    Empty when no broadcaster is attached.
    """
    if services.broadcaster is None:
        return []
    return [
        LogMessage(
            timestamp=entry["timestamp"],
            level=entry["level"],
            category=entry["category"],
            message=entry["message"]
        )
        for entry in services.broadcaster.get_recent(limit, channel="log")
    ]
