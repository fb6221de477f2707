"""
API Dependencies - Service container access for FastAPI endpoints

Pattern:
1. main_asyncio.py creates ServiceContainer during initialization
2. main_asyncio.py calls set_service_container() after creation
3. API endpoints use get_service_container() dependency via Depends()

Example:
    @router.get("/book/parts")
    async def list_parts(services: ServiceContainer = Depends(get_service_container)):
        return services.viewer.describe_parts()
"""

from typing import Optional
from fastapi import HTTPException, status
from services.service_container import ServiceContainer


# Global service container (set by main_asyncio.py during initialization)
_service_container: Optional[ServiceContainer] = None


def set_service_container(services: Optional[ServiceContainer]) -> None:
    """
    Store the service container for API access (None detaches it).
    """
    global _service_container
    _service_container = services


def peek_service_container() -> Optional[ServiceContainer]:
    """Container or None, for code outside request handling"""
    return _service_container


async def get_service_container() -> ServiceContainer:
    """
    FastAPI dependency for accessing service container.

    Raises:
        HTTPException: 503 Service Unavailable if services not initialized
    """
    if _service_container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service container not initialized. Viewer may still be starting."
        )
    return _service_container
