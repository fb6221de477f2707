"""
FastAPI Application Factory

Assembles the viewer API:
- Routes (book parts and clips, camera defaults, logger, system)
- Exception handlers (domain errors -> JSON)
- CORS
- /ws/events stream of bus events

Kept separate from main_asyncio.py so tests can build the app against a
container of their own.
"""

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional

from api.dependencies import peek_service_container
from api.middleware.error_handler import register_exception_handlers
from api.routes import book, camera, logger as logger_routes, system
from api.websocket import websocket_events_endpoint
from utils.logger import get_logger
from models.enums import LogCategory

log = get_logger().for_category(LogCategory.API)

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def create_app(
    title: str = "Book Viewer",
    description: str = "REST API for the interactive book model",
    version: str = "1.0.0",
    docs_enabled: bool = True,
    cors_origins: Optional[list[str]] = None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        title: API title (shown in docs)
        description: API description
        version: API version
        docs_enabled: Enable /docs and /redoc
        cors_origins: CORS allowed origins (default: local dev servers)

    Returns:
        Configured FastAPI application ready to run
    """
    app = FastAPI(
        title=title,
        description=description,
        version=version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None
    )

    log.info(f"Creating FastAPI app: {title} v{version}")

    # =========================================================================
    # CORS Configuration
    # =========================================================================

    cors_origins = cors_origins or DEFAULT_CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    log.debug(f"CORS enabled for origins: {cors_origins}")

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    register_exception_handlers(app)

    # =========================================================================
    # Routes
    # =========================================================================

    for router in (book.router, camera.router, logger_routes.router, system.router):
        app.include_router(router, prefix="/api/v1")

    log.debug("Routes registered: book, camera, logger, system (/api/v1)")

    @app.get(
        "/api/health",
        tags=["System"],
        summary="Health check",
        description="Check if API is running and responding"
    )
    async def health_check():
        """Simple health check endpoint for monitoring"""
        services = peek_service_container()
        return {
            "status": "healthy",
            "service": "book-viewer-api",
            "version": version,
            "model_loaded": bool(services and services.viewer.loaded),
        }

    @app.get("/", include_in_schema=False)
    async def root():
        return JSONResponse(
            {
                "message": "Book Viewer API",
                "docs": "/docs" if docs_enabled else None,
                "health": "/api/health"
            }
        )

    # =========================================================================
    # WebSocket Endpoints
    # =========================================================================

    @app.websocket("/ws/events")
    async def websocket_events(websocket: WebSocket):
        """WebSocket endpoint for real-time event streaming"""
        services = peek_service_container()
        if services is None or services.broadcaster is None:
            await websocket.close(code=1013, reason="Event stream not available")
            return
        await websocket_events_endpoint(websocket, services.broadcaster)

    log.info(f"FastAPI app created successfully: {title}")
    return app
