"""
API Routes - HTTP endpoint handlers

Each area (book, camera, logger, system) gets its own router, included in
the main FastAPI app under /api/v1.
"""
