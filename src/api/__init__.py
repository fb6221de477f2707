"""
Book Viewer - API Layer

REST, WebSocket and Socket.IO interfaces over the viewer services.

Structure:
- routes/     : Endpoint handlers
- schemas/    : Pydantic schemas
- middleware/ : Error handling
- socketio/   : Socket.IO server and connect handlers
"""

from api.main import create_app

__all__ = ["create_app"]
