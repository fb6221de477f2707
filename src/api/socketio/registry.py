from api.socketio.on_connect import register_on_connect
from services.service_container import ServiceContainer


def register_socketio(sio, services: ServiceContainer) -> None:
    """Hook the Socket.IO server to the services: handlers plus broadcaster output"""
    register_on_connect(sio, services)
    if services.broadcaster is not None:
        services.broadcaster.set_socketio_server(sio)
