"""
EventBus middleware for the book viewer

Runs before any handler sees the event. Installed once at startup:

    event_bus.add_middleware(log_middleware)
"""

from models.events import Event
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


def log_middleware(event: Event) -> Event:
    """DEBUG trace of every published event (type, source, payload); never blocks"""
    source = event.source.name if event.source else "-"
    payload = " ".join(f"{key}={value}" for key, value in event.to_data().items())
    log.debug(f"{event.type.name} ← {source}", payload=payload or "-")
    return event
