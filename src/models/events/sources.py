from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers"""
    PLAYBACK_DRIVER = auto()   # Playback start / finish / halt
    STATE_MACHINE = auto()     # Requests, cascades, state changes
    ASSET_LOADER = auto()      # Model (re)loads
    API = auto()               # Requests issued through the HTTP surface
