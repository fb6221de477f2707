"""
Enums for the book interaction state machine
"""

from enum import Enum, auto


class PartKind(Enum):
    """
    Logical part a clip drives

    PAGE: one page of the book (ordered by the digits in its node name)
    FRONT_COVER: clip(s) animating the `front_cover` node
    LATCH: clip(s) animating the `latch` node
    ANCILLARY: cosmetic companion clips (e.g. the spline bending with the cover)
    UNCLASSIFIED: never driven directly
    """
    PAGE = auto()
    FRONT_COVER = auto()
    LATCH = auto()
    ANCILLARY = auto()
    UNCLASSIFIED = auto()


class PartState(Enum):
    """Binary open/closed state of a part"""
    CLOSED = auto()
    OPEN = auto()

    @property
    def direction(self) -> "PlaybackDirection":
        """Playback direction that ends in this state"""
        return PlaybackDirection.FORWARD if self is PartState.OPEN else PlaybackDirection.REVERSE

    @property
    def opposite(self) -> "PartState":
        return PartState.CLOSED if self is PartState.OPEN else PartState.OPEN


class PlaybackDirection(Enum):
    """
    Direction of a clip playback

    FORWARD: start → end (opens the part)
    REVERSE: end → start (closes the part)
    """
    FORWARD = 1
    REVERSE = -1

    @property
    def time_scale(self) -> float:
        return float(self.value)

    @property
    def resulting_state(self) -> PartState:
        """State recorded when a playback in this direction finishes"""
        return PartState.OPEN if self is PlaybackDirection.FORWARD else PartState.CLOSED

    @property
    def opposite(self) -> "PlaybackDirection":
        return PlaybackDirection.REVERSE if self is PlaybackDirection.FORWARD else PlaybackDirection.FORWARD


class TransitionOutcome(Enum):
    """Result of a request_state() call"""
    ACCEPTED = auto()     # cascade scheduled (at least one step)
    NOOP = auto()         # part already settled in requested state
    REJECTED = auto()     # illegal transition, warning emitted
    UNAVAILABLE = auto()  # no clips for the part (absent capability)
    FAILED = auto()       # unexpected internal error, logged


class ClosedBookPagePolicy(Enum):
    """What a page request does while the latch or cover is closed"""
    REJECT = "reject"
    OPEN_BOOK = "open_book"


class LaterPagesPolicy(Enum):
    """What opening Page(n) does while pages after n are open"""
    AUTO_CLOSE = "auto_close"
    REJECT = "reject"


class ViewportKind(Enum):
    """Viewer device class used for camera defaults"""
    DESKTOP = auto()
    MOBILE = auto()


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()       # Configuration loading, validation
    ASSET = auto()        # Model / clip loading, binding report
    CLIP = auto()         # Clip classification, ordering
    PLAYBACK = auto()     # Playback start / finish / halt
    CONFLICT = auto()     # Conflict resolution between clips
    STATE = auto()        # Part state changes
    CASCADE = auto()      # State machine requests and cascade chains
    EVENT = auto()        # Event bus events and handling
    RENDER_LOOP = auto()  # Periodic tick
    CAMERA = auto()       # Camera framing, pan limit

    API = auto()
    WEBSOCKET = auto()

    SYSTEM = auto()       # Startup, shutdown, errors
    SHUTDOWN = auto()
    TASK = auto()

    GENERAL = auto()      # Default general category
