"""Services layer"""

from .event_bus import EventBus
from .clip_classifier import ClipClassifier
from .clip_library import ClipLibrary
from .completion_signal import CompletionSignal
from .playback_driver import PlaybackDriver
from .conflict_resolver import ConflictResolver
from .part_state_store import PartStateStore
from .book_state_machine import BookStateMachine
from .book_viewer import BookViewer

__all__ = [
    "EventBus",
    "ClipClassifier",
    "ClipLibrary",
    "CompletionSignal",
    "PlaybackDriver",
    "ConflictResolver",
    "PartStateStore",
    "BookStateMachine",
    "BookViewer",
]
