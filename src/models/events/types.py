from enum import Enum, auto


class EventType(Enum):
    # Playback (Completion Signal and friends)
    PLAYBACK_STARTED = auto()
    PLAYBACK_FINISHED = auto()
    PLAYBACK_HALTED = auto()

    # Part state
    PART_STATE_CHANGED = auto()

    # State machine
    TRANSITION_ACCEPTED = auto()
    TRANSITION_REJECTED = auto()
    CASCADE_FINISHED = auto()
    CASCADE_CANCELLED = auto()

    # Asset
    MODEL_LOADED = auto()
