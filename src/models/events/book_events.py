from dataclasses import dataclass
from typing import List

from models.events.base import Event
from models.events.types import EventType
from models.events.sources import EventSource
from models.domain.part import Part
from models.enums import PartState


@dataclass(init=False)
class PartStateChangedEvent(Event):
    part: Part
    old: PartState
    new: PartState

    def __init__(self, part: Part, old: PartState, new: PartState):
        super().__init__(
            type=EventType.PART_STATE_CHANGED,
            source=EventSource.STATE_MACHINE,
        )
        self.part = part
        self.old = old
        self.new = new


@dataclass(init=False)
class TransitionAcceptedEvent(Event):
    chain_id: int
    part: Part
    desired: PartState
    steps: List[str]

    def __init__(self, chain_id: int, part: Part, desired: PartState, steps: List[str]):
        super().__init__(
            type=EventType.TRANSITION_ACCEPTED,
            source=EventSource.STATE_MACHINE,
        )
        self.chain_id = chain_id
        self.part = part
        self.desired = desired
        self.steps = steps


@dataclass(init=False)
class TransitionRejectedEvent(Event):
    """Out-of-band warning for an illegal request"""
    part: Part
    desired: PartState
    reason: str

    def __init__(self, part: Part, desired: PartState, reason: str):
        super().__init__(
            type=EventType.TRANSITION_REJECTED,
            source=EventSource.STATE_MACHINE,
        )
        self.part = part
        self.desired = desired
        self.reason = reason


@dataclass(init=False)
class CascadeFinishedEvent(Event):
    chain_id: int
    part: Part
    desired: PartState

    def __init__(self, chain_id: int, part: Part, desired: PartState):
        super().__init__(
            type=EventType.CASCADE_FINISHED,
            source=EventSource.STATE_MACHINE,
        )
        self.chain_id = chain_id
        self.part = part
        self.desired = desired


@dataclass(init=False)
class CascadeCancelledEvent(Event):
    chain_id: int
    part: Part
    desired: PartState
    reason: str

    def __init__(self, chain_id: int, part: Part, desired: PartState, reason: str):
        super().__init__(
            type=EventType.CASCADE_CANCELLED,
            source=EventSource.STATE_MACHINE,
        )
        self.chain_id = chain_id
        self.part = part
        self.desired = desired
        self.reason = reason


@dataclass(init=False)
class ModelLoadedEvent(Event):
    model_name: str
    parts: List[Part]
    clip_count: int

    def __init__(self, model_name: str, parts: List[Part], clip_count: int):
        super().__init__(
            type=EventType.MODEL_LOADED,
            source=EventSource.ASSET_LOADER,
        )
        self.model_name = model_name
        self.parts = parts
        self.clip_count = clip_count
