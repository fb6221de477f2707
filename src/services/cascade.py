"""
Cascade chain - ordered transitions triggered by one request
"""

import itertools
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional

from models.domain.part import Part
from models.enums import PartState

_chain_ids = itertools.count(1)


@dataclass(frozen=True)
class CascadeStep:
    """Drive one part to one state"""
    part: Part
    desired: PartState

    def __str__(self) -> str:
        return f"{self.part.key}→{self.desired.name}"


@dataclass
class CascadeChain:
    """
    Strictly sequential: the next step starts only after every playback of
    the current step has fired its completion.

    pending: playback_id → clip name of the current step's playbacks
    """
    part: Part
    desired: PartState
    steps: Deque[CascadeStep] = field(default_factory=deque)
    id: int = field(default_factory=lambda: next(_chain_ids))
    pending: Dict[int, str] = field(default_factory=dict)
    current: Optional[CascadeStep] = None
    cancelled: bool = False

    def describe(self) -> List[str]:
        return [str(step) for step in self.steps]
