"""
Part State Store - authoritative open/closed record per part

Written only by completion handlers of the state machine, never at
request time. Reset to all Closed on every model (re)load.
"""

from typing import Dict, Iterable

from models.domain.part import Part
from models.enums import PartState
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.STATE)


class PartStateStore:

    def __init__(self):
        self._states: Dict[Part, PartState] = {}

    def reset(self, parts: Iterable[Part]) -> None:
        self._states = {part: PartState.CLOSED for part in parts}
        log.info("Part states reset", parts=len(self._states))

    def get(self, part: Part) -> PartState:
        """Unknown parts read as Closed"""
        return self._states.get(part, PartState.CLOSED)

    def knows(self, part: Part) -> bool:
        return part in self._states

    def is_open(self, part: Part) -> bool:
        return self.get(part) is PartState.OPEN

    def record(self, part: Part, state: PartState) -> bool:
        """Store state; True when it changed"""
        old = self.get(part)
        self._states[part] = state
        if old is state:
            return False

        log.info(f"{part.key}: {old.name} → {state.name}")
        return True

    def snapshot(self) -> Dict[Part, PartState]:
        return dict(self._states)

    def __repr__(self) -> str:
        states = ", ".join(f"{p.key}={s.name}" for p, s in self._states.items())
        return f"PartStateStore({states})"
