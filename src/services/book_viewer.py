"""
Book Viewer - façade used by the API and the entry point

Loads models (reset of playbacks, chain, parts and states) and forwards
part requests to the state machine.
"""

from typing import Any, Dict, List, Optional

from models.domain.part import Part, LATCH, FRONT_COVER
from models.domain.scene import SceneModel
from models.enums import PartState, TransitionOutcome
from models.events import ModelLoadedEvent
from services.book_state_machine import BookStateMachine
from services.clip_library import ClipLibrary
from services.event_bus import EventBus
from services.part_state_store import PartStateStore
from services.playback_driver import PlaybackDriver
from utils.logger import get_logger, LogCategory
from utils.serialization import Serializer

log = get_logger().for_category(LogCategory.ASSET)


class BookViewer:

    def __init__(
        self,
        library: ClipLibrary,
        store: PartStateStore,
        driver: PlaybackDriver,
        state_machine: BookStateMachine,
        event_bus: EventBus
    ):
        self.library = library
        self.store = store
        self.driver = driver
        self.state_machine = state_machine
        self.event_bus = event_bus
        self.scene: Optional[SceneModel] = None

    @property
    def loaded(self) -> bool:
        return self.scene is not None

    async def load_model(self, scene: SceneModel) -> List[Part]:
        """
        Replace the current model.

        In-flight playbacks are halted, the active cascade is dropped,
        parts are rediscovered from the new clip set and every part starts
        Closed.
        """
        self.state_machine.reset()
        halted = await self.driver.halt_all()
        self.driver.clear()

        self.library.load(scene.clips)
        parts = self.library.parts()
        self.store.reset(parts)
        self.scene = scene

        log.info(
            f"Model loaded: {scene.name}",
            clips=len(scene.clips),
            parts=", ".join(p.key for p in parts) or "-",
            halted=halted
        )
        await self.event_bus.publish(ModelLoadedEvent(scene.name, parts, len(scene.clips)))
        return parts

    async def request_state(self, part: Part, desired: PartState) -> TransitionOutcome:
        return await self.state_machine.request_state(part, desired)

    async def toggle(self, part: Part) -> TransitionOutcome:
        return await self.state_machine.toggle(part)

    async def open_book(self) -> TransitionOutcome:
        """Latch and front cover open, in that order"""
        return await self.state_machine.request_state(FRONT_COVER, PartState.OPEN)

    async def close_book(self) -> TransitionOutcome:
        """Pages, front cover, then latch close"""
        return await self.state_machine.request_state(FRONT_COVER, PartState.CLOSED)

    def knows(self, part: Part) -> bool:
        return self.store.knows(part)

    def describe_part(self, part: Part) -> Dict[str, Any]:
        direction = self.state_machine.in_flight_direction(part)
        return {
            "part": part.key,
            "kind": part.kind.name,
            "index": part.index,
            "state": self.store.get(part).name,
            "transitioning": direction is not None,
            "direction": Serializer.enum_to_str(direction),
            "clips": [clip.name for clip in self.library.clips_for(part)],
        }

    def describe_parts(self) -> List[Dict[str, Any]]:
        return [self.describe_part(part) for part in self.library.parts()]

    def is_book_open(self) -> bool:
        return all(
            self.state_machine.is_settled(part, PartState.OPEN)
            for part in (LATCH, FRONT_COVER)
            if self.state_machine.is_available(part)
        )
