import pytest
from typing import List, Optional

from engine.animation_mixer import AnimationMixer
from models.domain.clip import AnimationClip
from models.domain.config import CascadePolicy
from models.domain.part import Part, LATCH, FRONT_COVER
from models.enums import PartState, ClosedBookPagePolicy, LaterPagesPolicy
from models.events import EventType
from services.book_state_machine import BookStateMachine
from services.book_viewer import BookViewer
from services.clip_library import ClipLibrary
from services.completion_signal import CompletionSignal
from services.conflict_resolver import ConflictResolver
from services.event_bus import EventBus
from services.part_state_store import PartStateStore
from services.playback_driver import PlaybackDriver


def make_clip(name: str, duration: float = 1.0, *tracks: str) -> AnimationClip:
    return AnimationClip(name=name, duration=duration, tracks=tuple(tracks))


def book_clips(pages: int = 3, latch: bool = True, spline: bool = True) -> List[AnimationClip]:
    """Clip set of the sample book: latch, cover + spline companion, pages page_1..page_n"""
    clips = []
    if latch:
        clips.append(make_clip("latch_open", 0.8, "latch.quaternion", "latch.position"))
    clips.append(make_clip("front_cover_open", 1.6, "front_cover.quaternion"))
    if spline:
        clips.append(make_clip("spline_bend", 1.6, "spline.morphTargetInfluences"))
    for number in range(1, pages + 1):
        clips.append(make_clip(f"page_{number}_turn", 1.2, f"page_{number}.quaternion"))
    return clips


class Book:
    """
    Wired core (library, store, driver, resolver, signal, state machine)
    with a recorder on every bus event and an ordering invariant check on
    every recorded state change.
    """

    def __init__(self, clips: List[AnimationClip], policy: Optional[CascadePolicy] = None):
        self.event_bus = EventBus()
        self.library = ClipLibrary(clips)
        self.store = PartStateStore()
        self.store.reset(self.library.parts())
        self.mixer = AnimationMixer()
        self.signal = CompletionSignal(self.event_bus)
        self.driver = PlaybackDriver(self.mixer, self.signal, self.event_bus)
        self.resolver = ConflictResolver(self.driver)
        self.machine = BookStateMachine(
            self.library, self.store, self.driver, self.resolver, self.signal, self.event_bus,
            policy=policy
        )
        self.viewer = BookViewer(self.library, self.store, self.driver, self.machine, self.event_bus)

        self.events = []
        self.violations = []
        for event_type in EventType:
            self.event_bus.subscribe(event_type, self.events.append, priority=-100)
        self.event_bus.subscribe(EventType.PART_STATE_CHANGED, self._check_invariants, priority=100)

    @property
    def pages(self) -> List[Part]:
        return [Part.page(i) for i in range(self.library.page_count())]

    def _check_invariants(self, event) -> None:
        pages = [self.store.is_open(p) for p in self.pages]
        if any(later and not earlier for earlier, later in zip(pages, pages[1:])):
            self.violations.append(f"pages not a prefix: {self.store}")
        if any(pages) and not (self.store.is_open(FRONT_COVER) and self._latch_open()):
            self.violations.append(f"page open on a closed book: {self.store}")
        if self.store.is_open(FRONT_COVER) and not self._latch_open():
            self.violations.append(f"cover open on a closed latch: {self.store}")

    def _latch_open(self) -> bool:
        return not self.library.clips_for(LATCH) or self.store.is_open(LATCH)

    async def tick(self, count: int = 1, delta: float = 0.1) -> None:
        for _ in range(count):
            await self.driver.tick(delta)

    async def settle(self, delta: float = 0.1, max_ticks: int = 1000) -> int:
        """Tick until nothing is in flight; returns the ticks used"""
        for ticks in range(max_ticks):
            if not self.driver.active():
                return ticks
            await self.driver.tick(delta)
        raise AssertionError("playbacks never settled")

    async def request(self, part: Part, state: PartState, settle: bool = True):
        outcome = await self.machine.request_state(part, state)
        if settle:
            await self.settle()
        return outcome

    def of_type(self, event_type: EventType) -> list:
        return [e for e in self.events if e.type is event_type]

    def state_changes(self) -> List[tuple]:
        return [(e.part, e.new) for e in self.of_type(EventType.PART_STATE_CHANGED)]

    def started(self, include_spline: bool = False) -> List[tuple]:
        return [
            (e.clip_name, e.direction) for e in self.of_type(EventType.PLAYBACK_STARTED)
            if include_spline or "spline" not in e.clip_name
        ]

    def clear_events(self) -> None:
        self.events.clear()


@pytest.fixture
def clips():
    return book_clips()


@pytest.fixture
def make_book():
    """Book factory: make_book(policy=None, pages=3, latch=True, spline=True)"""
    def _make(policy: Optional[CascadePolicy] = None, **clip_options) -> Book:
        return Book(book_clips(**clip_options), policy=policy)
    return _make


@pytest.fixture
def book(clips):
    """Default policy: page requests on a closed book are rejected, later pages auto-close"""
    return Book(clips)


@pytest.fixture
def open_book_policy():
    return CascadePolicy(closed_book_pages=ClosedBookPagePolicy.OPEN_BOOK)


@pytest.fixture
def cascading_book(clips, open_book_policy):
    """Page requests on a closed book open the latch and cover first"""
    return Book(clips, policy=open_book_policy)


@pytest.fixture
def strict_book(clips):
    """Opening a page with later pages not closed is rejected"""
    return Book(clips, policy=CascadePolicy(later_pages_on_open=LaterPagesPolicy.REJECT))
