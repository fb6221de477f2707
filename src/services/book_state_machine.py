"""
Book State Machine - legal transitions and cascades for latch, cover and pages

Dependency order: Latch ⊑ FrontCover ⊑ Page(0) ⊑ Page(1) ⊑ ...
Each part must be Open before the next can open; parts close in the
reverse sequence.

Flow of one request:
  request_state(part, desired)
    → plan the ordered steps (or reject)
    → supersede the previous chain
    → for the current step: resolve conflicts, play clips, register
      one-shot completion waiters
    → completion: record state, start the next step

Legality is judged on recorded part state; an in-flight transition does
not change it. Planning adds a step for every part not yet resting in the
state the request needs.

Part state is written only by completion handlers. Everything after the
first step runs inside PlaybackDriver.tick() through the Completion Signal,
so no coroutine ever waits on a playback.
"""

from functools import partial
from typing import List, Optional, Tuple

from models.domain.clip import AnimationClip
from models.domain.config import CascadePolicy
from models.domain.part import Part, LATCH, FRONT_COVER
from models.domain.playback import InFlightPlayback
from models.enums import (
    PartState,
    PlaybackDirection,
    TransitionOutcome,
    ClosedBookPagePolicy,
    LaterPagesPolicy,
)
from models.events import (
    PartStateChangedEvent,
    TransitionAcceptedEvent,
    TransitionRejectedEvent,
    CascadeFinishedEvent,
    CascadeCancelledEvent,
)
from services.cascade import CascadeChain, CascadeStep
from services.clip_library import ClipLibrary
from services.completion_signal import CompletionSignal
from services.conflict_resolver import ConflictResolver
from services.event_bus import EventBus
from services.part_state_store import PartStateStore
from services.playback_driver import PlaybackDriver
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CASCADE)

BOOK_CLOSED = "Cannot turn pages while the book is closed"
CLOSE_LATER_PAGES = "Close later pages first"
COVER_OPEN = "Cannot close latch while front cover is open"


class BookStateMachine:
    """
    Validates requests against the Part State Store and drives cascades.

    At most one cascade chain is active. An accepted request supersedes the
    previous chain and halts its in-flight step playbacks, except a playback
    the new chain would start identically (same clip, same direction), which
    is adopted as is.
    """

    def __init__(
        self,
        library: ClipLibrary,
        store: PartStateStore,
        driver: PlaybackDriver,
        resolver: ConflictResolver,
        completion_signal: CompletionSignal,
        event_bus: EventBus,
        policy: Optional[CascadePolicy] = None
    ):
        self.library = library
        self.store = store
        self.driver = driver
        self.resolver = resolver
        self.completion_signal = completion_signal
        self.event_bus = event_bus
        self.policy = policy or CascadePolicy()

        self._chain: Optional[CascadeChain] = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_chain(self) -> Optional[CascadeChain]:
        return self._chain

    def clips_for(self, part: Part) -> List[AnimationClip]:
        return self.library.clips_for(part)

    def is_available(self, part: Part) -> bool:
        return bool(self.clips_for(part))

    def in_flight_direction(self, part: Part) -> Optional[PlaybackDirection]:
        for clip in self.clips_for(part):
            playback = self.driver.get(clip.name)
            if playback is not None:
                return playback.direction
        return None

    def is_transitioning(self, part: Part) -> bool:
        """Derived state: some clip of the part is in flight"""
        return self.in_flight_direction(part) is not None

    def is_settled(self, part: Part, state: PartState) -> bool:
        """Recorded in state, nothing in flight, every pose resting at the matching end"""
        if self.store.get(part) is not state:
            return False
        return all(self.driver.at_rest(clip, state) for clip in self.clips_for(part))

    def _recorded_open_or_absent(self, part: Part) -> bool:
        return not self.is_available(part) or self.store.is_open(part)

    def _unsettled(self, part: Part, state: PartState) -> bool:
        """Present and not yet resting in state; such a part needs a step"""
        return self.is_available(part) and not self.is_settled(part, state)

    def _pages(self) -> List[Part]:
        return [Part.page(i) for i in range(self.library.page_count())]

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request_state(self, part: Part, desired: PartState) -> TransitionOutcome:
        """
        Ask for part to end in desired state.

        Never raises: illegal requests are reported (WARN + TransitionRejectedEvent),
        unexpected errors are logged and reported as FAILED.
        """
        try:
            return await self._request(part, desired)
        except Exception as e:
            log.error(
                f"Request failed: {part.key} → {desired.name}",
                error=str(e),
                exc_info=True
            )
            return TransitionOutcome.FAILED

    async def toggle(self, part: Part) -> TransitionOutcome:
        """Reverse an in-flight transition, else request the opposite state"""
        direction = self.in_flight_direction(part)
        if direction is not None:
            desired = direction.opposite.resulting_state
        else:
            desired = self.store.get(part).opposite
        return await self.request_state(part, desired)

    async def _request(self, part: Part, desired: PartState) -> TransitionOutcome:
        if not self.is_available(part):
            log.debug(f"No clips for {part.key}, request ignored", desired=desired.name)
            return TransitionOutcome.UNAVAILABLE

        if self.is_settled(part, desired):
            log.debug(f"{part.key} already {desired.name}")
            return TransitionOutcome.NOOP

        steps, reason = self._plan(part, desired)
        if reason is not None:
            await self._reject(part, desired, reason)
            return TransitionOutcome.REJECTED

        chain = CascadeChain(part=part, desired=desired)
        chain.steps.extend(steps)

        await self._supersede(chain)

        log.info(
            f"Request accepted: {part.key} → {desired.name}",
            chain=chain.id,
            steps=" ⇒ ".join(chain.describe())
        )
        await self.event_bus.publish(
            TransitionAcceptedEvent(chain.id, part, desired, chain.describe())
        )

        await self._advance(chain)
        return TransitionOutcome.ACCEPTED

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _plan(self, part: Part, desired: PartState) -> Tuple[List[CascadeStep], Optional[str]]:
        """Ordered steps for the request, or a rejection reason"""
        if part.is_page:
            if desired is PartState.OPEN:
                return self._plan_open_page(part)
            return self._plan_close_page(part)

        if part == FRONT_COVER:
            if desired is PartState.OPEN:
                return self._plan_open_cover()
            return self._plan_close_cover()

        if desired is PartState.OPEN:
            return [CascadeStep(LATCH, desired)], None

        if self.store.is_open(FRONT_COVER):
            return [], COVER_OPEN
        steps = []
        if self._unsettled(FRONT_COVER, PartState.CLOSED):
            steps.append(CascadeStep(FRONT_COVER, PartState.CLOSED))
        steps.append(CascadeStep(LATCH, PartState.CLOSED))
        return steps, None

    def _closed_gates(self) -> List[Part]:
        """Latch and cover recorded Closed; legality reads recorded state only"""
        return [gate for gate in (LATCH, FRONT_COVER) if not self._recorded_open_or_absent(gate)]

    def _plan_open_page(self, page: Part) -> Tuple[List[CascadeStep], Optional[str]]:
        steps: List[CascadeStep] = []

        if self._closed_gates() and self.policy.closed_book_pages is ClosedBookPagePolicy.REJECT:
            return [], BOOK_CLOSED
        steps.extend(
            CascadeStep(gate, PartState.OPEN)
            for gate in (LATCH, FRONT_COVER)
            if self._unsettled(gate, PartState.OPEN)
        )

        pages = self._pages()
        later = pages[page.index + 1:]
        if self.policy.later_pages_on_open is LaterPagesPolicy.REJECT and any(self.store.is_open(p) for p in later):
            return [], CLOSE_LATER_PAGES
        steps.extend(
            CascadeStep(p, PartState.CLOSED)
            for p in reversed(later)
            if not self.is_settled(p, PartState.CLOSED)
        )

        steps.extend(
            CascadeStep(p, PartState.OPEN)
            for p in pages[:page.index]
            if not self.is_settled(p, PartState.OPEN)
        )
        steps.append(CascadeStep(page, PartState.OPEN))
        return steps, None

    def _plan_close_page(self, page: Part) -> Tuple[List[CascadeStep], Optional[str]]:
        if self._closed_gates():
            return [], BOOK_CLOSED

        later = self._pages()[page.index + 1:]
        if any(self.store.is_open(p) for p in later):
            return [], CLOSE_LATER_PAGES
        return [CascadeStep(page, PartState.CLOSED)], None

    def _plan_open_cover(self) -> Tuple[List[CascadeStep], Optional[str]]:
        steps = []
        if self._unsettled(LATCH, PartState.OPEN):
            steps.append(CascadeStep(LATCH, PartState.OPEN))
        steps.append(CascadeStep(FRONT_COVER, PartState.OPEN))
        return steps, None

    def _plan_close_cover(self) -> Tuple[List[CascadeStep], Optional[str]]:
        steps = [
            CascadeStep(p, PartState.CLOSED)
            for p in reversed(self._pages())
            if not self.is_settled(p, PartState.CLOSED)
        ]
        steps.append(CascadeStep(FRONT_COVER, PartState.CLOSED))
        if self._unsettled(LATCH, PartState.CLOSED):
            steps.append(CascadeStep(LATCH, PartState.CLOSED))
        return steps, None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _supersede(self, chain: CascadeChain) -> None:
        """Make chain the active one, halting the previous chain's playbacks"""
        previous, self._chain = self._chain, chain
        if previous is None:
            return

        previous.cancelled = True

        adoptable, direction = set(), None
        if chain.steps:
            first = chain.steps[0]
            adoptable = {clip.name for clip in self.clips_for(first.part)}
            direction = first.desired.direction
        for playback_id, clip_name in list(previous.pending.items()):
            playback = self.driver.get(clip_name)
            if playback is None or playback.playback_id != playback_id:
                continue
            if clip_name in adoptable and playback.direction is direction:
                self.completion_signal.discard(playback_id, notify=False)
                continue
            await self.driver.halt(clip_name)
        previous.pending.clear()

        log.debug(f"Chain {previous.id} superseded by chain {chain.id}")

    async def _advance(self, chain: CascadeChain) -> None:
        """Start the next step that still has work, or finish the chain"""
        while chain.steps:
            step = chain.steps.popleft()

            if self.is_settled(step.part, step.desired):
                log.debug(f"Step skipped, already settled: {step}", chain=chain.id)
                continue

            violation = self._guard(step)
            if violation is not None:
                await self._cancel(chain, f"{step}: {violation}")
                return

            await self._start_step(chain, step)
            return

        if self._chain is chain:
            self._chain = None
        chain.current = None
        log.info(f"Cascade finished: {chain.part.key} → {chain.desired.name}", chain=chain.id)
        await self.event_bus.publish(CascadeFinishedEvent(chain.id, chain.part, chain.desired))

    def _guard(self, step: CascadeStep) -> Optional[str]:
        """Reason the step would break the ordering invariants right now"""
        part, opening = step.part, step.desired is PartState.OPEN

        if part.is_page:
            pages = self._pages()
            if opening and self._closed_gates():
                return BOOK_CLOSED
            if any(self.store.is_open(p) for p in pages[part.index + 1:]):
                return CLOSE_LATER_PAGES
            if opening and not all(self.store.is_open(p) for p in pages[:part.index]):
                return "Earlier pages are not open"
            return None

        if part == FRONT_COVER:
            if opening and not self._recorded_open_or_absent(LATCH):
                return "Latch is not open"
            if not opening and any(self.store.is_open(p) for p in self._pages()):
                return "Pages are still open"
            return None

        if not opening and self.store.is_open(FRONT_COVER):
            return COVER_OPEN
        return None

    async def _start_step(self, chain: CascadeChain, step: CascadeStep) -> None:
        clips = self.clips_for(step.part)
        direction = step.desired.direction
        companions = self.library.ancillary_clips() if step.part == FRONT_COVER else []
        step_clip_names = {clip.name for clip in clips + companions}

        chain.current = step
        log.debug(f"Step started: {step}", chain=chain.id, clips=", ".join(c.name for c in clips))

        for clip in clips:
            playback = self.driver.get(clip.name)
            if playback is None or playback.direction is not direction:
                await self.resolver.resolve(clip.target_node_names(), exclude_clips=step_clip_names)
                playback = await self.driver.play(clip, direction)

            chain.pending[playback.playback_id] = clip.name
            self.completion_signal.once(
                playback.playback_id,
                partial(self._on_step_finished, chain),
                on_discarded=partial(self._on_step_discarded, chain)
            )

        # Cosmetic pairing with the cover; no state, no waiter
        for clip in companions:
            await self.resolver.resolve(clip.target_node_names(), exclude_clips=step_clip_names)
            await self.driver.play(clip, direction)

    async def _on_step_finished(self, chain: CascadeChain, playback: InFlightPlayback) -> None:
        chain.pending.pop(playback.playback_id, None)
        try:
            await self._record(playback)

            if chain.cancelled or self._chain is not chain or chain.pending:
                return
            await self._advance(chain)
        except Exception as e:
            log.error(f"Cascade step failed after {playback.clip_name}", error=str(e), exc_info=True)
            await self._cancel(chain, f"internal error: {e}")

    def _on_step_discarded(self, chain: CascadeChain, playback_id: int) -> None:
        """A step playback was halted from outside the chain"""
        clip_name = chain.pending.pop(playback_id, None)
        if chain.cancelled or clip_name is None:
            return

        chain.cancelled = True
        if self._chain is chain:
            self._chain = None
        log.warn(
            f"Cascade interrupted: {clip_name} was halted",
            chain=chain.id,
            request=f"{chain.part.key} → {chain.desired.name}"
        )

    async def _record(self, playback: InFlightPlayback) -> None:
        """Completion handler: the only writer of part state"""
        new_state = playback.direction.resulting_state
        for part in self.library.parts_for_clip(playback.clip_name):
            old_state = self.store.get(part)
            if self.store.record(part, new_state):
                await self.event_bus.publish(PartStateChangedEvent(part, old_state, new_state))

    async def _reject(self, part: Part, desired: PartState, reason: str) -> None:
        log.warn(f"Request rejected: {part.key} → {desired.name}", reason=reason)
        await self.event_bus.publish(TransitionRejectedEvent(part, desired, reason))

    async def _cancel(self, chain: CascadeChain, reason: str) -> None:
        chain.cancelled = True
        chain.steps.clear()
        if self._chain is chain:
            self._chain = None
        log.warn(
            f"Cascade cancelled: {chain.part.key} → {chain.desired.name}",
            chain=chain.id,
            reason=reason
        )
        await self.event_bus.publish(CascadeCancelledEvent(chain.id, chain.part, chain.desired, reason))

    # ------------------------------------------------------------------
    # Reload
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Forget the active chain (model reload); playbacks are cleared by the caller"""
        if self._chain is not None:
            self._chain.cancelled = True
            self._chain.steps.clear()
            self._chain.pending.clear()
        self._chain = None
