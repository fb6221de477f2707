"""Mixer, playback driver, completion signal and conflict resolver"""

import pytest
from unittest.mock import MagicMock

from engine.animation_mixer import AnimationMixer
from models.enums import PartState, PlaybackDirection
from models.events import EventType
from services.completion_signal import CompletionSignal
from services.conflict_resolver import ConflictResolver
from services.event_bus import EventBus
from services.playback_driver import PlaybackDriver

from conftest import make_clip

FORWARD, REVERSE = PlaybackDirection.FORWARD, PlaybackDirection.REVERSE


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def signal(bus):
    return CompletionSignal(bus)


@pytest.fixture
def driver(bus, signal):
    return PlaybackDriver(AnimationMixer(), signal, bus)


def test_mixer_clamps_at_both_ends():
    mixer = AnimationMixer()
    clip = make_clip("page_1_turn", 1.0, "page_1.quaternion")

    mixer.start_playback(clip, 0.0, FORWARD)
    assert mixer.update(0.6) == []
    finished = mixer.update(0.6)
    assert [(f.clip_name, f.direction) for f in finished] == [("page_1_turn", FORWARD)]
    assert mixer.position("page_1_turn") == 1.0
    assert mixer.update(0.6) == []

    mixer.start_playback(clip, 1.0, REVERSE)
    mixer.update(0.5)
    assert mixer.halt_playback("page_1_turn") == pytest.approx(0.5)
    assert mixer.update(1.0) == []
    assert mixer.position("page_1_turn") == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_forward_and_reverse_start_at_their_ends(driver):
    clip = make_clip("latch_open", 0.8, "latch.quaternion")

    forward = await driver.play(clip, FORWARD)
    assert forward.start_time == 0.0

    await driver.tick(1.0)
    assert driver.at_rest(clip, PartState.OPEN)

    reverse = await driver.play(clip, REVERSE)
    assert reverse.start_time == 0.8
    assert reverse.playback_id != forward.playback_id


@pytest.mark.asyncio
async def test_completion_fires_once_with_direction(driver, signal):
    clip = make_clip("page_1_turn", 1.0, "page_1.quaternion")
    finished = []

    playback = await driver.play(clip, FORWARD)
    signal.once(playback.playback_id, finished.append)

    assert await driver.tick(0.5) == 0
    assert await driver.tick(0.5) == 1
    assert await driver.tick(0.5) == 0

    assert [(p.clip_name, p.direction) for p in finished] == [("page_1_turn", FORWARD)]
    assert not signal.has_waiter(playback.playback_id)
    assert not driver.is_playing("page_1_turn")
    assert driver.completed == 1


@pytest.mark.asyncio
async def test_superseded_playback_never_completes(driver, signal):
    clip = make_clip("page_1_turn", 1.0, "page_1.quaternion")
    finished = []
    discarded = MagicMock()

    first = await driver.play(clip, FORWARD)
    signal.once(first.playback_id, finished.append, on_discarded=discarded)
    await driver.tick(0.4)

    second = await driver.play(clip, REVERSE)
    discarded.assert_called_once_with(first.playback_id)
    assert second.start_time == pytest.approx(0.4)

    await driver.tick(1.0)
    assert finished == []
    assert driver.position("page_1_turn") == 0.0


@pytest.mark.asyncio
async def test_halt_keeps_pose_and_publishes(driver, bus):
    clip = make_clip("front_cover_open", 1.6, "front_cover.quaternion")
    halted = []
    bus.subscribe(EventType.PLAYBACK_HALTED, halted.append)

    await driver.play(clip, FORWARD)
    await driver.tick(0.8)
    playback = await driver.halt("front_cover_open")

    assert playback is not None
    assert halted[0].position == pytest.approx(0.8)
    assert await driver.halt("front_cover_open") is None
    assert not driver.at_rest(clip, PartState.OPEN)
    assert not driver.at_rest(clip, PartState.CLOSED)
    assert driver.resume_position(clip, FORWARD) == pytest.approx(0.8)


@pytest.mark.asyncio
async def test_resolver_halts_overlapping_playbacks_only(driver):
    cover = make_clip("front_cover_open", 1.0, "front_cover.quaternion", "spline.scale")
    spline = make_clip("spline_bend", 1.0, "spline.morphTargetInfluences")
    page = make_clip("page_1_turn", 1.0, "page_1.quaternion")
    resolver = ConflictResolver(driver)

    await driver.play(spline, FORWARD)
    await driver.play(page, FORWARD)

    assert [p.clip_name for p in resolver.conflicts(cover.target_node_names())] == ["spline_bend"]
    assert await resolver.resolve(cover.target_node_names(), exclude_clips={"spline_bend"}) == []

    halted = await resolver.resolve(cover.target_node_names())
    assert [p.clip_name for p in halted] == ["spline_bend"]
    assert driver.is_playing("page_1_turn")
    assert not driver.is_playing("spline_bend")


@pytest.mark.asyncio
async def test_clear_drops_waiters_silently(driver, signal):
    clip = make_clip("latch_open", 0.8, "latch.quaternion")
    discarded = MagicMock()

    playback = await driver.play(clip, FORWARD)
    signal.once(playback.playback_id, lambda p: None, on_discarded=discarded)
    driver.clear()

    discarded.assert_not_called()
    assert signal.pending_count() == 0
    assert driver.active() == []
    assert driver.position("latch_open") is None
