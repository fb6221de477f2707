"""Task registry, shutdown coordination and the render loop"""

import asyncio
import pytest

from engine.render_loop import RenderLoop
from lifecycle import ShutdownCoordinator, TaskCategory, TaskRegistry, create_tracked_task
from lifecycle.handlers import AllTasksCancellationHandler, PlaybackShutdownHandler
from models.domain.config import RenderLoopConfig
from models.domain.part import LATCH
from models.enums import PartState


@pytest.fixture(autouse=True)
def registry():
    TaskRegistry.reset_instance()
    yield TaskRegistry.instance()
    TaskRegistry.reset_instance()


class Handler:

    def __init__(self, name, priority, calls, action=None):
        self.name = name
        self.shutdown_priority = priority
        self.calls = calls
        self.action = action

    async def shutdown(self):
        self.calls.append(self.name)
        if self.action:
            await self.action()


async def fail():
    raise RuntimeError("render crashed")


@pytest.mark.asyncio
async def test_registry_tracks_outcomes(registry):
    done = create_tracked_task(asyncio.sleep(0), category=TaskCategory.GENERAL, description="done")
    failed = create_tracked_task(fail(), category=TaskCategory.RENDER, description="render")
    sleeper = create_tracked_task(asyncio.sleep(10), category=TaskCategory.BACKGROUND, description="sleeper")

    await asyncio.wait([done, failed], timeout=1)
    sleeper.cancel()
    await asyncio.wait([sleeper], timeout=1)

    assert registry.get_stats() == {"total": 3, "active": 0, "failed": 1, "cancelled": 1}
    assert [r.to_dict()["status"] for r in sorted(registry.list_all(), key=lambda r: r.info.id)] == [
        "completed", "failed", "cancelled"
    ]
    assert registry.by_category(TaskCategory.RENDER)[0].task is failed
    assert registry.get_record(failed).to_dict()["error"] == "render crashed"


@pytest.mark.asyncio
async def test_request_shutdown_releases_waiter():
    coordinator = ShutdownCoordinator(poll_interval=0.01)
    waiter = asyncio.create_task(coordinator.wait_for_shutdown())
    await asyncio.sleep(0.02)
    assert not waiter.done()

    coordinator.request_shutdown("test")
    await asyncio.wait_for(waiter, timeout=1)
    assert coordinator.reason == "test"


@pytest.mark.asyncio
async def test_critical_task_failure_triggers_shutdown():
    coordinator = ShutdownCoordinator(poll_interval=0.01)
    create_tracked_task(fail(), category=TaskCategory.RENDER, description="RenderLoop")

    await asyncio.wait_for(coordinator.wait_for_shutdown(), timeout=1)
    assert coordinator.reason.startswith("Task failure: RenderLoop")


@pytest.mark.asyncio
async def test_handlers_run_in_priority_order_despite_failures():
    calls = []

    async def broken():
        raise RuntimeError("handler bug")

    async def hang():
        await asyncio.sleep(10)

    coordinator = ShutdownCoordinator(timeout_per_handler=0.05)
    coordinator.register(Handler("low", 10, calls))
    coordinator.register(Handler("hang", 50, calls, hang))
    coordinator.register(Handler("broken", 90, calls, broken))

    with pytest.raises(ValueError):
        coordinator.register(object())

    await coordinator.shutdown_all()
    assert calls == ["broken", "hang", "low"]
    assert coordinator.get_handler(Handler).name == "low"


@pytest.mark.asyncio
async def test_cancellation_handler_spares_excluded_tasks(registry):
    keep = create_tracked_task(asyncio.sleep(10), category=TaskCategory.API, description="api")
    drop = create_tracked_task(asyncio.sleep(10), category=TaskCategory.BACKGROUND, description="worker")

    await AllTasksCancellationHandler(exclude_tasks=[keep], grace=0.5).shutdown()

    assert drop.cancelled()
    assert not keep.done()
    keep.cancel()
    await asyncio.wait([keep], timeout=1)


@pytest.mark.asyncio
async def test_render_loop_ticks_drive_cascades(book):
    loop = RenderLoop(book.driver, RenderLoopConfig(fps=60, fixed_delta=0.1))
    await book.request(LATCH, PartState.OPEN, settle=False)

    fired = 0
    for _ in range(9):
        fired += await loop.tick()

    assert fired == 1
    assert book.store.is_open(LATCH)
    assert loop.get_metrics()["ticks"] == 9
    assert loop.get_metrics()["completions"] == 1


@pytest.mark.asyncio
async def test_render_loop_start_stop(book, registry):
    loop = RenderLoop(book.driver, RenderLoopConfig(fps=240, fixed_delta=0.1))
    await loop.start()
    await book.request(LATCH, PartState.OPEN, settle=False)
    await asyncio.sleep(0.5)
    await loop.stop()

    assert not loop.running
    assert loop.ticks > 0
    assert registry.by_category(TaskCategory.RENDER)[0].cancelled
    assert book.state_changes() == [(LATCH, PartState.OPEN)]


@pytest.mark.asyncio
async def test_playback_handler_halts_everything(book):
    await book.request(LATCH, PartState.OPEN, settle=False)
    await book.tick(3)

    await PlaybackShutdownHandler(book.machine, book.driver).shutdown()

    assert book.driver.active() == []
    assert book.machine.active_chain is None
    assert book.store.get(LATCH) is PartState.CLOSED
