"""
RenderLoop — periodic tick driving all in-flight playbacks.

Each tick advances the playback driver by a delta (fixed, or measured
wall-clock when fixed_delta is None). Completion Signals and every
cascade continuation run inside the tick; nothing in the loop waits on
a playback.

Supports pause/step/FPS control for debugging.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Deque, Dict, Optional

from lifecycle.task_registry import create_tracked_task, TaskCategory
from models.domain.config import RenderLoopConfig
from services.playback_driver import PlaybackDriver
from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.RENDER_LOOP)


class RenderLoop:

    def __init__(self, driver: PlaybackDriver, config: Optional[RenderLoopConfig] = None):
        """
        Args:
            driver: Playback driver advanced on every tick
            config: fps (1-240) and fixed_delta (seconds per tick or None)
        """
        config = config or RenderLoopConfig()
        self.driver = driver
        self.fps = max(1, min(config.fps, 240))
        self.fixed_delta = config.fixed_delta

        # Runtime state
        self.running = False
        self.paused = False
        self.step_requested = False
        self.render_task: Optional[asyncio.Task] = None

        # Timing & performance metrics
        self.last_tick_time = time.perf_counter()
        self.tick_times: Deque[float] = deque(maxlen=300)
        self.ticks = 0
        self.completions = 0
        self.errors = 0

        log.info("RenderLoop initialized", fps=self.fps, fixed_delta=self.fixed_delta)

    # === Control API ===

    def pause(self) -> None: self.paused = True

    def resume(self) -> None: self.paused = False

    def step_frame(self) -> None: self.step_requested = True

    def set_fps(self, fps: int) -> None:
        """Change FPS at runtime."""
        self.fps = max(1, min(fps, 240))
        log.info(f"RenderLoop FPS set to {self.fps}")

    # === Lifecycle ===

    async def start(self) -> None:
        """Start the tick loop."""
        if self.running:
            log.warn("RenderLoop already running")
            return

        self.running = True
        self.last_tick_time = time.perf_counter()
        self.render_task = create_tracked_task(
            self._render_loop(),
            category=TaskCategory.RENDER,
            description="RenderLoop: playback tick"
        )
        log.info(f"RenderLoop started @ {self.fps} FPS")

    async def stop(self) -> None:
        """Stop the tick loop."""
        if not self.running:
            return
        self.running = False
        if self.render_task:
            self.render_task.cancel()
            try:
                await self.render_task
            except asyncio.CancelledError:
                pass
            self.render_task = None

        log.info("RenderLoop stopped", ticks=self.ticks, completions=self.completions)

    # === Tick ===

    async def tick(self, delta: Optional[float] = None) -> int:
        """
        Advance playbacks once.

        Args:
            delta: Seconds to advance; defaults to fixed_delta, or the wall
                   clock time since the previous tick

        Returns:
            Number of completions fired
        """
        now = time.perf_counter()
        if delta is None:
            delta = self.fixed_delta if self.fixed_delta is not None else now - self.last_tick_time
        self.last_tick_time = now

        fired = await self.driver.tick(delta)
        self.ticks += 1
        self.completions += fired
        self.tick_times.append(now)
        return fired

    async def _render_loop(self) -> None:
        """Main loop @ target FPS."""
        log.info(f"Render loop @ {self.fps} FPS (delay={1000 / self.fps:.2f}ms)")

        while self.running:
            if self.paused and not self.step_requested:
                # Paused time does not count into the next measured delta
                self.last_tick_time = time.perf_counter()
                await asyncio.sleep(0.01)
                continue

            try:
                await self.tick()
            except Exception as e:
                self.errors += 1
                log.error(f"Tick error: {e}", exc_info=True)

            self.step_requested = False
            await asyncio.sleep(1.0 / self.fps)

    # === Metrics ===

    def get_actual_fps(self) -> float:
        """Measured FPS over recent ticks."""
        if len(self.tick_times) < 2:
            return 0.0
        duration = self.tick_times[-1] - self.tick_times[0]
        if duration <= 0:
            return 0.0
        return (len(self.tick_times) - 1) / duration

    def get_metrics(self) -> Dict:
        return {
            "running": self.running,
            "paused": self.paused,
            "fps_target": self.fps,
            "fps_actual": self.get_actual_fps(),
            "fixed_delta": self.fixed_delta,
            "ticks": self.ticks,
            "completions": self.completions,
            "errors": self.errors,
            "in_flight": len(self.driver.active()),
        }

    def __repr__(self) -> str:
        metrics = self.get_metrics()
        return (
            f"RenderLoop(fps={metrics['fps_actual']:.1f}/{metrics['fps_target']}, "
            f"ticks={metrics['ticks']}, completions={metrics['completions']})"
        )
