"""
Tick driver: the periodic time source that advances the engine.
A SimPy environment stands in for wall-clock time so the same loop runs
headless (as fast as possible) or paced against the real clock.
"""

import logging
from typing import Callable, Optional
import simpy
import config
from bank_queue.engine import SimulationEngine
from bank_queue.errors import DegenerateAdvanceError, check_rate
from bank_queue.snapshot import Snapshot

logger = logging.getLogger(__name__)


class TickDriver:
    """Owns the run/pause state and feeds scaled elapsed time to the engine."""

    def __init__(
        self,
        engine: Optional[SimulationEngine] = None,
        tick_interval: float = config.TICK_INTERVAL,
        realtime: bool = False,
        on_snapshot: Optional[Callable[[Snapshot], None]] = None,
    ):
        """Initialize driver.

        Args:
            engine: Engine to drive, a default-configured one if None
            tick_interval: Wall-clock seconds between ticks
            realtime: Pace ticks against the real clock
            on_snapshot: Renderer callback receiving every tick's snapshot
        """
        self.engine = engine if engine is not None else SimulationEngine()
        self.tick_interval = check_rate("tick_interval", tick_interval)
        self.on_snapshot = on_snapshot
        self.running = False

        if realtime:
            self.env = simpy.RealtimeEnvironment(factor=1.0, strict=False)
        else:
            self.env = simpy.Environment()

        self._loop = None
        self.last_snapshot = self.engine.snapshot()

    @property
    def speed(self) -> float:
        return self.engine.speed_multiplier

    def start(self):
        self.running = True

    def pause(self):
        self.running = False

    def toggle(self) -> bool:
        """Flip between running and paused.

        Returns:
            New running state
        """
        self.running = not self.running
        return self.running

    def reset(self):
        """Pause and restart the engine with its current rates."""
        self.running = False
        self.engine.reset()
        self.last_snapshot = self.engine.snapshot()
        self._emit(self.last_snapshot)

    def set_speed(self, multiplier: float):
        self.engine.reconfigure(speed_multiplier=multiplier)

    def set_rates(self, arrival_rate: Optional[float] = None, service_rate: Optional[float] = None):
        self.engine.reconfigure(arrival_rate=arrival_rate, service_rate=service_rate)

    def tick(self, real_delta: float) -> Snapshot:
        """Handle one tick of elapsed wall-clock time.

        While paused the elapsed time is discarded, so resuming never
        produces a catch-up jump.

        Args:
            real_delta: Wall-clock seconds since the previous tick

        Returns:
            Snapshot after the tick
        """
        if not real_delta >= 0:
            raise DegenerateAdvanceError(real_delta)

        if self.running:
            self.last_snapshot = self.engine.advance(real_delta * self.engine.speed_multiplier)
        else:
            self.last_snapshot = self.engine.snapshot()
        self._emit(self.last_snapshot)
        return self.last_snapshot

    def _emit(self, snapshot: Snapshot):
        if self.on_snapshot is not None:
            self.on_snapshot(snapshot)

    def tick_process(self):
        """SimPy process: tick every tick_interval of wall-clock time."""
        last = self.env.now
        while True:
            yield self.env.timeout(self.tick_interval)
            now = self.env.now
            self.tick(now - last)
            last = now

    def run(self, real_seconds: float) -> Snapshot:
        """Drive the engine for a span of wall-clock time.

        Args:
            real_seconds: Wall-clock seconds to run for

        Returns:
            Snapshot at the end of the span
        """
        if self._loop is None:
            self._loop = self.env.process(self.tick_process())
        until = self.env.now + real_seconds
        logger.info(
            "Driving engine for %.2f s at speed x%.0f (running=%s)",
            real_seconds, self.speed, self.running,
        )
        self.env.run(until=until)
        return self.last_snapshot
