"""Simulation clock — three independent periodic schedules on one event loop.

  tick     every 4 s    FleetSimulation.tick
  alerts   every 10 s   FleetSimulation.evaluate_alerts
  trends   every 30 s   FleetSimulation.fold_trends

Each callback is synchronous and runs to completion; cancellation is only
delivered while a loop is sleeping, so a cancelled schedule never leaves a
partial tick behind.  A callback that raises is logged and the schedule keeps
running.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Literal

from fleetiq_simulator.config.clock import ClockConfig
from fleetiq_simulator.engine.fleet import FleetSimulation

logger = logging.getLogger(__name__)

Schedule = Literal["tick", "alerts", "trends"]
SCHEDULES: tuple[Schedule, ...] = ("tick", "alerts", "trends")


class SimulationClock:
    """Drives a ``FleetSimulation`` from asyncio tasks.

    Usage::

        clock = SimulationClock(fleet, ClockConfig())
        clock.start()              # inside a running event loop
        ...
        clock.cancel("alerts")     # stop one schedule
        await clock.stop()         # stop everything
    """

    def __init__(self, fleet: FleetSimulation, config: ClockConfig | None = None) -> None:
        self.fleet = fleet
        self.config = config or fleet.config.clock
        self._tasks: dict[Schedule, asyncio.Task] = {}

    @property
    def running(self) -> list[Schedule]:
        """Schedules whose task is still alive."""
        return [name for name, task in self._tasks.items() if not task.done()]

    def _schedule_spec(self, name: Schedule) -> tuple[float, Callable[[], object]]:
        if name == "tick":
            return self.config.tick_interval_s, self.fleet.tick
        if name == "alerts":
            return self.config.alert_interval_s, self.fleet.evaluate_alerts
        return self.config.trend_interval_s, self.fleet.fold_trends

    def start(self) -> None:
        """Start every schedule that is not already running."""
        for name in SCHEDULES:
            if name in self.running:
                continue
            interval, callback = self._schedule_spec(name)
            self._tasks[name] = asyncio.create_task(self._loop(name, interval, callback), name=f"fleet-{name}")
        logger.info(
            "Simulation clock started (tick=%.1fs alerts=%.1fs trends=%.1fs)",
            self.config.tick_interval_s, self.config.alert_interval_s, self.config.trend_interval_s,
        )

    def cancel(self, name: Schedule) -> None:
        """Cancel one schedule; the others keep running."""
        task = self._tasks.get(name)
        if task is not None and not task.done():
            task.cancel()
            logger.info("Schedule %s cancelled", name)

    async def stop(self) -> None:
        """Cancel all schedules and wait for their tasks to finish."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()
        logger.info("Simulation clock stopped")

    @staticmethod
    async def _loop(name: str, interval: float, callback: Callable[[], object]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                logger.exception("Scheduled %s callback failed", name)
