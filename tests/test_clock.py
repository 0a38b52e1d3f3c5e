"""Tests for engine/clock.py — asyncio schedules driving the fleet.

Covers:
  - All three schedules fire at their own cadence
  - Cancelling one schedule leaves the others running
  - stop() tears everything down
  - A failing callback is logged and its schedule keeps going
"""

from __future__ import annotations

import asyncio
import logging

from fleetiq_simulator.config.clock import ClockConfig
from fleetiq_simulator.engine.clock import SimulationClock

FAST = ClockConfig(tick_interval_s=0.01, alert_interval_s=0.02, trend_interval_s=0.04)


class CountingFleet:
    """Stands in for FleetSimulation; counts scheduled calls."""

    def __init__(self, fail_ticks: bool = False) -> None:
        self.counts = {"tick": 0, "alerts": 0, "trends": 0}
        self.fail_ticks = fail_ticks

    def tick(self):
        self.counts["tick"] += 1
        if self.fail_ticks:
            raise RuntimeError("tick exploded")

    def evaluate_alerts(self):
        self.counts["alerts"] += 1

    def fold_trends(self):
        self.counts["trends"] += 1


class TestSimulationClock:

    def test_all_schedules_fire(self):
        fleet = CountingFleet()

        async def scenario():
            clock = SimulationClock(fleet, FAST)
            clock.start()
            assert sorted(clock.running) == ["alerts", "tick", "trends"]
            await asyncio.sleep(0.3)
            await clock.stop()
            assert clock.running == []

        asyncio.run(scenario())
        assert fleet.counts["tick"] > fleet.counts["alerts"] > fleet.counts["trends"] >= 1

    def test_cancel_one_schedule(self):
        fleet = CountingFleet()

        async def scenario():
            clock = SimulationClock(fleet, FAST)
            clock.start()
            await asyncio.sleep(0.1)
            clock.cancel("alerts")
            await asyncio.sleep(0)
            frozen = fleet.counts["alerts"]
            ticks = fleet.counts["tick"]
            await asyncio.sleep(0.1)
            assert fleet.counts["alerts"] == frozen
            assert fleet.counts["tick"] > ticks
            assert "alerts" not in clock.running
            await clock.stop()

        asyncio.run(scenario())

    def test_nothing_fires_after_stop(self):
        fleet = CountingFleet()

        async def scenario():
            clock = SimulationClock(fleet, FAST)
            clock.start()
            await asyncio.sleep(0.05)
            await clock.stop()
            snapshot = dict(fleet.counts)
            await asyncio.sleep(0.1)
            assert fleet.counts == snapshot

        asyncio.run(scenario())

    def test_start_is_idempotent(self):
        fleet = CountingFleet()

        async def scenario():
            clock = SimulationClock(fleet, FAST)
            clock.start()
            first = dict(clock._tasks)
            clock.start()
            assert clock._tasks == first
            await clock.stop()

        asyncio.run(scenario())

    def test_failing_callback_keeps_schedule_alive(self, caplog):
        fleet = CountingFleet(fail_ticks=True)

        async def scenario():
            clock = SimulationClock(fleet, FAST)
            clock.start()
            await asyncio.sleep(0.1)
            assert "tick" in clock.running
            await clock.stop()

        with caplog.at_level(logging.ERROR, logger="fleetiq_simulator.engine.clock"):
            asyncio.run(scenario())
        assert fleet.counts["tick"] >= 2
        assert "Scheduled tick callback failed" in caplog.text
