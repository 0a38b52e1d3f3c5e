"""Shared test fixtures — scripted randomness, fixed clock, small fleets."""

from __future__ import annotations

from collections import deque
from datetime import date, datetime, timezone

import pytest

from fleetiq_simulator.config import AlertConfig, FleetConfig, ProviderConfig, TransitionConfig
from fleetiq_simulator.engine.fleet import FleetSimulation
from fleetiq_simulator.models.units import Drone, Location, Vehicle

FIXED_NOW = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)


class ScriptedRandom:
    """Random source that replays queued fractions in [0, 1).

    ``uniform(low, high)`` returns ``low + f × (high − low)``, ``random()``
    returns ``f`` and ``integers(low, high)`` returns ``low + int(f × (high − low))``.
    Once the queue is empty every draw uses ``default``.
    """

    def __init__(self, *fractions: float, default: float = 0.5) -> None:
        self.queue: deque[float] = deque(fractions)
        self.default = default
        self.calls: list[str] = []

    def _next(self, kind: str) -> float:
        self.calls.append(kind)
        return self.queue.popleft() if self.queue else self.default

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return low + self._next("uniform") * (high - low)

    def random(self) -> float:
        return self._next("random")

    def integers(self, low: int, high: int) -> int:
        return low + int(self._next("integers") * (high - low))


class ExplodingRandom(ScriptedRandom):
    """Raises on the ``fail_on``-th draw (1-based)."""

    def __init__(self, fail_on: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.fail_on = fail_on

    def _next(self, kind: str) -> float:
        if len(self.calls) + 1 == self.fail_on:
            self.calls.append(kind)
            raise RuntimeError("sensor glitch")
        return super()._next(kind)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def transitions() -> TransitionConfig:
    return TransitionConfig(strict=True)


@pytest.fixture
def alert_config() -> AlertConfig:
    return AlertConfig(stagger_timestamps=False)


def make_vehicle(
    unit_id: str = "CAB-001",
    status: str = "active",
    battery: float = 80.0,
    efficiency: float = 90.0,
    revenue: float = 10.0,
    passenger: str | None = None,
    mileage: int = 40_000,
) -> Vehicle:
    return Vehicle(
        id=unit_id,
        type="Tesla Model 3",
        status=status,
        battery=battery,
        location=Location(lat=34.05, lng=-118.24, address="Downtown LA"),
        efficiency=efficiency,
        revenue=revenue,
        passenger=passenger,
        mileage=mileage,
        last_service=date(2025, 5, 1),
    )


def make_drone(
    unit_id: str = "DRN-001",
    status: str = "active",
    battery: float = 60.0,
    efficiency: float = 90.0,
    flight_hours: int = 100,
) -> Drone:
    return Drone(
        id=unit_id,
        type="Delivery Quad",
        status=status,
        battery=battery,
        location=Location(lat=34.02, lng=-118.41, address="Culver City"),
        efficiency=efficiency,
        flight_hours=flight_hours,
        last_service=date(2025, 5, 1),
    )


@pytest.fixture
def fleet_config() -> FleetConfig:
    return FleetConfig(
        transitions=TransitionConfig(strict=True),
        alerts=AlertConfig(stagger_timestamps=False),
        provider=ProviderConfig(mode="fallback"),
        random_seed=42,
    )


@pytest.fixture
def fleet(fleet_config) -> FleetSimulation:
    """Seeded demo fleet on the rule-based providers with a fixed clock."""
    return FleetSimulation(fleet_config, now_fn=lambda: FIXED_NOW)


@pytest.fixture
def empty_fleet(fleet_config) -> FleetSimulation:
    cfg = fleet_config.model_copy(update={"seed_fleet": False})
    return FleetSimulation(cfg, now_fn=lambda: FIXED_NOW)
