"""State transition engine — one transition per unit per tick.

Vehicles, by status:

  charging     battery  += U[1, 4)           capped at 100
               efficiency = max(85, e − U[0, 2))
               revenue unchanged
               battery ≥ 95 → active (same tick), "charging complete"

  active       battery  −= U[0.5, 2.0)       floored at 5
               passenger → revenue += U[2, 5), 10% "ride completed"
                           (fare sampled separately, display only)
               no passenger → revenue += U[0, 0.5)
               efficiency = U[85, 100)
               battery < 25 → 30% chance: charging, "routed to charging"

  maintenance  untouched

Drones: only while active, battery −= U[0.5, 2.5) floored at 10 and
efficiency = U[80, 100).  No revenue, no automatic status changes.

Each unit's next state depends only on its own prior state and fresh draws,
so processing order never changes outcomes.  New values are computed into
locals and committed at the end, so a unit that fails mid-step is left as it
was.

Draw order for an active vehicle (matters for scripted test generators):
  drain, revenue increment, [ride roll, ride fare], efficiency, [route roll]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Literal

from fleetiq_simulator.config.transitions import TransitionConfig
from fleetiq_simulator.engine.rng import RandomSource
from fleetiq_simulator.models.units import Drone, Vehicle

logger = logging.getLogger(__name__)

EventKind = Literal["charging_complete", "ride_completed", "routed_to_charging"]


# ═══════════════════════════════════════════════════════════════════════════
# Step results
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransitionEvent:
    """Notification side-effect of one unit transition."""

    kind: EventKind
    unit_id: str
    battery: float
    amount: float | None = None
    """Ride fare for ``ride_completed``; display only, never added to revenue."""

    @property
    def icon(self) -> str:
        return {"charging_complete": "⚡", "ride_completed": "💰", "routed_to_charging": "🔌"}[self.kind]

    @property
    def category(self) -> str:
        return "info" if self.kind == "routed_to_charging" else "success"

    @property
    def message(self) -> str:
        if self.kind == "charging_complete":
            return f"{self.unit_id} charging complete ({round(self.battery)}%)"
        if self.kind == "ride_completed":
            return f"{self.unit_id} completed ride (${self.amount:.2f})"
        return f"{self.unit_id} routed to charging station ({round(self.battery)}%)"


@dataclass(frozen=True)
class TickReport:
    """Immutable outcome of one tick over the whole fleet."""

    processed: int
    """Units stepped successfully."""

    events: list[TransitionEvent] = field(default_factory=list)
    """Notifications in unit processing order."""

    skipped: list[str] = field(default_factory=list)
    """Ids of units whose step raised and were left unchanged."""


# ═══════════════════════════════════════════════════════════════════════════
# Per-unit steps
# ═══════════════════════════════════════════════════════════════════════════

def step_vehicle(
    vehicle: Vehicle,
    cfg: TransitionConfig,
    rng: RandomSource,
    now: datetime,
) -> list[TransitionEvent]:
    """Advance one vehicle by one tick, in place. Returns its notifications."""
    if vehicle.status == "charging":
        return _step_charging(vehicle, cfg, rng, now)
    if vehicle.status == "active":
        return _step_active(vehicle, cfg, rng, now)
    return []


def _step_charging(vehicle: Vehicle, cfg: TransitionConfig, rng: RandomSource, now: datetime) -> list[TransitionEvent]:
    battery = min(100.0, vehicle.battery + rng.uniform(cfg.charge_rate_min, cfg.charge_rate_max))
    efficiency = max(
        cfg.charging_efficiency_floor,
        vehicle.efficiency - rng.uniform(0.0, cfg.charging_efficiency_loss_max),
    )

    events: list[TransitionEvent] = []
    status = vehicle.status
    if battery >= cfg.charge_complete_pct:
        status = "active"
        events.append(TransitionEvent("charging_complete", vehicle.id, battery))

    vehicle.battery = float(battery)
    vehicle.efficiency = float(efficiency)
    if status != vehicle.status:
        vehicle.status = status
        vehicle.last_charge_time = now
        vehicle.charging_start_time = None
    return events


def _step_active(vehicle: Vehicle, cfg: TransitionConfig, rng: RandomSource, now: datetime) -> list[TransitionEvent]:
    events: list[TransitionEvent] = []

    drain = rng.uniform(cfg.vehicle_drain_min, cfg.vehicle_drain_max)
    battery = max(cfg.vehicle_battery_floor, vehicle.battery - drain)

    if vehicle.passenger:
        revenue = vehicle.revenue + rng.uniform(cfg.fare_min, cfg.fare_max)
        if rng.random() < cfg.ride_complete_probability:
            fare = float(rng.uniform(cfg.fare_min, cfg.fare_max))
            events.append(TransitionEvent("ride_completed", vehicle.id, battery, amount=fare))
    else:
        revenue = vehicle.revenue + rng.uniform(0.0, cfg.idle_revenue_max)

    efficiency = rng.uniform(cfg.vehicle_efficiency_min, cfg.vehicle_efficiency_max)

    status = vehicle.status
    if battery < cfg.low_battery_pct and rng.random() < cfg.route_to_charging_probability:
        status = "charging"
        events.append(TransitionEvent("routed_to_charging", vehicle.id, battery))

    vehicle.battery = float(battery)
    vehicle.revenue = float(revenue)
    vehicle.efficiency = float(efficiency)
    if status != vehicle.status:
        vehicle.status = status
        vehicle.charging_start_time = now
    return events


def step_drone(drone: Drone, cfg: TransitionConfig, rng: RandomSource) -> list[TransitionEvent]:
    """Advance one drone by one tick, in place. Drones emit no notifications."""
    if drone.status != "active":
        return []
    battery = max(cfg.drone_battery_floor, drone.battery - rng.uniform(cfg.drone_drain_min, cfg.drone_drain_max))
    efficiency = rng.uniform(cfg.drone_efficiency_min, cfg.drone_efficiency_max)
    drone.battery = float(battery)
    drone.efficiency = float(efficiency)
    return []


# ═══════════════════════════════════════════════════════════════════════════
# Whole-fleet tick
# ═══════════════════════════════════════════════════════════════════════════

def apply_tick(
    units: Iterable[Vehicle | Drone],
    cfg: TransitionConfig,
    rng: RandomSource,
    now: datetime,
) -> TickReport:
    """Step every unit once.

    A unit whose step raises is logged and skipped; the remaining units are
    still processed.  With ``cfg.strict`` the error propagates instead.
    """
    events: list[TransitionEvent] = []
    skipped: list[str] = []
    processed = 0

    for unit in units:
        try:
            if unit.kind == "vehicle":
                events.extend(step_vehicle(unit, cfg, rng, now))
            else:
                events.extend(step_drone(unit, cfg, rng))
        except Exception:
            if cfg.strict:
                raise
            logger.exception("Skipping unit %s: transition failed", getattr(unit, "id", "?"))
            skipped.append(getattr(unit, "id", "?"))
            continue
        processed += 1

    logger.debug("Tick processed %d units, %d events, %d skipped", processed, len(events), len(skipped))
    return TickReport(processed=processed, events=events, skipped=skipped)
