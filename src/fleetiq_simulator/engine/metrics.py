"""Metrics aggregator.

Pure function of the unit collection:
  active_vehicles    = vehicles with status == active
  total_revenue      = Σ vehicle revenue (drones excluded)
  average_efficiency = mean vehicle efficiency (0 with no vehicles)
  active_alerts      = length of the latest generated alert list
"""

from __future__ import annotations

from typing import Iterable

from fleetiq_simulator.models.results import FleetSnapshot
from fleetiq_simulator.models.units import Drone, Vehicle


def compute_snapshot(units: Iterable[Vehicle | Drone], alert_count: int) -> FleetSnapshot:
    """Aggregate fleet metrics from current unit state."""
    vehicles = [u for u in units if u.kind == "vehicle"]

    active = sum(1 for v in vehicles if v.status == "active")
    revenue = sum(v.revenue for v in vehicles)
    efficiency = sum(v.efficiency for v in vehicles) / len(vehicles) if vehicles else 0.0

    return FleetSnapshot(
        active_vehicles=active,
        total_revenue=float(revenue),
        average_efficiency=float(efficiency),
        active_alerts=alert_count,
    )
