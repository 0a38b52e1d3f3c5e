"""Capability interfaces for prediction and insight providers.

Providers are advisory: their results are cached beside the fleet and never
written into unit fields.  Remote implementations signal failure by raising
``ProviderUnavailable``; ``FallbackChain`` turns that into a fallback answer.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable

from fleetiq_simulator.models.results import (
    BatteryPrediction,
    DemandPrediction,
    FleetSummary,
    Insight,
    MaintenancePrediction,
)
from fleetiq_simulator.models.units import Drone, Vehicle


@runtime_checkable
class PredictionProvider(Protocol):
    """Maintenance risk, battery life and demand predictions."""

    name: str

    async def predict_maintenance(
        self,
        unit_id: str,
        usage_metric: float | None,
        health_metric: float | None,
        last_service: date | None,
    ) -> MaintenancePrediction: ...

    async def predict_battery_life(self, unit: Vehicle | Drone) -> BatteryPrediction: ...

    async def predict_demand(self, hour: int, downtown: bool, weather_good: bool) -> DemandPrediction: ...


@runtime_checkable
class InsightProvider(Protocol):
    """Fleet-level recommendations from a compact fleet summary."""

    name: str

    async def generate_insights(self, summary: FleetSummary) -> list[Insight]: ...
