"""Fallback chain: the one place where provider failures are absorbed.

Each call goes to the primary provider under a timeout.  ``ProviderUnavailable``
or a timeout is logged at WARNING and the same call is answered by the
fallback provider, whose results carry lower confidence markers.  Any other
exception is a bug and propagates.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable, TypeVar

from fleetiq_simulator.errors import ProviderUnavailable
from fleetiq_simulator.models.results import (
    BatteryPrediction,
    DemandPrediction,
    FleetSummary,
    Insight,
    MaintenancePrediction,
)
from fleetiq_simulator.models.units import Drone, Vehicle
from fleetiq_simulator.providers.base import InsightProvider, PredictionProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FallbackChain:
    """Primary provider with a fallback, exposing both provider interfaces.

    ``prediction_fallback`` and ``insight_fallback`` must never raise
    ``ProviderUnavailable``; the rule-based providers satisfy that.
    """

    def __init__(
        self,
        predictions: PredictionProvider,
        prediction_fallback: PredictionProvider,
        insights: InsightProvider,
        insight_fallback: InsightProvider,
        timeout_s: float = 10.0,
    ) -> None:
        self.predictions = predictions
        self.prediction_fallback = prediction_fallback
        self.insights = insights
        self.insight_fallback = insight_fallback
        self.timeout_s = timeout_s

    @property
    def name(self) -> str:
        return self.predictions.name

    async def _call(
        self,
        label: str,
        primary_name: str,
        primary: Callable[[], Awaitable[T]],
        fallback: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            return await asyncio.wait_for(primary(), timeout=self.timeout_s)
        except (ProviderUnavailable, asyncio.TimeoutError) as exc:
            logger.warning(
                "%s provider %r unavailable (%s); using fallback",
                label, primary_name, str(exc) or type(exc).__name__,
            )
        return await fallback()

    # ── PredictionProvider ────────────────────────────────────────────────

    async def predict_maintenance(
        self,
        unit_id: str,
        usage_metric: float | None,
        health_metric: float | None,
        last_service: date | None,
    ) -> MaintenancePrediction:
        args = (unit_id, usage_metric, health_metric, last_service)
        return await self._call(
            "Maintenance", self.predictions.name,
            lambda: self.predictions.predict_maintenance(*args),
            lambda: self.prediction_fallback.predict_maintenance(*args),
        )

    async def predict_battery_life(self, unit: Vehicle | Drone) -> BatteryPrediction:
        return await self._call(
            "Battery", self.predictions.name,
            lambda: self.predictions.predict_battery_life(unit),
            lambda: self.prediction_fallback.predict_battery_life(unit),
        )

    async def predict_demand(self, hour: int, downtown: bool, weather_good: bool) -> DemandPrediction:
        return await self._call(
            "Demand", self.predictions.name,
            lambda: self.predictions.predict_demand(hour, downtown, weather_good),
            lambda: self.prediction_fallback.predict_demand(hour, downtown, weather_good),
        )

    # ── InsightProvider ───────────────────────────────────────────────────

    async def generate_insights(self, summary: FleetSummary) -> list[Insight]:
        return await self._call(
            "Insight", self.insights.name,
            lambda: self.insights.generate_insights(summary),
            lambda: self.insight_fallback.generate_insights(summary),
        )
