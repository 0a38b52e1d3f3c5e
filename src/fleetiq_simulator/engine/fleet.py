"""Fleet simulation context — the single owner of mutable fleet state.

One ``FleetSimulation`` holds the units, the latest alert list, the trend
baseline, the activity feed and the prediction cache.  Every mutating method
is synchronous and runs to completion, so on a single event loop a tick,
an alert pass, a trend fold and an API mutation never interleave.  The async
methods only await provider calls; their results go into the prediction cache
and never into unit fields.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable

from pydantic import TypeAdapter

from fleetiq_simulator.config.fleet import FleetConfig
from fleetiq_simulator.engine import actions
from fleetiq_simulator.engine.activity import ActivityFeed
from fleetiq_simulator.engine.alerts import generate_alerts, most_recent_first
from fleetiq_simulator.engine.metrics import compute_snapshot
from fleetiq_simulator.engine.rng import RandomSource, make_rng
from fleetiq_simulator.engine.transitions import TickReport, apply_tick
from fleetiq_simulator.engine.trends import TrendTracker
from fleetiq_simulator.engine.units import create_unit, seed_drones, seed_vehicles
from fleetiq_simulator.errors import UnitNotFoundError, UnknownQuickActionError
from fleetiq_simulator.models.results import (
    ActivityItem,
    Alert,
    DemandPrediction,
    FleetSnapshot,
    FleetSummary,
    HistoricalBaseline,
    Insight,
    MaintenancePrediction,
    QuickActionResult,
    TrendPercentages,
    UnitPrediction,
)
from fleetiq_simulator.models.units import Drone, NewUnitRequest, UnitKind, Vehicle
from fleetiq_simulator.providers import build_providers
from fleetiq_simulator.providers.base import InsightProvider, PredictionProvider
from fleetiq_simulator.providers.fallback import HIGH_RISK_SCORE, usage_metric

logger = logging.getLogger(__name__)

_UNIT_KIND = TypeAdapter(UnitKind)

LOW_BATTERY_INSIGHT_PCT = 40


def local_now() -> datetime:
    """Timezone-aware local time."""
    return datetime.now().astimezone()


class FleetSimulation:
    """Injectable fleet state plus the operations that read and mutate it.

    Args:
        config: Settings bundle; defaults to ``FleetConfig()``.
        rng: Random source for every stochastic rule; defaults to a
            generator seeded from ``config.random_seed``.
        predictions / insights: Provider overrides; by default both come
            from ``build_providers(config.provider, rng)``.
        now_fn: Clock used for timestamps, injectable for tests.
    """

    def __init__(
        self,
        config: FleetConfig | None = None,
        rng: RandomSource | None = None,
        predictions: PredictionProvider | None = None,
        insights: InsightProvider | None = None,
        now_fn: Callable[[], datetime] = local_now,
    ) -> None:
        self.config = config or FleetConfig()
        self.rng = rng if rng is not None else make_rng(self.config.random_seed)
        self._now = now_fn

        if predictions is None or insights is None:
            chain = build_providers(self.config.provider, self.rng)
            predictions = predictions or chain
            insights = insights or chain
        self.predictions = predictions
        self.insights = insights

        self.activity = ActivityFeed(self.config.activity_feed_size, now_fn)
        self.trends = TrendTracker(self.config.trends)

        self._vehicles: list[Vehicle] = []
        self._drones: list[Drone] = []
        self._alerts: list[Alert] = []
        self._predictions: dict[str, UnitPrediction] = {}
        self._insights: list[Insight] = []

        now = self._now()
        if self.config.seed_fleet:
            self._vehicles = seed_vehicles(now)
            self._drones = seed_drones()
            self.activity.add(
                "✅",
                f"Fleet initialized: {len(self._vehicles)} vehicles, {len(self._drones)} drones",
                "success",
            )
        self.evaluate_alerts()
        self.trends.seed(self.get_snapshot(), now)
        logger.info(
            "Fleet simulation ready: %d vehicles, %d drones, %d alerts",
            len(self._vehicles), len(self._drones), len(self._alerts),
        )

    # ═══════════════════════════════════════════════════════════════════════
    # Unit collection
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles)

    @property
    def drones(self) -> list[Drone]:
        return list(self._drones)

    @property
    def units(self) -> list[Vehicle | Drone]:
        """Vehicles first, then drones, each in insertion order."""
        return [*self._vehicles, *self._drones]

    def get_unit(self, unit_id: str) -> Vehicle | Drone:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        raise UnitNotFoundError(unit_id)

    def add_unit(self, kind: UnitKind, request: NewUnitRequest | dict) -> Vehicle | Drone:
        """Create a unit from validated attributes and re-evaluate alerts.

        Raises:
            pydantic.ValidationError: ``kind`` is neither "vehicle" nor
                "drone", blank ``type``/``location`` or battery outside [0, 100].
        """
        kind = _UNIT_KIND.validate_python(kind)
        if not isinstance(request, NewUnitRequest):
            request = NewUnitRequest.model_validate(request)

        collection: list = self._vehicles if kind == "vehicle" else self._drones
        unit = create_unit(kind, request, len(collection), self.rng, self._now().date())
        collection.append(unit)

        self.evaluate_alerts()
        self._post_fleet_alert(unit.id, f"New {kind} successfully added to fleet and operational")
        self.activity.add("➕", f"New {kind} {unit.id} added to fleet", "success", unit.id)
        logger.info("Added %s %s (%s) at %s", kind, unit.id, unit.type, unit.location.address)
        return unit

    def remove_unit(self, unit_id: str) -> Vehicle | Drone:
        """Remove a unit and drop its cached predictions.

        Raises:
            UnitNotFoundError: no unit has ``unit_id``.
        """
        unit = self.get_unit(unit_id)
        if unit.kind == "vehicle":
            self._vehicles.remove(unit)
        else:
            self._drones.remove(unit)
        self._predictions.pop(unit_id, None)

        self.evaluate_alerts()
        self._post_fleet_alert(unit_id, f"{unit.kind} {unit_id} removed from fleet")
        self.activity.add("➖", f"{unit.kind} {unit_id} removed from fleet", "info", unit_id)
        logger.info("Removed %s %s", unit.kind, unit_id)
        return unit

    # ═══════════════════════════════════════════════════════════════════════
    # Scheduled evaluations
    # ═══════════════════════════════════════════════════════════════════════

    def tick(self) -> TickReport:
        """Advance every unit by one transition and log its notifications."""
        report = apply_tick(self.units, self.config.transitions, self.rng, self._now())
        for event in report.events:
            self.activity.add(event.icon, event.message, event.category, event.unit_id)
        return report

    def evaluate_alerts(self) -> list[Alert]:
        """Replace the alert list from current unit state."""
        self._alerts = generate_alerts(self.units, self.config.alerts, self.rng, self._now())
        for alert in self._alerts:
            if alert.type == "battery":
                unit = self.get_unit(alert.unit_id)
                self.activity.add("🔋", f"{unit.id} battery low ({round(unit.battery)}%)", "warning", unit.id)
        logger.debug("Alert pass: %d alerts", len(self._alerts))
        return list(self._alerts)

    def fold_trends(self) -> HistoricalBaseline:
        """Blend the current snapshot into the smoothed baseline."""
        return self.trends.fold(self.get_snapshot(), self._now())

    def _post_fleet_alert(self, unit_id: str, message: str) -> None:
        alert = Alert(
            id=len(self._alerts) + 1,
            type="fleet",
            severity="info",
            unit_id=unit_id,
            message=message,
            timestamp=self._now(),
        )
        self._alerts.insert(0, alert)

    # ═══════════════════════════════════════════════════════════════════════
    # Derived views
    # ═══════════════════════════════════════════════════════════════════════

    def get_snapshot(self) -> FleetSnapshot:
        return compute_snapshot(self.units, len(self._alerts))

    def get_trend_percentages(self) -> TrendPercentages:
        return self.trends.percentages(self.get_snapshot())

    def get_alerts(self) -> list[Alert]:
        """Latest alert list, most recent first."""
        return most_recent_first(self._alerts)

    def get_activity(self) -> list[ActivityItem]:
        return self.activity.items()

    def get_predictions(self) -> dict[str, UnitPrediction]:
        """Cached predictions for units that still exist."""
        return {uid: p for uid, p in self._predictions.items() if self._has_unit(uid)}

    def get_prediction(self, unit_id: str) -> UnitPrediction | None:
        """Cached prediction for ``unit_id``; ``None`` for unknown or removed units."""
        if not self._has_unit(unit_id):
            return None
        return self._predictions.get(unit_id)

    @property
    def latest_insights(self) -> list[Insight]:
        return list(self._insights)

    def summary(self) -> FleetSummary:
        """Compact fleet description for insight providers."""
        vehicles = self._vehicles
        high_risk = sum(
            1
            for p in self.get_predictions().values()
            if p.maintenance is not None and p.maintenance.risk_score > HIGH_RISK_SCORE
        )
        return FleetSummary(
            total_vehicles=len(vehicles),
            active_vehicles=sum(1 for v in vehicles if v.status == "active"),
            average_battery=sum(v.battery for v in vehicles) / len(vehicles) if vehicles else 0.0,
            total_drones=len(self._drones),
            active_drones=sum(1 for d in self._drones if d.status == "active"),
            critical_alerts=sum(1 for a in self._alerts if a.severity == "critical"),
            low_battery_vehicles=sum(1 for v in vehicles if v.battery < LOW_BATTERY_INSIGHT_PCT),
            high_risk_units=high_risk,
            hour=self._now().hour,
            vehicle_lines=[
                f"{v.id}: {v.status}, {round(v.battery)}% battery, {v.location.address}" for v in vehicles
            ],
        )

    def _has_unit(self, unit_id: str) -> bool:
        return any(u.id == unit_id for u in self.units)

    # ═══════════════════════════════════════════════════════════════════════
    # Provider-backed operations (async)
    # ═══════════════════════════════════════════════════════════════════════

    async def predict_maintenance(self, unit: Vehicle | Drone) -> MaintenancePrediction:
        return await self.predictions.predict_maintenance(
            unit.id, usage_metric(unit), unit.efficiency, unit.last_service,
        )

    async def refresh_predictions(self, unit_ids: Iterable[str] | None = None) -> dict[str, UnitPrediction]:
        """Recompute maintenance and battery predictions.

        Inputs are copied before the first await.  Results are merged only
        for units that still exist when they arrive, so a unit removed
        mid-refresh is silently omitted.
        """
        wanted = set(unit_ids) if unit_ids is not None else None
        targets = [u.model_copy() for u in self.units if wanted is None or u.id in wanted]

        fresh: dict[str, UnitPrediction] = {}
        for unit in targets:
            maintenance = await self.predict_maintenance(unit)
            battery = await self.predictions.predict_battery_life(unit)
            fresh[unit.id] = UnitPrediction(
                unit_id=unit.id, maintenance=maintenance, battery=battery, updated_at=self._now(),
            )

        merged = {uid: p for uid, p in fresh.items() if self._has_unit(uid)}
        self._predictions.update(merged)
        logger.info("Predictions refreshed for %d units (%d dropped)", len(merged), len(fresh) - len(merged))
        return merged

    async def predict_demand(self, hour: int | None = None, downtown: bool = True,
                             weather_good: bool = True) -> DemandPrediction:
        hour = self._now().hour if hour is None else hour
        return await self.predictions.predict_demand(hour, downtown, weather_good)

    async def generate_insights(self) -> list[Insight]:
        summary = self.summary()
        self._insights = await self.insights.generate_insights(summary)
        self.activity.add("🤖", f"AI insights generated ({len(self._insights)})", "success")
        return list(self._insights)

    async def apply_quick_action(self, name: str) -> QuickActionResult:
        """Run one quick action by name.

        A failing action leaves unit state unchanged, posts an ``error``
        activity item and re-raises.

        Raises:
            UnknownQuickActionError: ``name`` is not a supported action.
        """
        self.activity.add("⚡", f"Executing AI action: {name}", "info")
        try:
            action = actions.validate_action(name)
            if action == "optimize_routes":
                result = actions.optimize_routes(self._vehicles, self.config.transitions, self.rng)
                icon = "🛣️"
            elif action == "smart_charging":
                result = actions.smart_charging(self._vehicles, self.config.transitions, self._now())
                icon = "🔌"
            elif action == "predict_demand":
                result = await actions.predict_demand(self.predictions, self._now().hour)
                icon = "📈"
            else:
                result = actions.schedule_maintenance(self.get_predictions())
                icon = "🔧"
        except UnknownQuickActionError:
            self.activity.add("❌", f"AI action failed: {name}", "error")
            raise
        except Exception:
            logger.exception("Quick action %s failed", name)
            self.activity.add("❌", f"AI action failed: {name}", "error")
            raise

        self.activity.add(icon, result.message, "success" if action != "schedule_maintenance" else "info")
        logger.info("Quick action %s: %s", action, result.message)
        return result
