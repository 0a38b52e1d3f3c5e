"""Tests for engine/fleet.py and engine/actions.py — the fleet simulation context.

Covers:
  - Seeded start: units, alerts, baseline, activity
  - add_unit / remove_unit (ids, validation, fleet alerts, activity)
  - Scheduled evaluations (tick, alert pass, trend fold)
  - Prediction cache: refresh, removal, removal mid-refresh
  - Insights from the fleet summary
  - Quick actions, unknown names and failure atomicity
"""

from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from conftest import FIXED_NOW, ExplodingRandom, ScriptedRandom
from fleetiq_simulator.engine import actions
from fleetiq_simulator.engine.fleet import FleetSimulation
from fleetiq_simulator.errors import UnitNotFoundError, UnknownQuickActionError
from fleetiq_simulator.models.results import UnitPrediction
from fleetiq_simulator.models.units import NewUnitRequest
from fleetiq_simulator.providers import RuleBasedInsightProvider, RuleBasedPredictionProvider
from fleetiq_simulator.providers.fallback import maintenance_risk


# ═══════════════════════════════════════════════════════════════════════════
# Start-up state
# ═══════════════════════════════════════════════════════════════════════════

class TestStartup:

    def test_seed_fleet(self, fleet: FleetSimulation):
        assert [v.id for v in fleet.vehicles] == ["CAB-001", "CAB-002", "CAB-003"]
        assert [d.id for d in fleet.drones] == ["DRN-001", "DRN-002"]
        assert [u.id for u in fleet.units][-1] == "DRN-002"

    def test_initial_alerts(self, fleet: FleetSimulation):
        alerts = fleet.get_alerts()
        assert sorted((a.type, a.unit_id) for a in alerts) == [
            ("maintenance", "DRN-002"),
            ("performance", "CAB-003"),
        ]

    def test_initial_snapshot(self, fleet: FleetSimulation):
        s = fleet.get_snapshot()
        assert s.active_vehicles == 2
        assert s.total_revenue == pytest.approx(263.45)
        assert s.average_efficiency == pytest.approx(93.0)
        assert s.active_alerts == 2

    def test_baseline_seeded_from_start(self, fleet: FleetSimulation):
        pct = fleet.get_trend_percentages()
        assert (pct.revenue, pct.efficiency, pct.active_vehicles, pct.alerts) == (0, 0, 0, 0)
        assert fleet.trends.baseline.previous_alerts == 2

    def test_activity_logged(self, fleet: FleetSimulation):
        assert fleet.get_activity()[0].message == "Fleet initialized: 3 vehicles, 2 drones"

    def test_empty_fleet(self, empty_fleet: FleetSimulation):
        assert empty_fleet.units == []
        assert empty_fleet.get_alerts() == []
        pct = empty_fleet.get_trend_percentages()
        assert (pct.revenue, pct.efficiency, pct.active_vehicles, pct.alerts) == (0, 0, 0, 0)


# ═══════════════════════════════════════════════════════════════════════════
# Adding and removing units
# ═══════════════════════════════════════════════════════════════════════════

class TestAddRemove:

    def test_next_vehicle_is_cab_004(self, fleet: FleetSimulation):
        unit = fleet.add_unit("vehicle", {"type": "Tesla Model 3", "location": "Venice Beach"})
        assert unit.id == "CAB-004"
        assert unit.status == "active"
        assert unit.location.address == "Venice Beach"
        assert fleet.get_unit("CAB-004") is unit
        assert fleet.get_snapshot().active_vehicles == 3

    def test_add_drone(self, fleet: FleetSimulation):
        unit = fleet.add_unit("drone", NewUnitRequest(type="Delivery Quad", location="Burbank", battery=80))
        assert unit.id == "DRN-003"
        assert unit.battery == 80

    def test_add_posts_fleet_alert_and_activity(self, fleet: FleetSimulation):
        fleet.add_unit("vehicle", {"type": "Tesla Model 3", "location": "Venice Beach"})
        head = fleet.get_alerts()[0]
        assert (head.type, head.severity, head.unit_id) == ("fleet", "info", "CAB-004")
        assert head.message == "New vehicle successfully added to fleet and operational"
        assert fleet.get_activity()[0].message == "New vehicle CAB-004 added to fleet"

    def test_fleet_alert_replaced_on_next_pass(self, fleet: FleetSimulation):
        fleet.add_unit("vehicle", {"type": "Tesla Model 3", "location": "Venice Beach"})
        fleet.evaluate_alerts()
        assert all(a.type != "fleet" for a in fleet.get_alerts())

    @pytest.mark.parametrize("attrs", [
        {"type": "", "location": "Venice Beach"},
        {"type": "Tesla Model 3"},
        {"type": "Tesla Model 3", "location": "Venice Beach", "battery": 120},
    ])
    def test_invalid_request_rejected_without_mutation(self, fleet: FleetSimulation, attrs):
        with pytest.raises(ValidationError):
            fleet.add_unit("vehicle", attrs)
        assert len(fleet.vehicles) == 3

    def test_unknown_kind_rejected_without_mutation(self, fleet: FleetSimulation):
        with pytest.raises(ValidationError):
            fleet.add_unit("submarine", {"type": "X", "location": "Y"})  # type: ignore[arg-type]
        assert len(fleet.units) == 5
        assert all(a.type != "fleet" for a in fleet.get_alerts())

    def test_low_battery_vehicle_gets_one_critical_alert(self, empty_fleet: FleetSimulation):
        empty_fleet.add_unit("vehicle", {"type": "Tesla Model 3", "location": "Downtown LA", "battery": 15})
        battery_alerts = [a for a in empty_fleet.get_alerts() if a.type == "battery"]
        assert len(battery_alerts) == 1
        assert battery_alerts[0].severity == "critical"
        assert any(i.message == "CAB-001 battery low (15%)" for i in empty_fleet.get_activity())

    def test_remove_unit(self, fleet: FleetSimulation):
        removed = fleet.remove_unit("CAB-002")
        assert removed.id == "CAB-002"
        assert [v.id for v in fleet.vehicles] == ["CAB-001", "CAB-003"]
        assert fleet.get_alerts()[0].message == "vehicle CAB-002 removed from fleet"
        assert fleet.get_activity()[0].message == "vehicle CAB-002 removed from fleet"

    def test_remove_drone_clears_maintenance_alert(self, fleet: FleetSimulation):
        fleet.remove_unit("DRN-002")
        assert all(a.type != "maintenance" for a in fleet.get_alerts())

    def test_remove_unknown(self, fleet: FleetSimulation):
        with pytest.raises(UnitNotFoundError) as exc:
            fleet.remove_unit("CAB-999")
        assert isinstance(exc.value, KeyError)
        assert str(exc.value) == "Unit 'CAB-999' not found"
        assert len(fleet.units) == 5


# ═══════════════════════════════════════════════════════════════════════════
# Scheduled evaluations
# ═══════════════════════════════════════════════════════════════════════════

class TestScheduledEvaluations:

    def test_tick_processes_every_unit(self, fleet: FleetSimulation):
        before = len(fleet.get_activity())
        report = fleet.tick()
        assert report.processed == 5
        assert report.skipped == []
        assert len(fleet.get_activity()) == min(20, before + len(report.events))

    def test_tick_leaves_maintenance_drone(self, fleet: FleetSimulation):
        for _ in range(10):
            fleet.tick()
        drone = fleet.get_unit("DRN-002")
        assert (drone.status, drone.battery) == ("maintenance", 0)

    def test_activity_feed_is_bounded(self, fleet: FleetSimulation):
        for _ in range(100):
            fleet.tick()
            fleet.evaluate_alerts()
        assert len(fleet.get_activity()) <= fleet.config.activity_feed_size

    def test_fold_trends(self, fleet: FleetSimulation):
        fleet.get_unit("CAB-001").revenue += 100
        baseline = fleet.fold_trends()
        assert baseline.previous_revenue == pytest.approx(263.45 * 0.95 + 363.45 * 0.05)
        assert len(fleet.trends.history) == 1


# ═══════════════════════════════════════════════════════════════════════════
# Predictions & insights
# ═══════════════════════════════════════════════════════════════════════════

class RemovingPredictions(RuleBasedPredictionProvider):
    """Removes ``victim`` from the fleet while its prediction is in flight."""

    def __init__(self, victim: str) -> None:
        super().__init__(rng=ScriptedRandom())
        self.victim = victim
        self.fleet: FleetSimulation | None = None

    async def predict_battery_life(self, unit):
        if unit.id == self.victim:
            self.fleet.remove_unit(self.victim)
        return await super().predict_battery_life(unit)


class TestPredictions:

    def test_refresh_covers_every_unit(self, fleet: FleetSimulation):
        preds = asyncio.run(fleet.refresh_predictions())
        assert set(preds) == {"CAB-001", "CAB-002", "CAB-003", "DRN-001", "DRN-002"}
        assert preds["CAB-001"].maintenance.source == "fallback"
        assert fleet.get_prediction("DRN-001").battery is not None

    def test_refresh_never_touches_units(self, fleet: FleetSimulation):
        before = [u.model_dump() for u in fleet.units]
        asyncio.run(fleet.refresh_predictions())
        assert [u.model_dump() for u in fleet.units] == before

    def test_removed_unit_prediction_omitted(self, fleet: FleetSimulation):
        asyncio.run(fleet.refresh_predictions())
        fleet.remove_unit("CAB-001")
        assert fleet.get_prediction("CAB-001") is None
        assert "CAB-001" not in fleet.get_predictions()

    def test_unknown_unit_prediction_is_none(self, fleet: FleetSimulation):
        assert fleet.get_prediction("NOPE-1") is None

    def test_removal_mid_refresh(self, fleet_config):
        provider = RemovingPredictions(victim="CAB-002")
        sim = FleetSimulation(
            fleet_config, predictions=provider, insights=RuleBasedInsightProvider(), now_fn=lambda: FIXED_NOW,
        )
        provider.fleet = sim

        merged = asyncio.run(sim.refresh_predictions())

        assert "CAB-002" not in merged
        assert "CAB-002" not in sim.get_predictions()
        assert "CAB-001" in merged

    def test_summary(self, fleet: FleetSimulation):
        s = fleet.summary()
        assert (s.total_vehicles, s.active_vehicles, s.total_drones, s.active_drones) == (3, 2, 2, 1)
        assert s.average_battery == pytest.approx((87 + 34 + 72) / 3)
        assert s.critical_alerts == 1
        assert s.low_battery_vehicles == 1
        assert s.high_risk_units == 0
        assert s.hour == 18
        assert s.vehicle_lines[0] == "CAB-001: active, 87% battery, Downtown LA"

    def test_insights(self, fleet: FleetSimulation):
        insights = asyncio.run(fleet.generate_insights())
        assert [i.action for i in insights] == ["smart_charging", "optimize_routes"]
        assert fleet.latest_insights == insights
        assert fleet.get_activity()[0].message == "AI insights generated (2)"

    def test_insights_include_high_risk_after_refresh(self, fleet: FleetSimulation):
        asyncio.run(fleet.refresh_predictions())
        actions = [i.action for i in asyncio.run(fleet.generate_insights())]
        assert "schedule_maintenance" in actions


# ═══════════════════════════════════════════════════════════════════════════
# Quick actions
# ═══════════════════════════════════════════════════════════════════════════

class TestQuickActions:

    def test_optimize_routes(self, fleet: FleetSimulation):
        before = {v.id: v.efficiency for v in fleet.vehicles}
        result = asyncio.run(fleet.apply_quick_action("optimize_routes"))

        assert result.affected_units == ["CAB-001", "CAB-003"]
        for vid in result.affected_units:
            eff = fleet.get_unit(vid).efficiency
            assert min(100, before[vid] + 5) <= eff <= 100
        assert fleet.get_unit("CAB-002").efficiency == before["CAB-002"]
        assert fleet.get_activity()[1].message == "Executing AI action: optimize_routes"

    def test_smart_charging(self, fleet: FleetSimulation):
        fleet.get_unit("CAB-001").battery = 30
        result = asyncio.run(fleet.apply_quick_action("smart_charging"))

        cab = fleet.get_unit("CAB-001")
        assert result.affected_units == ["CAB-001"]
        assert cab.status == "charging"
        assert cab.charging_start_time == FIXED_NOW
        assert fleet.get_unit("CAB-003").status == "active"
        assert result.message == "1 vehicles routed to charging stations"

    def test_smart_charging_skips_drones(self, fleet: FleetSimulation):
        fleet.get_unit("DRN-001").battery = 12
        result = asyncio.run(fleet.apply_quick_action("smart_charging"))
        assert result.affected_units == []
        assert fleet.get_unit("DRN-001").status == "active"

    def test_predict_demand_does_not_mutate(self, fleet: FleetSimulation):
        before = [u.model_dump() for u in fleet.units]
        result = asyncio.run(fleet.apply_quick_action("predict_demand"))
        assert result.demand.demand_score == 50
        assert result.demand.recommendation == "Standard deployment"
        assert [u.model_dump() for u in fleet.units] == before

    def test_schedule_maintenance_counts_cached_risk(self, fleet: FleetSimulation):
        assert asyncio.run(fleet.apply_quick_action("schedule_maintenance")).affected_units == []
        asyncio.run(fleet.refresh_predictions())
        result = asyncio.run(fleet.apply_quick_action("schedule_maintenance"))
        assert len(result.affected_units) == 5

    def test_schedule_maintenance_matches_recommended_action(self):
        cache = {
            uid: UnitPrediction(
                unit_id=uid,
                maintenance=maintenance_risk(uid, usage, 100, FIXED_NOW.date(), FIXED_NOW.date(), 0.75, "fallback"),
                updated_at=FIXED_NOW,
            )
            for uid, usage in [("CAB-001", 60_000), ("CAB-002", 80_000), ("DRN-001", 95_000)]
        }
        result = actions.schedule_maintenance(cache)
        flagged = [uid for uid, p in cache.items() if p.maintenance.recommended_action == "immediate_service"]
        assert result.affected_units == flagged == ["CAB-002", "DRN-001"]

    def test_unknown_action(self, fleet: FleetSimulation):
        before = [u.model_dump() for u in fleet.units]
        with pytest.raises(UnknownQuickActionError):
            asyncio.run(fleet.apply_quick_action("launch_rockets"))
        head = fleet.get_activity()[0]
        assert (head.category, head.message) == ("error", "AI action failed: launch_rockets")
        assert [u.model_dump() for u in fleet.units] == before

    def test_failed_action_leaves_state_unchanged(self, fleet_config):
        sim = FleetSimulation(fleet_config, rng=ExplodingRandom(fail_on=2), now_fn=lambda: FIXED_NOW)
        with pytest.raises(RuntimeError):
            asyncio.run(sim.apply_quick_action("optimize_routes"))
        assert [v.efficiency for v in sim.vehicles] == [94, 89, 96]
        assert sim.get_activity()[0].category == "error"
