"""Pydantic validation tests — ensure invalid inputs are rejected.

Tests every config model and the unit/add-request models for boundary
violations: negative rates, out-of-range percentages, zero periods,
unknown provider modes, blank add-unit attributes.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from fleetiq_simulator.config import (
    AlertConfig,
    ClockConfig,
    FleetConfig,
    ProviderConfig,
    TransitionConfig,
    TrendConfig,
)
from fleetiq_simulator.models.units import Location, NewUnitRequest, Vehicle


# ═══════════════════════════════════════════════════════════════════════════
# ClockConfig
# ═══════════════════════════════════════════════════════════════════════════

class TestClockValidation:

    def test_defaults(self):
        c = ClockConfig()
        assert (c.tick_interval_s, c.alert_interval_s, c.trend_interval_s) == (4.0, 10.0, 30.0)

    @pytest.mark.parametrize("field", ["tick_interval_s", "alert_interval_s", "trend_interval_s"])
    def test_zero_period_rejected(self, field):
        with pytest.raises(ValidationError):
            ClockConfig(**{field: 0})


# ═══════════════════════════════════════════════════════════════════════════
# TransitionConfig
# ═══════════════════════════════════════════════════════════════════════════

class TestTransitionValidation:

    def test_defaults_are_valid(self):
        t = TransitionConfig()
        assert t.low_battery_pct == 25
        assert t.route_to_charging_probability == 0.3
        assert t.strict is False

    def test_probability_above_one_rejected(self):
        with pytest.raises(ValidationError):
            TransitionConfig(route_to_charging_probability=1.5)

    def test_negative_drain_rejected(self):
        with pytest.raises(ValidationError):
            TransitionConfig(vehicle_drain_min=-1)

    def test_zero_charge_rate_max_rejected(self):
        with pytest.raises(ValidationError):
            TransitionConfig(charge_rate_max=0)

    def test_floor_above_100_rejected(self):
        with pytest.raises(ValidationError):
            TransitionConfig(drone_battery_floor=101)


# ═══════════════════════════════════════════════════════════════════════════
# AlertConfig / TrendConfig
# ═══════════════════════════════════════════════════════════════════════════

class TestAlertValidation:

    def test_defaults_are_valid(self):
        a = AlertConfig()
        assert (a.low_battery_pct, a.critical_battery_pct, a.high_efficiency_pct) == (35, 20, 95)

    def test_threshold_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            AlertConfig(low_battery_pct=120)

    def test_negative_stagger_rejected(self):
        with pytest.raises(ValidationError):
            AlertConfig(maintenance_stagger_s=-1)


class TestTrendValidation:

    def test_decay_above_one_rejected(self):
        with pytest.raises(ValidationError):
            TrendConfig(revenue_decay=1.1)

    def test_zero_history_rejected(self):
        with pytest.raises(ValidationError):
            TrendConfig(history_length=0)


# ═══════════════════════════════════════════════════════════════════════════
# ProviderConfig / FleetConfig
# ═══════════════════════════════════════════════════════════════════════════

class TestProviderValidation:

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            ProviderConfig(mode="tensorflow")

    def test_zero_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ProviderConfig(timeout_s=0)

    @pytest.mark.parametrize("mode, key, expected", [
        ("auto", None, "neural"),
        ("auto", "sk-test", "openai"),
        ("fallback", "sk-test", "fallback"),
        ("openai", None, "openai"),
    ])
    def test_resolved_mode(self, mode, key, expected):
        assert ProviderConfig(mode=mode, openai_api_key=key).resolved_mode == expected

    def test_bad_timeout_env_rejected(self, monkeypatch):
        monkeypatch.setenv("FLEETIQ_PROVIDER_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            ProviderConfig.from_env()


class TestFleetValidation:

    def test_defaults_compose(self):
        f = FleetConfig()
        assert f.seed_fleet is True
        assert f.random_seed is None
        assert f.activity_feed_size == 20

    def test_nested_dict_validated(self):
        with pytest.raises(ValidationError):
            FleetConfig(clock={"tick_interval_s": -4})

    def test_zero_feed_size_rejected(self):
        with pytest.raises(ValidationError):
            FleetConfig(activity_feed_size=0)


# ═══════════════════════════════════════════════════════════════════════════
# Unit models
# ═══════════════════════════════════════════════════════════════════════════

class TestUnitValidation:

    def test_blank_type_rejected(self):
        with pytest.raises(ValidationError):
            NewUnitRequest(type="   ", location="Burbank")

    def test_battery_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            NewUnitRequest(type="Tesla Model 3", location="Burbank", battery=-5)

    def test_whitespace_is_stripped(self):
        req = NewUnitRequest(type="  Tesla Model 3 ", location=" Burbank ")
        assert (req.type, req.location, req.battery) == ("Tesla Model 3", "Burbank", 100.0)

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Vehicle(
                id="CAB-001",
                type="Tesla Model 3",
                status="parked",
                location=Location(lat=34.0, lng=-118.0, address="LA"),
                efficiency=90,
                last_service=date(2025, 1, 1),
            )

    def test_latitude_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            Location(lat=95, lng=0, address="North of everything")


# ═══════════════════════════════════════════════════════════════════════════
# Scenario files
# ═══════════════════════════════════════════════════════════════════════════

class TestScenarioFiles:

    def test_default_scenario_loads(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        path = Path(__file__).parent.parent / "scenarios" / "default.yaml"
        cfg = FleetConfig.from_yaml(path)
        assert cfg == FleetConfig()

    def test_partial_file_keeps_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        path = tmp_path / "fast.yaml"
        path.write_text("clock:\n  tick_interval_s: 1.0\nrandom_seed: 3\n")
        cfg = FleetConfig.from_yaml(path)
        assert cfg.clock.tick_interval_s == 1.0
        assert cfg.clock.alert_interval_s == 10.0
        assert cfg.random_seed == 3
        assert cfg.provider.openai_api_key == "sk-from-env"

    def test_invalid_file_rejected(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("transitions:\n  route_to_charging_probability: 3\n")
        with pytest.raises(ValidationError):
            FleetConfig.from_yaml(path)

    def test_server_reads_config_path(self, tmp_path, monkeypatch):
        from fleetiq_simulator.api.server import load_config

        path = tmp_path / "quiet.yaml"
        path.write_text("seed_fleet: false\nprovider:\n  mode: fallback\n")
        monkeypatch.setenv("FLEETIQ_CONFIG", str(path))
        cfg = load_config()
        assert cfg.seed_fleet is False
        assert cfg.provider.mode == "fallback"
