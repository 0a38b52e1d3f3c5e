"""Alert generator — full regeneration from current unit state.

Rules, evaluated in this order:
  1. vehicle, battery < 35, not charging  → battery, critical if < 20 else warning
  2. any unit in maintenance              → maintenance, critical
  3. vehicle, efficiency > 95, active     → performance, info

Ids run 1..n within the batch; the list is replaced, never patched.
Maintenance and performance alerts are back-dated by a random offset
(up to 1 h / 30 min) to stagger them in the feed.  The staggering is purely
cosmetic and can be switched off with ``AlertConfig.stagger_timestamps``.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from fleetiq_simulator.config.alerts import AlertConfig
from fleetiq_simulator.engine.rng import RandomSource
from fleetiq_simulator.models.results import Alert
from fleetiq_simulator.models.units import Drone, Vehicle


def generate_alerts(
    units: Iterable[Vehicle | Drone],
    cfg: AlertConfig,
    rng: RandomSource,
    now: datetime,
) -> list[Alert]:
    """Build the alert list for the current fleet. Empty fleet → empty list."""
    units = list(units)
    vehicles = [u for u in units if u.kind == "vehicle"]
    alerts: list[Alert] = []

    def _push(**kwargs) -> None:
        alerts.append(Alert(id=len(alerts) + 1, **kwargs))

    for v in vehicles:
        if v.battery < cfg.low_battery_pct and v.status != "charging":
            critical = v.battery < cfg.critical_battery_pct
            advice = "immediate charging required" if critical else "routing to nearest charging station"
            _push(
                type="battery",
                severity="critical" if critical else "warning",
                unit_id=v.id,
                message=f"Battery at {round(v.battery)}% - {advice}",
                timestamp=now,
            )

    for u in units:
        if u.status == "maintenance":
            _push(
                type="maintenance",
                severity="critical",
                unit_id=u.id,
                message="Unit requires maintenance - currently out of service",
                timestamp=_staggered(now, cfg.maintenance_stagger_s, cfg, rng),
            )

    for v in vehicles:
        if v.efficiency > cfg.high_efficiency_pct and v.status == "active":
            _push(
                type="performance",
                severity="info",
                unit_id=v.id,
                message=f"Excellent performance - {round(v.efficiency)}% efficiency achieved",
                timestamp=_staggered(now, cfg.performance_stagger_s, cfg, rng),
            )

    return alerts


def _staggered(now: datetime, max_offset_s: float, cfg: AlertConfig, rng: RandomSource) -> datetime:
    if not cfg.stagger_timestamps or max_offset_s <= 0:
        return now
    return now - timedelta(seconds=float(rng.random()) * max_offset_s)


def most_recent_first(alerts: Iterable[Alert]) -> list[Alert]:
    """Order alerts newest first; ties keep generation order."""
    return sorted(alerts, key=lambda a: a.timestamp, reverse=True)
