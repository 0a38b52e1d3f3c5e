"""Narrative generator — plain-English fleet status report.

Turns the live fleet state (snapshot, trends, alerts, cached predictions)
into a structured text block for operators and LLM clients.
"""

from __future__ import annotations

from fleetiq_simulator.engine.fleet import FleetSimulation
from fleetiq_simulator.models.results import TrendPercentages


def _trend(value: int | None) -> str:
    if value is None:
        return "n/a"
    return f"{value:+d}%"


def _banner(sections: list[str], title: str) -> None:
    sections.append("")
    sections.append("=" * 60)
    sections.append(title)
    sections.append("=" * 60)


def generate_fleet_narrative(fleet: FleetSimulation) -> str:
    """Generate a plain-English report of the current fleet.

    Sections:
      1. Fleet status
      2. Key metrics with trend against the smoothed baseline
      3. Alerts
      4. Maintenance outlook (from cached predictions)
      5. Recommendations
    """
    snapshot = fleet.get_snapshot()
    trends: TrendPercentages = fleet.get_trend_percentages()
    alerts = fleet.get_alerts()
    predictions = fleet.get_predictions()
    vehicles = fleet.vehicles
    drones = fleet.drones

    sections: list[str] = []

    # ── 1. Fleet status ──
    _banner(sections, "FLEET STATUS")
    by_status = {s: sum(1 for v in vehicles if v.status == s) for s in ("active", "charging", "maintenance")}
    sections.append(
        f"Vehicles: {len(vehicles)} "
        f"({by_status['active']} active, {by_status['charging']} charging, {by_status['maintenance']} in maintenance)\n"
        f"Drones: {len(drones)} ({sum(1 for d in drones if d.status == 'active')} active)"
    )

    # ── 2. Key metrics ──
    _banner(sections, "KEY METRICS")
    sections.append(
        f"Active vehicles: {snapshot.active_vehicles} ({_trend(trends.active_vehicles)})\n"
        f"Total revenue: ${snapshot.total_revenue:,.2f} ({_trend(trends.revenue)})\n"
        f"Average efficiency: {snapshot.average_efficiency:.1f}% ({_trend(trends.efficiency)})\n"
        f"Active alerts: {snapshot.active_alerts} ({_trend(trends.alerts)})"
    )

    # ── 3. Alerts ──
    _banner(sections, "ALERTS")
    if alerts:
        for alert in alerts:
            sections.append(f"  [{alert.severity.upper():8s}] {alert.unit_id:8s} {alert.message}")
    else:
        sections.append("No active alerts.")

    # ── 4. Maintenance outlook ──
    _banner(sections, "MAINTENANCE OUTLOOK")
    ranked = sorted(
        (p.maintenance for p in predictions.values() if p.maintenance is not None),
        key=lambda m: m.risk_score,
        reverse=True,
    )
    if ranked:
        for m in ranked:
            sections.append(
                f"  {m.unit_id:8s} risk {m.risk_score:3d}/100, service in {m.days_until_maintenance} days "
                f"({m.recommended_action}, {m.source})"
            )
    else:
        sections.append("No predictions cached yet. POST /fleet/predictions/refresh to compute them.")

    # ── 5. Recommendations ──
    _banner(sections, "RECOMMENDATIONS")
    recs: list[str] = []
    low = [v.id for v in vehicles if v.status == "active" and v.battery < fleet.config.transitions.smart_charging_pct]
    if low:
        recs.append(f"{len(low)} active vehicles are low on charge ({', '.join(low)}). Run smart_charging.")
    high_risk = [m.unit_id for m in ranked if m.recommended_action == "immediate_service"]
    if high_risk:
        recs.append(f"{len(high_risk)} units need immediate service ({', '.join(high_risk)}). Run schedule_maintenance.")
    if trends.revenue is not None and trends.revenue < 0:
        recs.append(f"Revenue is {abs(trends.revenue)}% below its smoothed baseline. Run optimize_routes.")
    if not recs:
        recs.append("No critical issues identified.")
    for i, rec in enumerate(recs, 1):
        sections.append(f"{i}. {rec}")

    return "\n".join(sections).lstrip("\n")
