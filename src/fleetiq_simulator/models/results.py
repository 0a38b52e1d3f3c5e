"""Result types — the contract between engine, providers, API and dashboard.

Snapshots, trend percentages and alerts are derived and rebuilt on demand;
none of them is a source of truth for unit state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

AlertSeverity = Literal["info", "warning", "critical"]
AlertType = Literal["battery", "maintenance", "performance", "fleet"]
ActivityCategory = Literal["info", "success", "warning", "error", "system"]
QuickActionName = Literal["optimize_routes", "smart_charging", "predict_demand", "schedule_maintenance"]


# ═══════════════════════════════════════════════════════════════════════════
# Fleet metrics
# ═══════════════════════════════════════════════════════════════════════════

class FleetSnapshot(BaseModel):
    """Point-in-time aggregate of fleet metrics."""

    active_vehicles: int
    """Vehicles with status ``active`` (drones excluded)."""

    total_revenue: float
    """Sum of vehicle revenue."""

    average_efficiency: float
    """Mean vehicle efficiency, 0 when there are no vehicles."""

    active_alerts: int
    """Length of the alert list from the latest evaluation pass, not the
    instantaneous unit state."""


class HistoricalBaseline(BaseModel):
    """Smoothed running baseline used only for percentage deltas."""

    previous_revenue: float = 0.0
    previous_efficiency: float = 0.0
    previous_active_vehicles: float = 0.0
    previous_alerts: float = 0.0
    last_update_time: datetime


class TrendPercentages(BaseModel):
    """Percentage change of each snapshot metric against the baseline.

    ``None`` means insufficient data (no baseline seeded yet).
    """

    revenue: int | None = None
    efficiency: int | None = None
    active_vehicles: int | None = None
    alerts: int | None = None


class TrendPoint(BaseModel):
    """One folded snapshot, kept for charting."""

    timestamp: datetime
    snapshot: FleetSnapshot
    baseline: HistoricalBaseline


# ═══════════════════════════════════════════════════════════════════════════
# Alerts & activity
# ═══════════════════════════════════════════════════════════════════════════

class Alert(BaseModel):
    """Condition-based alert, regenerated in full each evaluation pass."""

    id: int
    type: AlertType
    severity: AlertSeverity
    unit_id: str
    message: str
    timestamp: datetime


class ActivityItem(BaseModel):
    """Entry in the live activity feed."""

    id: int
    icon: str
    message: str
    category: ActivityCategory = "info"
    unit_id: str | None = None
    timestamp: datetime


# ═══════════════════════════════════════════════════════════════════════════
# Predictions & insights
# ═══════════════════════════════════════════════════════════════════════════

class MaintenancePrediction(BaseModel):
    """Maintenance risk for one unit."""

    unit_id: str
    risk_score: int = Field(ge=0, le=100)
    days_until_maintenance: int = Field(ge=1)
    recommended_action: Literal["immediate_service", "monitor"]
    confidence: float = Field(ge=0, le=1)
    source: str = "fallback"


class BatteryPrediction(BaseModel):
    """Remaining battery life (vehicles) or flight time (drones), in hours."""

    unit_id: str
    hours_remaining: float = Field(ge=0, le=24)
    confidence: float = Field(ge=0, le=1)
    source: str = "fallback"


class DemandPrediction(BaseModel):
    """Expected ride demand at a location and hour."""

    demand_score: int = Field(ge=0, le=100)
    recommendation: str
    confidence: float = Field(ge=0, le=1)
    source: str = "fallback"


class UnitPrediction(BaseModel):
    """Cached prediction state for one unit; never merged into unit fields."""

    unit_id: str
    maintenance: MaintenancePrediction | None = None
    battery: BatteryPrediction | None = None
    updated_at: datetime


class Insight(BaseModel):
    """Advisory recommendation. Never mutates fleet state by itself."""

    id: int
    type: str
    title: str
    recommendation: str
    confidence: float = Field(ge=0, le=100, description="Confidence (%)")
    impact: str
    action: str
    source: str = "fallback"


class FleetSummary(BaseModel):
    """Compact fleet description sent to insight providers."""

    total_vehicles: int
    active_vehicles: int
    average_battery: float
    total_drones: int
    active_drones: int
    critical_alerts: int
    low_battery_vehicles: int
    high_risk_units: int
    hour: int = Field(default=12, ge=0, le=23, description="Local hour the summary was taken")
    vehicle_lines: list[str] = Field(default_factory=list)
    """One ``"<id>: <status>, <battery>% battery, <address>"`` line per vehicle."""


# ═══════════════════════════════════════════════════════════════════════════
# Quick actions
# ═══════════════════════════════════════════════════════════════════════════

class QuickActionResult(BaseModel):
    """Outcome of one quick action."""

    action: QuickActionName
    success: bool = True
    message: str
    affected_units: list[str] = Field(default_factory=list)
    demand: DemandPrediction | None = None
