"""Unit and result models — the simulation's data contracts."""

from fleetiq_simulator.models.units import (
    Drone,
    Location,
    NewUnitRequest,
    Unit,
    UnitKind,
    UnitStatus,
    Vehicle,
)
from fleetiq_simulator.models.results import (
    ActivityItem,
    Alert,
    BatteryPrediction,
    DemandPrediction,
    FleetSnapshot,
    FleetSummary,
    HistoricalBaseline,
    Insight,
    MaintenancePrediction,
    QuickActionResult,
    TrendPercentages,
    TrendPoint,
    UnitPrediction,
)

__all__ = [
    "Drone",
    "Location",
    "NewUnitRequest",
    "Unit",
    "UnitKind",
    "UnitStatus",
    "Vehicle",
    "ActivityItem",
    "Alert",
    "BatteryPrediction",
    "DemandPrediction",
    "FleetSnapshot",
    "FleetSummary",
    "HistoricalBaseline",
    "Insight",
    "MaintenancePrediction",
    "QuickActionResult",
    "TrendPercentages",
    "TrendPoint",
    "UnitPrediction",
]
