"""Engine — unit transitions, metrics, trends, alerts and quick actions.

``FleetSimulation`` (engine.fleet) and ``SimulationClock`` (engine.clock)
compose these pieces and are imported from their own modules.
"""

from fleetiq_simulator.engine.rng import make_rng
from fleetiq_simulator.engine.units import create_unit, next_unit_id, seed_drones, seed_vehicles
from fleetiq_simulator.engine.transitions import TickReport, TransitionEvent, apply_tick, step_drone, step_vehicle
from fleetiq_simulator.engine.metrics import compute_snapshot
from fleetiq_simulator.engine.trends import TrendTracker, percentage_change
from fleetiq_simulator.engine.rounding import round_half_up
from fleetiq_simulator.engine.alerts import generate_alerts, most_recent_first
from fleetiq_simulator.engine.activity import ActivityFeed

__all__ = [
    "make_rng",
    "create_unit",
    "next_unit_id",
    "seed_vehicles",
    "seed_drones",
    "apply_tick",
    "step_vehicle",
    "step_drone",
    "TickReport",
    "TransitionEvent",
    "compute_snapshot",
    "TrendTracker",
    "percentage_change",
    "round_half_up",
    "generate_alerts",
    "most_recent_first",
    "ActivityFeed",
]
