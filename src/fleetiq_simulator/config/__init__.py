"""Configuration models — clock, transitions, alerts, trends, providers."""

from fleetiq_simulator.config.clock import ClockConfig
from fleetiq_simulator.config.transitions import TransitionConfig
from fleetiq_simulator.config.alerts import AlertConfig
from fleetiq_simulator.config.trends import TrendConfig
from fleetiq_simulator.config.provider import ProviderConfig
from fleetiq_simulator.config.fleet import FleetConfig

__all__ = [
    "ClockConfig",
    "TransitionConfig",
    "AlertConfig",
    "TrendConfig",
    "ProviderConfig",
    "FleetConfig",
]
