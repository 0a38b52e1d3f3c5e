"""Neural prediction provider: small dense networks evaluated with numpy.

Networks (Glorot-uniform weights, zero biases, seeded):

  battery  4 → 10 relu → 5 relu → 1 linear
           inputs  [battery/100, efficiency/100, mileage/100000, 0.8]
           output  × 24 h, clamped to [1, 24]

  demand   3 → 8 relu → 4 relu → 1 sigmoid
           inputs  [hour/24, downtown ∈ {0,1}, weather ∈ {1, 0.5}]
           output  × 100

The weights are never trained, so outputs are plausible-looking but carry no
signal.  Maintenance risk uses the same formula as the rule-based provider,
reported with the backend confidence (0.88).  Drone flight time has no
network and is computed from flight hours.

A non-finite network output raises ``ProviderUnavailable``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Sequence

import numpy as np

from fleetiq_simulator.engine.rounding import round_half_up
from fleetiq_simulator.errors import ProviderUnavailable
from fleetiq_simulator.models.results import BatteryPrediction, DemandPrediction, MaintenancePrediction
from fleetiq_simulator.models.units import Drone, Vehicle
from fleetiq_simulator.providers.fallback import (
    demand_recommendation,
    drone_flight_time,
    maintenance_risk,
)

logger = logging.getLogger(__name__)

# Fixed "age" input; the battery network has no real signal for it.
BATTERY_AGE_INPUT = 0.8


def _relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0.0)


def _sigmoid(x: np.ndarray) -> np.ndarray:
    return 1.0 / (1.0 + np.exp(-x))


def _linear(x: np.ndarray) -> np.ndarray:
    return x


@dataclass
class DenseNetwork:
    """Feed-forward network: a stack of (weights, bias) layers.

    Hidden layers use relu; the output layer uses ``output_activation``.
    """

    layer_sizes: Sequence[int]
    output_activation: Callable[[np.ndarray], np.ndarray] = _linear
    seed: int = 0
    weights: list[np.ndarray] = field(init=False, repr=False)
    biases: list[np.ndarray] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        rng = np.random.default_rng(self.seed)
        self.weights = []
        self.biases = []
        for fan_in, fan_out in zip(self.layer_sizes[:-1], self.layer_sizes[1:]):
            limit = np.sqrt(6.0 / (fan_in + fan_out))
            self.weights.append(rng.uniform(-limit, limit, size=(fan_in, fan_out)))
            self.biases.append(np.zeros(fan_out))

    def forward(self, inputs: Sequence[float]) -> float:
        x = np.asarray(inputs, dtype=float)
        if x.shape != (self.layer_sizes[0],):
            raise ValueError(f"Expected {self.layer_sizes[0]} inputs, got shape {x.shape}")
        last = len(self.weights) - 1
        for i, (w, b) in enumerate(zip(self.weights, self.biases)):
            x = x @ w + b
            x = self.output_activation(x) if i == last else _relu(x)
        return float(x[0])


def build_battery_network(seed: int) -> DenseNetwork:
    return DenseNetwork(layer_sizes=(4, 10, 5, 1), output_activation=_linear, seed=seed)


def build_demand_network(seed: int) -> DenseNetwork:
    return DenseNetwork(layer_sizes=(3, 8, 4, 1), output_activation=_sigmoid, seed=seed + 1)


class NeuralPredictionProvider:
    """Battery and demand inference through local dense networks."""

    name = "neural"

    def __init__(self, seed: int = 7, today_fn: Callable[[], date] = date.today) -> None:
        self.battery_network = build_battery_network(seed)
        self.demand_network = build_demand_network(seed)
        self._today = today_fn
        logger.info("Neural prediction provider initialised (seed=%d)", seed)

    async def predict_maintenance(
        self,
        unit_id: str,
        usage_metric: float | None,
        health_metric: float | None,
        last_service: date | None,
    ) -> MaintenancePrediction:
        return maintenance_risk(
            unit_id, usage_metric, health_metric, last_service,
            today=self._today(), confidence=0.88, source=self.name,
        )

    async def predict_battery_life(self, unit: Vehicle | Drone) -> BatteryPrediction:
        if unit.kind == "drone":
            return BatteryPrediction(
                unit_id=unit.id, hours_remaining=drone_flight_time(unit), confidence=0.85, source=self.name,
            )
        raw = self.battery_network.forward([
            unit.battery / 100,
            unit.efficiency / 100,
            unit.mileage / 100_000,
            BATTERY_AGE_INPUT,
        ])
        hours = _finite(raw, "battery") * 24
        return BatteryPrediction(
            unit_id=unit.id,
            hours_remaining=min(24.0, max(1.0, hours)),
            confidence=0.85,
            source=self.name,
        )

    async def predict_demand(self, hour: int, downtown: bool, weather_good: bool) -> DemandPrediction:
        raw = self.demand_network.forward([hour / 24, 1.0 if downtown else 0.0, 1.0 if weather_good else 0.5])
        score = _finite(raw, "demand") * 100
        return DemandPrediction(
            demand_score=max(0, min(100, round_half_up(score))),
            recommendation=demand_recommendation(score),
            confidence=0.82,
            source=self.name,
        )


def _finite(value: float, network: str) -> float:
    if not np.isfinite(value):
        raise ProviderUnavailable(f"{network} network produced a non-finite output")
    return value
