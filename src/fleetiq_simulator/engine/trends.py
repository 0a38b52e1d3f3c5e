"""Trend tracker — exponentially-smoothed baselines and percentage changes.

On every fold:
  previous_revenue         = previous_revenue × 0.95         + total_revenue × 0.05
  previous_efficiency      = previous_efficiency × 0.95      + average_efficiency × 0.05
  previous_active_vehicles = previous_active_vehicles × 0.9  + active_vehicles × 0.1
  previous_alerts          = previous_alerts × 0.9           + active_alerts × 0.1

The baseline is seeded once from the starting fleet (not zero) so the first
render does not show an artificial 100% jump.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime

from fleetiq_simulator.config.trends import TrendConfig
from fleetiq_simulator.engine.rounding import round_half_up
from fleetiq_simulator.models.results import (
    FleetSnapshot,
    HistoricalBaseline,
    TrendPercentages,
    TrendPoint,
)


def percentage_change(current: float, previous: float) -> int:
    """Whole-percent change of ``current`` against ``previous``.

    previous == 0 → 100 if current > 0 else 0.  Halves round toward +∞.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


class TrendTracker:
    """Owns the ``HistoricalBaseline`` and a bounded history of folds.

    Usage::

        tracker = TrendTracker(TrendConfig())
        tracker.seed(initial_snapshot, now)
        ...
        tracker.fold(current_snapshot, now)      # on its own schedule
        tracker.percentages(current_snapshot)    # on demand
    """

    def __init__(self, config: TrendConfig | None = None) -> None:
        self._cfg = config or TrendConfig()
        self._baseline: HistoricalBaseline | None = None
        self._history: deque[TrendPoint] = deque(maxlen=self._cfg.history_length)

    @property
    def baseline(self) -> HistoricalBaseline | None:
        return self._baseline

    @property
    def is_seeded(self) -> bool:
        return self._baseline is not None

    @property
    def history(self) -> list[TrendPoint]:
        """Folded snapshots, oldest first."""
        return list(self._history)

    def seed(self, snapshot: FleetSnapshot, now: datetime) -> HistoricalBaseline:
        """Set the starting baseline from the current fleet snapshot."""
        self._baseline = HistoricalBaseline(
            previous_revenue=snapshot.total_revenue,
            previous_efficiency=snapshot.average_efficiency,
            previous_active_vehicles=float(snapshot.active_vehicles),
            previous_alerts=float(snapshot.active_alerts),
            last_update_time=now,
        )
        return self._baseline

    def fold(self, snapshot: FleetSnapshot, now: datetime) -> HistoricalBaseline:
        """Blend the current snapshot into the baseline (seeds it if needed)."""
        if self._baseline is None:
            return self.seed(snapshot, now)

        b = self._baseline
        c = self._cfg
        self._baseline = HistoricalBaseline(
            previous_revenue=b.previous_revenue * c.revenue_decay
            + snapshot.total_revenue * (1 - c.revenue_decay),
            previous_efficiency=b.previous_efficiency * c.efficiency_decay
            + snapshot.average_efficiency * (1 - c.efficiency_decay),
            previous_active_vehicles=b.previous_active_vehicles * c.active_vehicles_decay
            + snapshot.active_vehicles * (1 - c.active_vehicles_decay),
            previous_alerts=b.previous_alerts * c.alerts_decay
            + snapshot.active_alerts * (1 - c.alerts_decay),
            last_update_time=now,
        )
        self._history.append(TrendPoint(timestamp=now, snapshot=snapshot, baseline=self._baseline))
        return self._baseline

    def percentages(self, snapshot: FleetSnapshot) -> TrendPercentages:
        """Change of each metric against the baseline; all ``None`` before seeding."""
        b = self._baseline
        if b is None:
            return TrendPercentages()
        return TrendPercentages(
            revenue=percentage_change(snapshot.total_revenue, b.previous_revenue),
            efficiency=percentage_change(snapshot.average_efficiency, b.previous_efficiency),
            active_vehicles=percentage_change(snapshot.active_vehicles, b.previous_active_vehicles),
            alerts=percentage_change(snapshot.active_alerts, b.previous_alerts),
        )
