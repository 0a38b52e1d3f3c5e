"""Simulation clock cadences."""

from pydantic import BaseModel, Field


class ClockConfig(BaseModel):
    """Periods (seconds) of the three independent schedules."""

    tick_interval_s: float = Field(default=4.0, gt=0, description="Unit state tick period")
    alert_interval_s: float = Field(
        default=10.0, gt=0,
        description="Alert re-evaluation period (about 2.5x the tick period)",
    )
    trend_interval_s: float = Field(
        default=30.0, gt=0,
        description="Trend baseline fold period (about 7-10x the tick period)",
    )
