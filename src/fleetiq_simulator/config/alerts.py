"""Alert thresholds."""

from pydantic import BaseModel, Field


class AlertConfig(BaseModel):
    """Thresholds and cosmetic timestamp staggering for generated alerts."""

    low_battery_pct: float = Field(default=35.0, ge=0, le=100, description="Vehicles below this level raise a battery alert")
    critical_battery_pct: float = Field(default=20.0, ge=0, le=100, description="Battery alerts below this level are critical")
    high_efficiency_pct: float = Field(
        default=95.0, ge=0, le=100,
        description="Active vehicles above this efficiency raise a performance alert",
    )
    stagger_timestamps: bool = Field(
        default=True,
        description="Back-date maintenance/performance alerts by a random offset. "
                    "Cosmetic only; disable for reproducible timestamps.",
    )
    maintenance_stagger_s: float = Field(default=3600.0, ge=0, description="Maximum back-dating of maintenance alerts")
    performance_stagger_s: float = Field(default=1800.0, ge=0, description="Maximum back-dating of performance alerts")
