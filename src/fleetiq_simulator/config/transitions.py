"""State transition rates and thresholds."""

from pydantic import BaseModel, Field


class TransitionConfig(BaseModel):
    """Per-tick battery, revenue and efficiency rules.

    Ranges are half-open ``[low, high)`` uniform draws.
    """

    # --- Charging vehicles ---
    charge_rate_min: float = Field(default=1.0, ge=0, description="Battery gained per tick while charging (low)")
    charge_rate_max: float = Field(default=4.0, gt=0, description="Battery gained per tick while charging (high)")
    charging_efficiency_loss_max: float = Field(
        default=2.0, ge=0,
        description="Maximum efficiency points lost per tick while idle on a charger",
    )
    charging_efficiency_floor: float = Field(
        default=85.0, ge=0, le=100,
        description="Charging never decays efficiency below this value",
    )
    charge_complete_pct: float = Field(
        default=95.0, gt=0, le=100,
        description="Battery level at which a charging vehicle returns to active",
    )

    # --- Active vehicles ---
    vehicle_drain_min: float = Field(default=0.5, ge=0, description="Battery drained per tick while active (low)")
    vehicle_drain_max: float = Field(default=2.0, gt=0, description="Battery drained per tick while active (high)")
    vehicle_battery_floor: float = Field(
        default=5.0, ge=0, le=100,
        description="Active vehicles never drain below this level",
    )
    fare_min: float = Field(default=2.0, ge=0, description="Revenue per tick with a passenger (low)")
    fare_max: float = Field(default=5.0, gt=0, description="Revenue per tick with a passenger (high)")
    idle_revenue_max: float = Field(default=0.5, ge=0, description="Revenue trickle per tick without a passenger (high)")
    ride_complete_probability: float = Field(
        default=0.1, ge=0, le=1.0,
        description="Chance per tick that a ride-completed notification is emitted",
    )
    vehicle_efficiency_min: float = Field(default=85.0, ge=0, le=100, description="Resampled active efficiency (low)")
    vehicle_efficiency_max: float = Field(default=100.0, ge=0, le=100, description="Resampled active efficiency (high)")
    low_battery_pct: float = Field(
        default=25.0, ge=0, le=100,
        description="Below this level an active vehicle may be routed to a charger",
    )
    route_to_charging_probability: float = Field(
        default=0.3, ge=0, le=1.0,
        description="Chance per tick that a low-battery vehicle is routed to a charger",
    )

    # --- Drones ---
    drone_drain_min: float = Field(default=0.5, ge=0, description="Battery drained per tick while flying (low)")
    drone_drain_max: float = Field(default=2.5, gt=0, description="Battery drained per tick while flying (high)")
    drone_battery_floor: float = Field(default=10.0, ge=0, le=100, description="Flying drones never drain below this")
    drone_efficiency_min: float = Field(default=80.0, ge=0, le=100, description="Resampled drone efficiency (low)")
    drone_efficiency_max: float = Field(default=100.0, ge=0, le=100, description="Resampled drone efficiency (high)")

    # --- Quick actions ---
    route_boost_min: float = Field(default=5.0, ge=0, description="optimize_routes efficiency boost (low)")
    route_boost_max: float = Field(default=10.0, gt=0, description="optimize_routes efficiency boost (high)")
    smart_charging_pct: float = Field(
        default=35.0, ge=0, le=100,
        description="smart_charging sends active units below this level to a charger",
    )

    strict: bool = Field(
        default=False,
        description="Re-raise per-unit errors instead of logging and skipping the unit",
    )
