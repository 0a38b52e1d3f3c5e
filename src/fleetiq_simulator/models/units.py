"""Unit model — vehicles and drones tracked by the fleet simulation.

A unit is a tagged union discriminated by ``kind``:

  Vehicle  →  id ``CAB-NNN``, earns revenue while active
  Drone    →  id ``DRN-NNN``, no revenue concept

The engine mutates ``status``, ``battery``, ``efficiency``, ``revenue`` and the
charging timestamps in place.  Every other field is descriptive and only read
by the view layer and the alert generator.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

UnitKind = Literal["vehicle", "drone"]
UnitStatus = Literal["active", "charging", "maintenance"]

ID_PREFIXES: dict[str, str] = {"vehicle": "CAB", "drone": "DRN"}


class Location(BaseModel):
    """Static structured position; only cosmetic animation moves it in the view."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    address: str


class UnitBase(BaseModel):
    """Fields shared by every unit variant."""

    id: str = Field(description="CAB-NNN / DRN-NNN, unique within the variant")
    type: str = Field(min_length=1, description="Model label, e.g. 'Tesla Model 3'")
    status: UnitStatus = "active"
    battery: float = Field(default=100.0, ge=0, le=100, description="Charge remaining (%)")
    location: Location
    efficiency: float = Field(ge=0, le=100, description="Synthetic performance score (%)")
    destination: str | None = None
    eta: int | None = Field(default=None, description="Minutes to destination")
    last_service: date


class Vehicle(UnitBase):
    """Autonomous cab."""

    kind: Literal["vehicle"] = "vehicle"
    passenger: str | None = None
    revenue: float = Field(default=0.0, ge=0, description="Cumulative fares ($)")
    mileage: int = Field(default=0, ge=0)
    last_charge_time: datetime | None = None
    charging_start_time: datetime | None = None


class Drone(UnitBase):
    """Delivery drone."""

    kind: Literal["drone"] = "drone"
    package: str | None = None
    weight: str = "0kg"
    flight_hours: int = Field(default=0, ge=0)


Unit = Annotated[Union[Vehicle, Drone], Field(discriminator="kind")]


class NewUnitRequest(BaseModel):
    """Attributes supplied by an explicit "add unit" action.

    ``type`` and ``location`` (an address) must be non-blank.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    type: str = Field(min_length=1, description="Model label for the new unit")
    location: str = Field(min_length=1, description="Address the unit is deployed at")
    battery: float = Field(default=100.0, ge=0, le=100, description="Initial charge (%)")
