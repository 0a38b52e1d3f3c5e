"""Unit construction — new units from an add request, plus the demo seed fleet.

New-unit defaults:
  id          = PREFIX-NNN, NNN = existing units of that kind + 1 (3 digits)
  status      = active
  efficiency  ~ U[85, 100)
  location    = fleet origin ± 0.1° jitter, address from the request
  vehicle     → no passenger/destination, revenue 0, mileage ~ int U[0, 50000)
  drone       → no package, weight "0kg", flight_hours ~ int U[0, 200)
  last_service = creation date
"""

from __future__ import annotations

from datetime import date, datetime

from fleetiq_simulator.engine.rng import RandomSource
from fleetiq_simulator.models.units import (
    ID_PREFIXES,
    Drone,
    Location,
    NewUnitRequest,
    UnitKind,
    Vehicle,
)

FLEET_ORIGIN = (34.0522, -118.2437)
"""Downtown LA; new units are placed around it."""

LOCATION_JITTER_DEG = 0.1

NEW_UNIT_EFFICIENCY = (85.0, 100.0)
MAX_NEW_VEHICLE_MILEAGE = 50_000
MAX_NEW_DRONE_FLIGHT_HOURS = 200


def next_unit_id(kind: UnitKind, existing_count: int) -> str:
    """Sequential id for the next unit of ``kind``, e.g. 3 vehicles → ``CAB-004``."""
    return f"{ID_PREFIXES[kind]}-{existing_count + 1:03d}"


def create_unit(
    kind: UnitKind,
    request: NewUnitRequest,
    existing_count: int,
    rng: RandomSource,
    today: date,
) -> Vehicle | Drone:
    """Build a fully-populated unit from a validated add request."""
    lat0, lng0 = FLEET_ORIGIN
    location = Location(
        lat=lat0 + (rng.random() - 0.5) * 2 * LOCATION_JITTER_DEG,
        lng=lng0 + (rng.random() - 0.5) * 2 * LOCATION_JITTER_DEG,
        address=request.location,
    )
    common = dict(
        id=next_unit_id(kind, existing_count),
        type=request.type,
        status="active",
        battery=request.battery,
        location=location,
        efficiency=float(rng.uniform(*NEW_UNIT_EFFICIENCY)),
        last_service=today,
    )
    if kind == "vehicle":
        return Vehicle(
            **common,
            revenue=0.0,
            mileage=int(rng.integers(0, MAX_NEW_VEHICLE_MILEAGE)),
        )
    if kind == "drone":
        return Drone(
            **common,
            weight="0kg",
            flight_hours=int(rng.integers(0, MAX_NEW_DRONE_FLIGHT_HOURS)),
        )
    raise ValueError(f"Unknown unit kind: {kind!r}")


# ═══════════════════════════════════════════════════════════════════════════
# Demo seed fleet
# ═══════════════════════════════════════════════════════════════════════════

def seed_vehicles(now: datetime) -> list[Vehicle]:
    """Three cabs around Los Angeles; CAB-002 starts on a charger."""
    return [
        Vehicle(
            id="CAB-001",
            type="Tesla Model 3",
            status="active",
            battery=87,
            location=Location(lat=34.0522, lng=-118.2437, address="Downtown LA"),
            passenger="John D.",
            destination="LAX Airport",
            revenue=45.20,
            eta=12,
            efficiency=94,
            mileage=45_000,
            last_service=date(2024, 1, 15),
        ),
        Vehicle(
            id="CAB-002",
            type="Tesla Model Y",
            status="charging",
            battery=34,
            location=Location(lat=34.0689, lng=-118.4452, address="Santa Monica"),
            revenue=128.50,
            efficiency=89,
            mileage=32_000,
            last_service=date(2024, 2, 1),
            charging_start_time=now,
        ),
        Vehicle(
            id="CAB-003",
            type="Tesla Model S",
            status="active",
            battery=72,
            location=Location(lat=34.1478, lng=-118.1445, address="Pasadena"),
            passenger="Maria S.",
            destination="Hollywood",
            revenue=89.75,
            eta=18,
            efficiency=96,
            mileage=28_000,
            last_service=date(2024, 1, 30),
        ),
    ]


def seed_drones() -> list[Drone]:
    """Two drones; DRN-002 is grounded for maintenance."""
    return [
        Drone(
            id="DRN-001",
            type="Delivery Quad",
            status="active",
            battery=61,
            location=Location(lat=34.0194, lng=-118.4108, address="Culver City"),
            package="Medical Supplies",
            destination="Cedar-Sinai Hospital",
            weight="2.3kg",
            eta=8,
            efficiency=91,
            flight_hours=150,
            last_service=date(2024, 2, 10),
        ),
        Drone(
            id="DRN-002",
            type="Heavy Lifter",
            status="maintenance",
            battery=0,
            location=Location(lat=34.0522, lng=-118.2437, address="Service Hub"),
            weight="0kg",
            efficiency=0,
            flight_hours=300,
            last_service=date(2024, 1, 20),
        ),
    ]
