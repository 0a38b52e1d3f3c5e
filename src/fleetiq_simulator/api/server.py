"""FastAPI server — HTTP surface of the fleet simulation.

Run with:
    uvicorn fleetiq_simulator.api.server:app --port 8000

Or:
    python -m fleetiq_simulator.api.server

The app owns one ``FleetSimulation`` (built in the lifespan unless injected)
and drives it with a ``SimulationClock`` on the server's event loop.  Every
handler is ``async def`` so that all mutations run on that same loop.

Endpoints:
    GET    /health                         — liveness + provider names
    GET    /fleet/units                    — vehicles and drones
    GET    /fleet/units/{unit_id}          — one unit (404 if unknown)
    POST   /fleet/units/{kind}             — add a vehicle or drone
    DELETE /fleet/units/{unit_id}          — remove a unit (404 if unknown)
    GET    /fleet/snapshot                 — aggregate fleet metrics
    GET    /fleet/trends                   — percentage change vs baseline
    GET    /fleet/alerts                   — alerts, most recent first
    GET    /fleet/activity                 — live activity feed
    GET    /fleet/narrative                — plain-English fleet report
    POST   /fleet/tick                     — advance the simulation one tick
    POST   /fleet/actions/{name}           — run a quick action
    GET    /fleet/predictions              — cached unit predictions
    GET    /fleet/predictions/{unit_id}    — one unit's cached prediction
    POST   /fleet/predictions/refresh      — recompute predictions
    GET    /ai/insights                    — latest insights
    POST   /ai/insights                    — generate fresh insights
    POST   /ml/predict-maintenance         — maintenance risk from raw inputs
    POST   /ml/predict-battery             — battery life for a unit
    POST   /ml/predict-demand              — demand at an hour/location
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from fleetiq_simulator import __version__
from fleetiq_simulator.api.narrative import generate_fleet_narrative
from fleetiq_simulator.config.fleet import FleetConfig
from fleetiq_simulator.config.provider import ProviderConfig
from fleetiq_simulator.engine.clock import SimulationClock
from fleetiq_simulator.engine.fleet import FleetSimulation
from fleetiq_simulator.errors import UnitNotFoundError, UnknownQuickActionError
from fleetiq_simulator.models.results import (
    ActivityItem,
    Alert,
    BatteryPrediction,
    DemandPrediction,
    FleetSnapshot,
    HistoricalBaseline,
    Insight,
    MaintenancePrediction,
    QuickActionResult,
    TrendPercentages,
    UnitPrediction,
)
from fleetiq_simulator.models.units import Drone, NewUnitRequest, Vehicle

logger = logging.getLogger(__name__)

router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class UnitsResponse(BaseModel):
    """Response from GET /fleet/units."""
    vehicles: list[Vehicle]
    drones: list[Drone]


class TrendsResponse(BaseModel):
    """Response from GET /fleet/trends."""
    percentages: TrendPercentages
    baseline: HistoricalBaseline | None = None
    history: list[FleetSnapshot] = Field(default_factory=list, description="Folded snapshots, oldest first")


class TickResponse(BaseModel):
    """Response from POST /fleet/tick."""
    processed: int
    skipped: list[str]
    events: list[str] = Field(description="Notification messages emitted by the tick")


class NarrativeResponse(BaseModel):
    narrative: str


class MaintenanceRequest(BaseModel):
    """Request body for /ml/predict-maintenance. Missing inputs use the formula defaults."""
    unit_id: str
    mileage: float | None = Field(default=None, ge=0, description="Usage metric; drones use flight hours × 50")
    battery_health: float | None = Field(default=None, ge=0, le=100, description="Health metric (%)")
    last_service: date | None = None


class BatteryRequest(BaseModel):
    """Request body for /ml/predict-battery."""
    unit_id: str


class DemandRequest(BaseModel):
    """Request body for /ml/predict-demand."""
    hour: int | None = Field(default=None, ge=0, le=23, description="Hour of day; None = now")
    downtown: bool = True
    weather_good: bool = True


def get_fleet(request: Request) -> FleetSimulation:
    return request.app.state.fleet


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@router.get("/health")
async def health_check(fleet: FleetSimulation = Depends(get_fleet)):
    """Health check for deployment platforms."""
    return {
        "status": "ok",
        "version": __version__,
        "providers": {"predictions": fleet.predictions.name, "insights": fleet.insights.name},
        "units": len(fleet.units),
    }


# ── Units ─────────────────────────────────────────────────────────────────

@router.get("/fleet/units", response_model=UnitsResponse)
async def list_units(fleet: FleetSimulation = Depends(get_fleet)):
    return UnitsResponse(vehicles=fleet.vehicles, drones=fleet.drones)


@router.get("/fleet/units/{unit_id}", response_model=Vehicle | Drone)
async def get_unit(unit_id: str, fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.get_unit(unit_id)


@router.post("/fleet/units/{kind}", response_model=Vehicle | Drone, status_code=status.HTTP_201_CREATED)
async def add_unit(
    kind: Literal["vehicle", "drone"],
    req: NewUnitRequest,
    fleet: FleetSimulation = Depends(get_fleet),
):
    """Add a unit. Invalid attributes are rejected with 422 before any mutation.

    The unit's first prediction is best-effort: a failed refresh is logged
    and the unit stays without a cached prediction until the next refresh.
    """
    unit = fleet.add_unit(kind, req)
    try:
        await fleet.refresh_predictions([unit.id])
    except Exception:
        logger.exception("Prediction refresh failed for new unit %s", unit.id)
    return unit


@router.delete("/fleet/units/{unit_id}", response_model=Vehicle | Drone)
async def remove_unit(unit_id: str, fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.remove_unit(unit_id)


# ── Derived views ─────────────────────────────────────────────────────────

@router.get("/fleet/snapshot", response_model=FleetSnapshot)
async def get_snapshot(fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.get_snapshot()


@router.get("/fleet/trends", response_model=TrendsResponse)
async def get_trends(fleet: FleetSimulation = Depends(get_fleet)):
    return TrendsResponse(
        percentages=fleet.get_trend_percentages(),
        baseline=fleet.trends.baseline,
        history=[point.snapshot for point in fleet.trends.history],
    )


@router.get("/fleet/alerts", response_model=list[Alert])
async def get_alerts(fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.get_alerts()


@router.get("/fleet/activity", response_model=list[ActivityItem])
async def get_activity(fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.get_activity()


@router.get("/fleet/narrative", response_model=NarrativeResponse)
async def get_narrative(fleet: FleetSimulation = Depends(get_fleet)):
    return NarrativeResponse(narrative=generate_fleet_narrative(fleet))


# ── Mutations ─────────────────────────────────────────────────────────────

@router.post("/fleet/tick", response_model=TickResponse)
async def manual_tick(fleet: FleetSimulation = Depends(get_fleet)):
    """Advance every unit by one transition outside the clock schedule."""
    report = fleet.tick()
    return TickResponse(
        processed=report.processed,
        skipped=report.skipped,
        events=[event.message for event in report.events],
    )


@router.post("/fleet/actions/{name}", response_model=QuickActionResult)
async def quick_action(name: str, fleet: FleetSimulation = Depends(get_fleet)):
    return await fleet.apply_quick_action(name)


# ── Predictions & insights ────────────────────────────────────────────────

@router.get("/fleet/predictions", response_model=dict[str, UnitPrediction])
async def get_predictions(fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.get_predictions()


@router.get("/fleet/predictions/{unit_id}", response_model=UnitPrediction | None)
async def get_prediction(unit_id: str, fleet: FleetSimulation = Depends(get_fleet)):
    """Cached prediction; ``null`` for unknown or removed units."""
    return fleet.get_prediction(unit_id)


@router.post("/fleet/predictions/refresh", response_model=dict[str, UnitPrediction])
async def refresh_predictions(fleet: FleetSimulation = Depends(get_fleet)):
    return await fleet.refresh_predictions()


@router.get("/ai/insights", response_model=list[Insight])
async def latest_insights(fleet: FleetSimulation = Depends(get_fleet)):
    return fleet.latest_insights


@router.post("/ai/insights", response_model=list[Insight])
async def generate_insights(fleet: FleetSimulation = Depends(get_fleet)):
    return await fleet.generate_insights()


@router.post("/ml/predict-maintenance", response_model=MaintenancePrediction)
async def predict_maintenance(req: MaintenanceRequest, fleet: FleetSimulation = Depends(get_fleet)):
    return await fleet.predictions.predict_maintenance(
        req.unit_id, req.mileage, req.battery_health, req.last_service,
    )


@router.post("/ml/predict-battery", response_model=BatteryPrediction)
async def predict_battery(req: BatteryRequest, fleet: FleetSimulation = Depends(get_fleet)):
    unit = fleet.get_unit(req.unit_id).model_copy()
    return await fleet.predictions.predict_battery_life(unit)


@router.post("/ml/predict-demand", response_model=DemandPrediction)
async def predict_demand(req: DemandRequest, fleet: FleetSimulation = Depends(get_fleet)):
    return await fleet.predict_demand(req.hour, req.downtown, req.weather_good)


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

async def _unit_not_found(request: Request, exc: UnitNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _unknown_action(request: Request, exc: UnknownQuickActionError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)})


def load_config() -> FleetConfig:
    """Scenario file from ``FLEETIQ_CONFIG`` when set, otherwise defaults plus env providers."""
    path = os.getenv("FLEETIQ_CONFIG")
    if path:
        logger.info("Loading fleet config from %s", path)
        return FleetConfig.from_yaml(path)
    return FleetConfig(provider=ProviderConfig.from_env())


def create_app(fleet: FleetSimulation | None = None, start_clock: bool = True) -> FastAPI:
    """Build the API app.

    Args:
        fleet: Simulation to serve; built by ``load_config()`` at startup when
            omitted.
        start_clock: Run the periodic tick/alert/trend schedules while the
            app is up.  Tests pass ``False`` and drive ``/fleet/tick``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.fleet is None:
            app.state.fleet = FleetSimulation(load_config())
        sim: FleetSimulation = app.state.fleet
        await sim.refresh_predictions()
        clock = SimulationClock(sim)
        if start_clock:
            clock.start()
        try:
            yield
        finally:
            await clock.stop()

    app = FastAPI(
        title="FleetIQ Fleet Simulator API",
        version=__version__,
        description=(
            "Live simulation of an autonomous cab and delivery drone fleet: unit state, "
            "fleet metrics, trends, alerts, quick actions, predictions and AI insights."
        ),
        lifespan=lifespan,
    )
    app.state.fleet = fleet
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(UnitNotFoundError, _unit_not_found)
    app.add_exception_handler(UnknownQuickActionError, _unknown_action)
    app.include_router(router)
    return app


app = create_app()


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    uvicorn.run(
        "fleetiq_simulator.api.server:app",
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    main()
