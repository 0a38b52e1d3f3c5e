"""Trend smoothing weights."""

from pydantic import BaseModel, Field


class TrendConfig(BaseModel):
    """Weight kept from the previous baseline on each fold (1 - weight goes to the snapshot)."""

    revenue_decay: float = Field(default=0.95, ge=0, le=1.0, description="Baseline weight for total revenue")
    efficiency_decay: float = Field(default=0.95, ge=0, le=1.0, description="Baseline weight for average efficiency")
    active_vehicles_decay: float = Field(default=0.9, ge=0, le=1.0, description="Baseline weight for active vehicle count")
    alerts_decay: float = Field(default=0.9, ge=0, le=1.0, description="Baseline weight for active alert count")
    history_length: int = Field(default=120, ge=1, description="Folded snapshots kept for charting")
