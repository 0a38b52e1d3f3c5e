"""Top-level fleet configuration — bundles every section."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from fleetiq_simulator.config.alerts import AlertConfig
from fleetiq_simulator.config.clock import ClockConfig
from fleetiq_simulator.config.provider import ProviderConfig
from fleetiq_simulator.config.transitions import TransitionConfig
from fleetiq_simulator.config.trends import TrendConfig


class FleetConfig(BaseModel):
    """Complete settings bundle for one fleet simulation."""

    clock: ClockConfig = Field(default_factory=ClockConfig)
    transitions: TransitionConfig = Field(default_factory=TransitionConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
    trends: TrendConfig = Field(default_factory=TrendConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    activity_feed_size: int = Field(default=20, ge=1, description="Activity items kept, most recent first")
    seed_fleet: bool = Field(default=True, description="Populate the fleet with the demo units at start")
    random_seed: int | None = Field(
        default=None,
        description="Optional RNG seed for reproducible runs. None = non-deterministic.",
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> FleetConfig:
        """Load a scenario file, e.g. ``scenarios/default.yaml``.

        Sections left out of the file keep their defaults.  Secrets do not
        belong in the file: the OpenAI key is always read from the environment.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        config = cls(**data)
        env = ProviderConfig.from_env()
        provider = config.provider.model_copy(update={"openai_api_key": env.openai_api_key})
        return config.model_copy(update={"provider": provider})
