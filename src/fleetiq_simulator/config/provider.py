"""Prediction / insight provider selection."""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, Field


class ProviderConfig(BaseModel):
    """Which prediction and insight providers back the fleet.

    - **fallback**: rule-based, in-process, no external calls.
    - **neural**: small feed-forward networks for battery/demand inference,
      rule-based maintenance and insights.
    - **openai**: neural predictions plus OpenAI chat-completion insights.
    - **auto**: ``openai`` when an API key is configured, else ``neural``.
    """

    mode: Literal["auto", "fallback", "neural", "openai"] = Field(
        default="auto",
        description="Provider mode: 'auto', 'fallback', 'neural' or 'openai'.",
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API key (None disables OpenAI)")
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model used for fleet insights")
    timeout_s: float = Field(default=10.0, gt=0, description="Timeout for one external provider call")
    max_tokens: int = Field(default=1500, ge=1, description="Completion token budget for insights")
    temperature: float = Field(default=0.7, ge=0, le=2.0, description="Sampling temperature for insights")
    model_seed: int = Field(default=7, description="Seed for the neural provider's weight initialisation")

    @property
    def resolved_mode(self) -> str:
        if self.mode == "auto":
            return "openai" if self.openai_api_key else "neural"
        return self.mode

    @classmethod
    def from_env(cls) -> ProviderConfig:
        """Build from ``OPENAI_API_KEY``, ``OPENAI_MODEL``, ``FLEETIQ_PROVIDER``
        and ``FLEETIQ_PROVIDER_TIMEOUT``."""
        values: dict = {"openai_api_key": os.getenv("OPENAI_API_KEY") or None}
        if os.getenv("OPENAI_MODEL"):
            values["openai_model"] = os.environ["OPENAI_MODEL"]
        if os.getenv("FLEETIQ_PROVIDER"):
            values["mode"] = os.environ["FLEETIQ_PROVIDER"]
        if os.getenv("FLEETIQ_PROVIDER_TIMEOUT"):
            values["timeout_s"] = float(os.environ["FLEETIQ_PROVIDER_TIMEOUT"])
        return cls(**values)
