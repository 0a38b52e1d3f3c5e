"""OpenAI-backed insight provider.

Sends a compact fleet summary to a chat-completions model and asks for four
insights in a fixed JSON shape.  Any failure (network, auth, timeout,
malformed JSON, schema mismatch) is raised as ``ProviderUnavailable`` so the
fallback chain can answer instead.
"""

from __future__ import annotations

import json
import logging

from openai import AsyncOpenAI
from pydantic import ValidationError

from fleetiq_simulator.config.provider import ProviderConfig
from fleetiq_simulator.errors import ProviderUnavailable
from fleetiq_simulator.models.results import FleetSummary, Insight

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a fleet optimization AI that provides actionable insights. "
    "Always respond with valid JSON only."
)

INSIGHT_SCHEMA_EXAMPLE = """{
  "insights": [
    {
      "id": 1,
      "type": "route_optimization",
      "title": "Route Optimization",
      "recommendation": "Specific recommendation",
      "confidence": 85,
      "impact": "High",
      "action": "optimize_routes"
    }
  ]
}"""


def build_prompt(summary: FleetSummary) -> str:
    """User prompt: fleet summary, one line per vehicle, then the JSON shape."""
    vehicle_details = "\n".join(summary.vehicle_lines) or "(no vehicles)"
    return (
        "You are an AI fleet management expert. Analyze this fleet data and provide "
        "4 specific, actionable insights.\n\n"
        "Fleet Summary:\n"
        f"- {summary.total_vehicles} vehicles ({summary.active_vehicles} active)\n"
        f"- Average battery: {summary.average_battery:.1f}%\n"
        f"- {summary.total_drones} drones ({summary.active_drones} active)\n"
        f"- {summary.critical_alerts} critical alerts\n\n"
        f"Vehicle Details:\n{vehicle_details}\n\n"
        "Valid actions: optimize_routes, smart_charging, predict_demand, schedule_maintenance.\n"
        f"Provide insights in this exact JSON format:\n{INSIGHT_SCHEMA_EXAMPLE}"
    )


class OpenAIInsightProvider:
    """Fleet insights from an OpenAI chat model."""

    name = "openai"

    def __init__(self, config: ProviderConfig, client: AsyncOpenAI | None = None) -> None:
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAIInsightProvider needs an API key or an explicit client")
        self._config = config
        self._client = client or AsyncOpenAI(api_key=config.openai_api_key, timeout=config.timeout_s)

    async def generate_insights(self, summary: FleetSummary) -> list[Insight]:
        try:
            response = await self._client.chat.completions.create(
                model=self._config.openai_model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(summary)},
                ],
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                response_format={"type": "json_object"},
            )
            payload = json.loads(response.choices[0].message.content or "")
            raw = payload["insights"]
            insights = [Insight(**{**item, "source": self.name}) for item in raw]
        except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
            raise ProviderUnavailable(f"OpenAI returned an unusable insight payload: {exc}") from exc
        except Exception as exc:
            raise ProviderUnavailable(f"OpenAI request failed: {exc}") from exc

        logger.info("OpenAI returned %d insights (model=%s)", len(insights), self._config.openai_model)
        return insights
