"""HTTP client for the fleet API, used by the Streamlit dashboard.

Thin wrapper over a ``requests.Session``: every method returns decoded JSON
and raises ``FleetAPIError`` with the server's ``detail`` on a non-2xx reply.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


class FleetAPIError(RuntimeError):
    """The API answered with an error status or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FleetAPIClient:
    """Calls the fleet API endpoints the dashboard renders."""

    def __init__(self, base_url: str | None = None, timeout: float = 10.0,
                 session: requests.Session | None = None) -> None:
        self.base_url = (base_url or os.getenv("FLEETIQ_API_URL") or DEFAULT_API_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise FleetAPIError(f"{method} {path} failed: {exc}") from exc

        if not response.ok:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            logger.warning("%s %s -> %d: %s", method, path, response.status_code, detail)
            raise FleetAPIError(str(detail), status_code=response.status_code)
        return response.json()

    # ── Reads ─────────────────────────────────────────────────────────────

    def health(self) -> dict:
        return self._request("GET", "/health")

    def units(self) -> dict:
        return self._request("GET", "/fleet/units")

    def snapshot(self) -> dict:
        return self._request("GET", "/fleet/snapshot")

    def trends(self) -> dict:
        return self._request("GET", "/fleet/trends")

    def alerts(self) -> list[dict]:
        return self._request("GET", "/fleet/alerts")

    def activity(self) -> list[dict]:
        return self._request("GET", "/fleet/activity")

    def predictions(self) -> dict[str, dict]:
        return self._request("GET", "/fleet/predictions")

    def insights(self) -> list[dict]:
        return self._request("GET", "/ai/insights")

    def narrative(self) -> str:
        return self._request("GET", "/fleet/narrative")["narrative"]

    # ── Actions ───────────────────────────────────────────────────────────

    def add_unit(self, kind: str, unit_type: str, location: str, battery: float = 100.0) -> dict:
        return self._request(
            "POST", f"/fleet/units/{kind}",
            json={"type": unit_type, "location": location, "battery": battery},
        )

    def remove_unit(self, unit_id: str) -> dict:
        return self._request("DELETE", f"/fleet/units/{unit_id}")

    def quick_action(self, name: str) -> dict:
        return self._request("POST", f"/fleet/actions/{name}")

    def generate_insights(self) -> list[dict]:
        return self._request("POST", "/ai/insights")

    def refresh_predictions(self) -> dict[str, dict]:
        return self._request("POST", "/fleet/predictions/refresh")
