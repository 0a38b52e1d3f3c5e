"""Fleet error taxonomy.

Input validation uses pydantic's ``ValidationError`` directly; the classes
below cover the failures pydantic does not model.
"""


class FleetError(Exception):
    """Base class for fleet simulator errors."""


class UnitNotFoundError(FleetError, KeyError):
    """No unit with the requested id exists in the fleet."""

    def __init__(self, unit_id: str) -> None:
        super().__init__(unit_id)
        self.unit_id = unit_id

    def __str__(self) -> str:
        return f"Unit {self.unit_id!r} not found"


class UnknownQuickActionError(FleetError, ValueError):
    """Quick action name outside the supported set."""


class ProviderUnavailable(FleetError):
    """An external prediction or insight provider failed or timed out."""
