"""FleetIQ fleet simulator — vehicle and drone fleet state simulation."""

__version__ = "1.0.0"
