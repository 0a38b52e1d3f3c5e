"""Injectable random source.

Every stochastic rule draws from an object with the ``numpy.random.Generator``
interface subset below, so tests can pass a seeded generator or a scripted
fake that forces a specific branch.
"""

from __future__ import annotations

from typing import Protocol

import numpy as np


class RandomSource(Protocol):
    """Subset of ``numpy.random.Generator`` used by the engine."""

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float: ...

    def random(self) -> float: ...

    def integers(self, low: int, high: int) -> int: ...


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Seeded generator for reproducible runs; ``None`` = non-deterministic."""
    return np.random.default_rng(seed)
