"""Whole-number rounding shared by trend percentages and prediction scores."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Nearest integer, halves toward +∞: 72.5 → 73, −2.5 → −2."""
    return int(math.floor(value + 0.5))
