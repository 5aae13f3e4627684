"""
Shared numeric helpers for the scoring layer.

- `clamp01`: keep ratios within 0..1 for stable color output
- `nan_last`: total order for distances where NaN sorts after every number
"""

from __future__ import annotations

import math


def clamp01(x: float) -> float:
    """Clamp a number into the [0.0, 1.0] range."""
    return max(0.0, min(1.0, float(x)))


def nan_last(x: float) -> float:
    """Sort key mapping NaN to +inf so undefined distances always rank last."""
    x = float(x)
    return math.inf if math.isnan(x) else x
