"""
Color / classification mapping.

Pure lookups used by the map and plot renderers:
- `distance_color`: continuous HSL interpolation, green (near) -> red (far), for plots.
- `distance_ramp_color`: the fixed hex ramp used for map points in distance mode.
- `haplogroup_color`: Y-DNA lineage color, matched on the first two characters of the code.
"""

from __future__ import annotations

import math

from g25atlas.scoring.composite import clamp01

# Keys are exactly two characters; codes are matched on `code[:2]`, so "R1b1a2" resolves to "R1".
HAPLOGROUP_COLORS: dict[str, str] = {
    # West Eurasian
    "R1": "#ef4444",
    "R2": "#60a5fa",
    "I1": "#10b981",
    "I2": "#059669",
    "J1": "#8b5cf6",
    "J2": "#7c3aed",
    "G1": "#0891b2",
    "G2": "#06b6d4",
    "T1": "#f59e0b",
    "L1": "#34d399",
    # African
    "A0": "#27272a",
    "A1": "#18181b",
    "B2": "#44403c",
    "E1": "#78350f",
    "E2": "#92400e",
    # East Eurasian / Siberian / Amerindian
    "C1": "#ec4899",
    "C2": "#db2777",
    "D1": "#a21caf",
    "N1": "#84cc16",
    "O1": "#16a34a",
    "O2": "#15803d",
    "Q1": "#f43f5e",
    # Other
    "H1": "#fbbf24",
    "H2": "#fcd34d",
    "K2": "#94a3b8",
}

HAPLOGROUP_FALLBACK_COLOR = "#e7e5e4"
HAPLOGROUP_NULL_COLOR = "rgba(0,0,0,0)"

# Placeholder values seen in the AADR exports where no call was made.
NULL_HAPLOGROUP_MARKERS = frozenset({"", "null", "undefined", "none", "n/a", "na", "unknown", ".."})

DISTANCE_RAMP_STOPS: tuple[tuple[float, str], ...] = (
    (0.0, "#1d4ed8"),
    (0.02, "#1d4ed8"),
    (0.04, "#3b82f6"),
    (0.08, "#93c5fd"),
    (0.15, "#d6d3d1"),
)


def distance_hue(distance: float, max_distance: float) -> float:
    """Map a distance onto the 120 (green, near) .. 0 (red, far) hue range."""
    d = float(distance)
    m = float(max_distance)
    if math.isnan(d):
        return 0.0
    if not math.isfinite(m) or m <= 0:
        ratio = 0.0 if d <= 0 else 1.0
    else:
        ratio = clamp01(min(d / m, 1.0))
    return (1.0 - ratio) * 120.0


def distance_color(
    distance: float, max_distance: float, *, saturation: int = 80, lightness: int = 50
) -> str:
    """CSS `hsl(...)` color for `distance` on a scale saturating at `max_distance`."""
    hue = round(distance_hue(distance, max_distance), 2)
    return f"hsl({hue:g}, {saturation}%, {lightness}%)"


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def distance_ramp_color(distance: float, stops: tuple[tuple[float, str], ...] = DISTANCE_RAMP_STOPS) -> str:
    """Linear interpolation over hex color stops, clamped at both ends (NaN -> far end)."""
    d = float(distance)
    if math.isnan(d) or d >= stops[-1][0]:
        return stops[-1][1]
    if d <= stops[0][0]:
        return stops[0][1]

    for (lo, lo_color), (hi, hi_color) in zip(stops, stops[1:]):
        if d > hi:
            continue
        t = 0.0 if hi == lo else (d - lo) / (hi - lo)
        r0, g0, b0 = _hex_to_rgb(lo_color)
        r1, g1, b1 = _hex_to_rgb(hi_color)
        rgb = (round(r0 + (r1 - r0) * t), round(g0 + (g1 - g0) * t), round(b0 + (b1 - b0) * t))
        return "#{:02x}{:02x}{:02x}".format(*rgb)
    return stops[-1][1]


def is_null_haplogroup(code: str | None) -> bool:
    return code is None or str(code).strip().lower() in NULL_HAPLOGROUP_MARKERS


def haplogroup_color(code: str | None) -> str:
    """Color for a Y-DNA code by its two-character prefix (not a parsed "main haplogroup")."""
    if is_null_haplogroup(code):
        return HAPLOGROUP_NULL_COLOR
    prefix = str(code).strip()[:2]
    return HAPLOGROUP_COLORS.get(prefix, HAPLOGROUP_FALLBACK_COLOR)
