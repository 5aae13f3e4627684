"""
G25 distance engine.

Euclidean distance between labeled coordinate vectors, ranked per target:

    d(t, s) = sqrt(sum((t[i] - s[i]) ** 2 for i in range(len(t))))

Behavior notes:
- Dimension mismatch is tolerated: a source shorter than the target reads its missing
  positions as 0 (a malformed source line yields an inflated distance, it is not excluded).
  Extra source positions beyond the target length are ignored.
- NaN coordinates propagate to a NaN distance. For ranking, NaN is treated as +inf so the
  order stays total and deterministic (NaN rows always sort last).
- Ranking uses the numeric value of the rounded display string; ties keep input order.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from g25atlas.domain.models import DistanceMatch, LabeledVector, PlotPoint, TargetResult
from g25atlas.g25.parser import parse_coordinate, parse_g25, parse_vector
from g25atlas.scoring.colors import distance_color
from g25atlas.scoring.composite import nan_last

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DISTANCE_DECIMALS = 5


def euclidean_distance(target: Sequence[float], source: Sequence[float]) -> float:
    """Distance over the target's dimensions; missing source positions count as 0."""
    total = 0.0
    source_len = len(source)
    for i, t in enumerate(target):
        s = source[i] if i < source_len else 0.0
        d = t - s
        total += d * d
    return math.sqrt(total)


def format_distance(value: float, decimals: int = DISTANCE_DECIMALS) -> str:
    """Fixed-precision display string (`"NaN"` for undefined distances)."""
    if math.isnan(value):
        return "NaN"
    return f"{value:.{decimals}f}"


def distance_sort_key(match: DistanceMatch) -> float:
    return nan_last(match.value)


def rank_matches(
    target: LabeledVector,
    sources: Iterable[LabeledVector],
    *,
    limit: int = DEFAULT_LIMIT,
    decimals: int = DISTANCE_DECIMALS,
) -> list[DistanceMatch]:
    """Distances from `target` to every source, ascending (stable, NaN last), truncated to `limit`."""
    if limit <= 0:
        return []
    matches = [
        DistanceMatch(
            label=s.label,
            distance=format_distance(euclidean_distance(target.coordinates, s.coordinates), decimals),
        )
        for s in sources
    ]
    # sorted() is stable, so equal rounded distances keep source input order.
    matches = sorted(matches, key=distance_sort_key)
    return matches[:limit]


def compare_vectors(
    sources: Sequence[LabeledVector],
    targets: Sequence[LabeledVector],
    *,
    limit: int = DEFAULT_LIMIT,
    decimals: int = DISTANCE_DECIMALS,
) -> list[TargetResult]:
    """One `TargetResult` per target, in target input order."""
    return [
        TargetResult(target=t.label, matches=rank_matches(t, sources, limit=limit, decimals=decimals))
        for t in targets
    ]


def compare_all(
    source_text: str,
    target_text: str,
    limit: int = DEFAULT_LIMIT,
    *,
    decimals: int = DISTANCE_DECIMALS,
) -> list[TargetResult]:
    """Parse both panels and rank every source against every target.

    Empty source text gives each target an empty match list; empty target text gives `[]`.
    """
    sources = parse_g25(source_text)
    targets = parse_g25(target_text)
    logger.debug("Comparing %d targets against %d sources (limit=%d)", len(targets), len(sources), limit)
    return compare_vectors(sources, targets, limit=limit, decimals=decimals)


def plot_scale_max(distances: Iterable[float], *, scale_fraction: float = 0.2) -> float:
    """Color-scale saturation point: `scale_fraction` of the largest finite distance (0 if none)."""
    finite = [d for d in distances if math.isfinite(d)]
    if not finite:
        return 0.0
    return max(finite) * scale_fraction


def prepare_plot_points(
    source_text: str,
    target_text: str,
    *,
    scale_fraction: float = 0.2,
) -> list[PlotPoint]:
    """Single-target plot data: PC1/PC2 per source, raw distance and a per-call normalised color.

    Only the first target vector is used. The color scale is re-derived on every call.
    """
    sources = parse_g25(source_text)
    targets = parse_g25(target_text)
    if not targets:
        return []
    target = targets[0]

    distances = [euclidean_distance(target.coordinates, s.coordinates) for s in sources]
    scale_max = plot_scale_max(distances, scale_fraction=scale_fraction)

    points: list[PlotPoint] = []
    for s, dist in zip(sources, distances):
        coords = s.coordinates
        points.append(
            PlotPoint(
                label=s.label,
                x=coords[0] if len(coords) > 0 else math.nan,
                y=coords[1] if len(coords) > 1 else math.nan,
                distance=dist,
                color=distance_color(dist, scale_max),
            )
        )
    return points


def attach_distances(
    records: Iterable[Mapping[str, Any]],
    target_vector: str | Sequence[float],
    *,
    vector_field: str = "g25_string",
    missing_distance: float = 999.0,
) -> list[dict[str, Any]]:
    """Copy each record with a numeric `distance` to `target_vector`.

    Records without a stored vector get `missing_distance`. A target with no finite
    coordinates cannot be compared; records come back unchanged (copied).
    """
    target = parse_vector(target_vector) if isinstance(target_vector, str) else tuple(target_vector)
    target = tuple(c for c in target if math.isfinite(c))
    if not target:
        logger.warning("Target vector has no usable coordinates; distances not attached")
        return [dict(r) for r in records]

    out: list[dict[str, Any]] = []
    for record in records:
        row = dict(record)
        raw = row.get(vector_field)
        if isinstance(raw, str) and raw.strip():
            row["distance"] = euclidean_distance(target, parse_vector(raw))
        elif isinstance(raw, (list, tuple)) and raw:
            row["distance"] = euclidean_distance(target, [parse_coordinate(str(v)) for v in raw])
        else:
            row["distance"] = float(missing_distance)
        out.append(row)
    return out
