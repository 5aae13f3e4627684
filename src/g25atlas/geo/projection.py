"""
Geo-projection: sample rows -> GeoJSON point features.

Many ancient-DNA samples share the recorded coordinates of their excavation site. Stacked
points are indistinguishable (and unclickable) on a map, so coincident samples are spread
on a deterministic spiral:

- the counter key is the coordinate pair rounded to `key_decimals` (5 by default),
- the n-th record at a key (zero-based) is moved by radius `0.01 * sqrt(n)` degrees at
  angle `n * 2.4` radians; the first record (n = 0) keeps its true position,
- the pre-jitter position is kept in `original_latitude` / `original_longitude`.

Jitter assignment depends on input order: reordering the records changes which record is
"first" at a shared site. Callers that need stable positions across renders must keep the
input order stable. The occurrence counter lives inside a single `project()` call.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from g25atlas.domain.models import FeatureCollection, GeoFeature, PointGeometry
from g25atlas.g25.parser import parse_number
from g25atlas.scoring.colors import is_null_haplogroup

logger = logging.getLogger(__name__)

JITTER_STEP_RADIANS = 2.4
JITTER_RADIUS_DEG = 0.01
KEY_DECIMALS = 5

_LATITUDE_KEYS = ("latitude", "Latitude")
_LONGITUDE_KEYS = ("longitude", "Longitude")


def normalize_coordinate(value: Any) -> float | None:
    """Parse a latitude/longitude value; comma decimals (`"50,5"`) are accepted.

    Returns None for missing, blank, unparseable or non-finite values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        number = parse_number(str(value).replace(",", ".", 1))
    return number if math.isfinite(number) else None


def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in record and record[key] not in (None, ""):
            return record[key]
    return None


def spiral_offset(
    n: int, *, step_radians: float = JITTER_STEP_RADIANS, radius_deg: float = JITTER_RADIUS_DEG
) -> tuple[float, float]:
    """(d_lon, d_lat) for the n-th coincident record; (0, 0) for the first."""
    if n <= 0:
        return 0.0, 0.0
    angle = n * step_radians
    radius = radius_deg * math.sqrt(n)
    return radius * math.cos(angle), radius * math.sin(angle)


def project(
    records: Iterable[Mapping[str, Any]],
    *,
    step_radians: float = JITTER_STEP_RADIANS,
    radius_deg: float = JITTER_RADIUS_DEG,
    key_decimals: int = KEY_DECIMALS,
) -> FeatureCollection:
    """Project sample rows to point features, jittering records that share a location.

    Rows without a usable latitude or longitude are dropped (reported in `meta.dropped_count`).
    """
    seen: dict[tuple[float, float], int] = {}
    features: list[GeoFeature] = []
    input_count = 0
    dropped = 0
    jittered = 0

    for record in records:
        input_count += 1
        lat = normalize_coordinate(_first_present(record, _LATITUDE_KEYS))
        lon = normalize_coordinate(_first_present(record, _LONGITUDE_KEYS))
        if lat is None or lon is None:
            dropped += 1
            continue

        key = (round(lat, key_decimals), round(lon, key_decimals))
        n = seen.get(key, 0)
        seen[key] = n + 1

        d_lon, d_lat = spiral_offset(n, step_radians=step_radians, radius_deg=radius_deg)
        if n > 0:
            jittered += 1

        properties = dict(record)
        properties["original_latitude"] = lat
        properties["original_longitude"] = lon
        features.append(
            GeoFeature(
                id=record.get("id"),
                geometry=PointGeometry(coordinates=(lon + d_lon, lat + d_lat)),
                properties=properties,
            )
        )

    if dropped:
        logger.debug("Dropped %d of %d records without usable coordinates", dropped, input_count)
    return FeatureCollection(
        features=features,
        meta={"input_count": input_count, "dropped_count": dropped, "jittered_count": jittered},
    )


def bp_to_ce(bp: Any) -> int:
    """Convert a 'years before present' date (present = 1950) to a calendar year; invalid -> 0."""
    value = normalize_coordinate(bp)
    if value is None:
        return 0
    # Halves round up, as in the map's time slider.
    return math.floor(1950 - value + 0.5)


def filter_features(
    collection: FeatureCollection,
    *,
    year_range: tuple[float, float] | None = None,
    haplogroups: Sequence[str] | None = None,
    keep_id: Any = None,
    year_field: str = "mean_bp",
    haplogroup_field: str = "y_haplo",
) -> FeatureCollection:
    """Time-window and haplogroup filtering of projected features.

    - `year_range` is `(min_ce, max_ce)` inclusive, compared against `bp_to_ce(props[year_field])`.
      The feature whose id equals `keep_id` (the selected target sample) bypasses the time window.
    - `haplogroups` switches on haplogroup mode: features with no call are removed, and a
      non-empty list keeps only codes starting with one of its entries.
    """
    kept: list[GeoFeature] = []
    for feature in collection.features:
        props = feature.properties
        is_kept_target = keep_id is not None and str(feature.id) == str(keep_id)

        if year_range is not None and not is_kept_target:
            raw_year = props.get(year_field)
            if normalize_coordinate(raw_year) is None:
                continue
            year = bp_to_ce(raw_year)
            if not (year_range[0] <= year <= year_range[1]):
                continue

        if haplogroups is not None:
            code = props.get(haplogroup_field)
            if is_null_haplogroup(code):
                continue
            if haplogroups and not any(str(code).strip().startswith(g) for g in haplogroups):
                continue

        kept.append(feature)

    meta = {**collection.meta, "filtered_count": len(collection.features) - len(kept)}
    return collection.model_copy(update={"features": kept, "meta": meta})
