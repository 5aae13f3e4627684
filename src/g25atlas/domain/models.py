"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- engine values (`LabeledVector`, `DistanceMatch`, `TargetResult`, `PlotPoint`)
- map output (`GeoFeature`, `FeatureCollection`; GeoJSON-shaped)
- API/CLI inputs (`CompareRequest`, `PlotRequest`, `GeoJsonRequest`, `SampleDistanceRequest`)

Engine values are frozen: they are created fresh on every call and compared structurally.
"""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


class LabeledVector(BaseModel):
    """One parsed G25 line: a label plus its ordered coordinates (may contain NaN)."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    coordinates: tuple[float, ...] = ()

    @property
    def dimensions(self) -> int:
        return len(self.coordinates)

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self.coordinates)


class DistanceMatch(BaseModel):
    """One ranked comparison result; `distance` is the fixed-precision display string."""

    model_config = ConfigDict(frozen=True)

    label: str
    distance: str

    @property
    def value(self) -> float:
        """Numeric value of the rounded distance (NaN for undefined distances)."""
        return float(self.distance)


class TargetResult(BaseModel):
    """Ranked matches for one target vector, ascending by distance."""

    model_config = ConfigDict(frozen=True)

    target: str
    matches: list[DistanceMatch] = Field(default_factory=list)


class PlotPoint(BaseModel):
    """Single-target visualisation point (PC1/PC2 plane)."""

    model_config = ConfigDict(frozen=True)

    label: str
    x: float
    y: float
    distance: float
    color: str

    @field_serializer("x", "y", "distance")
    def _serialize_numbers(self, value: float) -> float | None:
        # JSON has no NaN; undefined values go out as null.
        return _finite_or_none(value)


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: tuple[float, float]


class GeoFeature(BaseModel):
    """A sample record wrapped as a GeoJSON point feature."""

    type: Literal["Feature"] = "Feature"
    id: Any = None
    geometry: PointGeometry
    properties: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("properties")
    def _serialize_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        return {k: _finite_or_none(v) if isinstance(v, float) else v for k, v in properties.items()}

    @property
    def longitude(self) -> float:
        return self.geometry.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.geometry.coordinates[1]


class FeatureCollection(BaseModel):
    """GeoJSON feature collection plus projection diagnostics in `meta`."""

    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[GeoFeature] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)


class CompareRequest(BaseModel):
    """Payload for a panel-vs-panel distance run."""

    source: str = ""
    target: str = ""
    limit: int | None = Field(default=None, ge=1)
    settings_overrides: dict[str, Any] | None = None


class CompareResponse(BaseModel):
    results: list[TargetResult]
    meta: dict[str, Any] = Field(default_factory=dict)


class PlotRequest(BaseModel):
    source: str = ""
    target: str = ""
    settings_overrides: dict[str, Any] | None = None


class PlotResponse(BaseModel):
    points: list[PlotPoint]
    meta: dict[str, Any] = Field(default_factory=dict)


class GeoJsonRequest(BaseModel):
    """Raw sample rows to project; extra fields on each row pass through."""

    records: list[dict[str, Any]] = Field(default_factory=list)
    settings_overrides: dict[str, Any] | None = None


class SampleDistanceRequest(BaseModel):
    """A single user vector (`label,c1,...` or `c1,...`) compared against the sample catalog."""

    target: str

    @field_validator("target")
    @classmethod
    def _strip_target(cls, value: str) -> str:
        return value.strip()
