"""
API routes.

Endpoints:
- POST `/api/distances`: rank source-panel populations against each target vector.
- POST `/api/distances/plot`: single-target PC1/PC2 plot data with distance colors.
- POST `/api/geojson`: project caller-supplied sample rows to jittered point features.
- GET  `/api/samples`: the configured sample catalog as features (time/haplogroup filters).
- POST `/api/samples/distances`: catalog features with distances to one uploaded vector.
- GET  `/api/haplogroups`: Y-DNA legend palette.
- GET  `/api/settings`: public settings for the web UI.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from g25atlas.catalog.loader import load_samples
from g25atlas.config.overrides import apply_settings_overrides
from g25atlas.config.settings import Settings, get_settings
from g25atlas.domain.models import (
    CompareRequest,
    CompareResponse,
    FeatureCollection,
    GeoJsonRequest,
    LabeledVector,
    PlotRequest,
    PlotResponse,
    SampleDistanceRequest,
)
from g25atlas.g25.distance import attach_distances, compare_vectors, plot_scale_max, prepare_plot_points
from g25atlas.g25.parser import is_full_g25, parse_g25, parse_vector
from g25atlas.geo.projection import filter_features, project
from g25atlas.scoring.colors import (
    HAPLOGROUP_COLORS,
    HAPLOGROUP_FALLBACK_COLOR,
    HAPLOGROUP_NULL_COLOR,
    distance_ramp_color,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _effective_settings(overrides: dict[str, Any] | None) -> Settings:
    try:
        return apply_settings_overrides(get_settings(), overrides)
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e


def _too_large(message: str) -> HTTPException:
    return HTTPException(status_code=413, detail={"code": "PAYLOAD_TOO_LARGE", "message": message})


def _internal_error(e: Exception) -> HTTPException:
    logger.exception("Unexpected engine failure")
    return HTTPException(status_code=500, detail={"code": "INTERNAL_ERROR", "message": str(e)})


def _check_panel_size(name: str, text: str, settings: Settings) -> None:
    max_chars = settings.limits.max_panel_chars
    if len(text) > max_chars:
        raise _too_large(f"{name} panel exceeds {max_chars} characters")


def _parse_panels(source: str, target: str, settings: Settings) -> tuple[list[LabeledVector], list[LabeledVector]]:
    """Apply the panel caps (characters, then vector counts) before any distance work."""
    _check_panel_size("source", source, settings)
    _check_panel_size("target", target, settings)
    sources = parse_g25(source)
    targets = parse_g25(target)
    if len(sources) > settings.limits.max_source_vectors:
        raise _too_large(f"source panel has more than {settings.limits.max_source_vectors} vectors")
    if len(targets) > settings.limits.max_target_vectors:
        raise _too_large(f"target panel has more than {settings.limits.max_target_vectors} vectors")
    return sources, targets


@lru_cache
def _catalog() -> list[dict[str, Any]]:
    settings = get_settings()
    rows = load_samples(settings.catalog.path)
    logger.info("Loaded %d sample records from %s", len(rows), settings.catalog.path)
    return rows


def _catalog_or_503() -> list[dict[str, Any]]:
    try:
        return _catalog()
    except (OSError, ValueError) as e:
        raise HTTPException(
            status_code=503,
            detail={"code": "CATALOG_UNAVAILABLE", "message": str(e)},
        ) from e


@router.post("/api/distances", response_model=CompareResponse)
def post_distances(request: CompareRequest) -> CompareResponse:
    """Rank every source vector against every target vector."""
    settings = _effective_settings(request.settings_overrides)
    sources, targets = _parse_panels(request.source, request.target, settings)

    limit = min(int(request.limit or settings.engine.default_limit), settings.engine.max_limit)
    try:
        results = compare_vectors(sources, targets, limit=limit, decimals=settings.engine.distance_decimals)
    except Exception as e:
        raise _internal_error(e) from e
    meta = {
        "status": "ok" if sources and targets else "empty",
        "source_count": len(sources),
        "target_count": len(targets),
        "limit": limit,
    }
    return CompareResponse(results=results, meta=meta)


@router.post("/api/distances/plot", response_model=PlotResponse)
def post_distance_plot(request: PlotRequest) -> PlotResponse:
    """Single-target plot points; the color scale is normalised per request."""
    settings = _effective_settings(request.settings_overrides)
    _parse_panels(request.source, request.target, settings)

    fraction = settings.engine.plot_scale_fraction
    try:
        points = prepare_plot_points(request.source, request.target, scale_fraction=fraction)
    except Exception as e:
        raise _internal_error(e) from e
    meta = {
        "status": "ok" if points else "empty",
        "scale_max": plot_scale_max((p.distance for p in points), scale_fraction=fraction),
    }
    return PlotResponse(points=points, meta=meta)


@router.post("/api/geojson", response_model=FeatureCollection)
def post_geojson(request: GeoJsonRequest) -> FeatureCollection:
    """Project caller-supplied rows (order-sensitive jitter)."""
    settings = _effective_settings(request.settings_overrides)
    p = settings.projection
    return project(
        request.records,
        step_radians=p.jitter_step_radians,
        radius_deg=p.jitter_radius_deg,
        key_decimals=p.key_decimals,
    )


@router.get("/api/samples", response_model=FeatureCollection)
def get_samples(
    min_year: float | None = None,
    max_year: float | None = None,
    haplogroup: list[str] | None = Query(default=None),
    ydna_mode: bool = False,
    keep_id: str | None = None,
) -> FeatureCollection:
    """Catalog samples as features, optionally filtered by CE year window and Y-DNA group.

    `keep_id` names the selected sample, which stays visible outside the time window.
    """
    settings = get_settings()
    p = settings.projection
    collection = project(
        _catalog_or_503(),
        step_radians=p.jitter_step_radians,
        radius_deg=p.jitter_radius_deg,
        key_decimals=p.key_decimals,
    )

    year_range = None
    if min_year is not None or max_year is not None:
        year_range = (
            min_year if min_year is not None else float("-inf"),
            max_year if max_year is not None else float("inf"),
        )
    haplogroups = haplogroup if haplogroup else ([] if ydna_mode else None)
    if year_range is None and haplogroups is None:
        return collection
    return filter_features(
        collection,
        year_range=year_range,
        haplogroups=haplogroups,
        keep_id=keep_id,
        year_field=p.year_field,
        haplogroup_field=p.haplogroup_field,
    )


@router.post("/api/samples/distances", response_model=FeatureCollection)
def post_sample_distances(request: SampleDistanceRequest) -> FeatureCollection:
    """Distance from one uploaded vector to every catalog sample, attached per feature."""
    settings = get_settings()
    coords = parse_vector(request.target)
    if not is_full_g25(coords, min_length=settings.engine.min_vector_length):
        raise HTTPException(
            status_code=400,
            detail={
                "code": "VALIDATION_ERROR",
                "message": f"target must contain at least {settings.engine.min_vector_length} numeric coordinates",
            },
        )

    rows = attach_distances(
        _catalog_or_503(),
        coords,
        vector_field=settings.catalog.vector_field,
        missing_distance=settings.engine.missing_distance,
    )
    p = settings.projection
    collection = project(
        rows,
        step_radians=p.jitter_step_radians,
        radius_deg=p.jitter_radius_deg,
        key_decimals=p.key_decimals,
    )
    for feature in collection.features:
        feature.properties["distance_color"] = distance_ramp_color(feature.properties["distance"])
    return collection


@router.get("/api/haplogroups")
def get_haplogroups() -> dict:
    """Legend palette: two-character prefix -> color, plus the fallback and no-call colors."""
    return {
        "colors": dict(HAPLOGROUP_COLORS),
        "fallback": HAPLOGROUP_FALLBACK_COLOR,
        "null": HAPLOGROUP_NULL_COLOR,
    }


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return safe-to-expose settings for UI defaults (catalog path removed)."""
    data = get_settings().model_dump(mode="json")
    return {
        "app": {"name": data.get("app", {}).get("name")},
        "engine": data.get("engine", {}),
        "projection": data.get("projection", {}),
        "limits": data.get("limits", {}),
    }
