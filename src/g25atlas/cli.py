"""
G25 Atlas CLI entrypoint.

This CLI is intended for quick local runs and debugging without the map frontend.
It delegates all computation to the engine modules (`g25atlas.g25`, `g25atlas.geo`).
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import Any

from g25atlas.catalog.loader import load_panel, load_samples
from g25atlas.config.settings import get_settings
from g25atlas.core.logging import configure_logging
from g25atlas.g25.distance import compare_all, prepare_plot_points
from g25atlas.geo.projection import filter_features, project

logger = logging.getLogger(__name__)


def _cmd_distances(args: argparse.Namespace) -> int:
    """Handle the `distances` subcommand."""
    settings = get_settings()
    source_text = load_panel(args.source)
    target_text = load_panel(args.target)
    limit = int(args.limit) if args.limit is not None else settings.engine.default_limit

    results = compare_all(source_text, target_text, limit, decimals=settings.engine.distance_decimals)

    if args.json:
        print(json.dumps([r.model_dump(mode="json") for r in results], ensure_ascii=False, indent=2))
        return 0

    if not results:
        print("No target vectors found.")
        return 0
    for result in results:
        print(f"Target: {result.target}")
        if not result.matches:
            print("   (no source vectors)")
        for i, match in enumerate(result.matches, start=1):
            print(f"{i:>4}. {match.distance}  {match.label}")
    return 0


def _cmd_plot(args: argparse.Namespace) -> int:
    settings = get_settings()
    points = prepare_plot_points(
        load_panel(args.source),
        load_panel(args.target),
        scale_fraction=settings.engine.plot_scale_fraction,
    )
    print(json.dumps([p.model_dump(mode="json") for p in points], ensure_ascii=False, indent=2))
    return 0


def _cmd_project(args: argparse.Namespace) -> int:
    settings = get_settings()
    p = settings.projection
    collection = project(
        load_samples(args.samples),
        step_radians=p.jitter_step_radians,
        radius_deg=p.jitter_radius_deg,
        key_decimals=p.key_decimals,
    )

    year_range = None
    if args.min_year is not None or args.max_year is not None:
        year_range = (
            args.min_year if args.min_year is not None else float("-inf"),
            args.max_year if args.max_year is not None else float("inf"),
        )
    haplogroups = args.haplogroup or None
    if year_range is not None or haplogroups is not None:
        collection = filter_features(
            collection,
            year_range=year_range,
            haplogroups=haplogroups,
            keep_id=args.keep_id,
            year_field=p.year_field,
            haplogroup_field=p.haplogroup_field,
        )

    print(json.dumps(collection.model_dump(mode="json"), ensure_ascii=False, indent=None if args.compact else 2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the G25 Atlas CLI."""
    parser = argparse.ArgumentParser(prog="g25atlas")
    sub = parser.add_subparsers(dest="command", required=True)

    dist = sub.add_parser("distances", help="Rank source-panel vectors by distance to each target vector.")
    dist.add_argument("--source", required=True, help="Source panel file (label,c1,...,c25 per line)")
    dist.add_argument("--target", required=True, help="Target panel file (one or more vectors)")
    dist.add_argument("--limit", type=int, default=None, help="Matches per target (default from config)")
    dist.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    dist.set_defaults(func=_cmd_distances)

    plot = sub.add_parser("plot", help="PC1/PC2 plot data for the first target vector (JSON).")
    plot.add_argument("--source", required=True)
    plot.add_argument("--target", required=True)
    plot.set_defaults(func=_cmd_plot)

    proj = sub.add_parser("project", help="Project a sample export to GeoJSON with coincident-point jitter.")
    proj.add_argument("--samples", required=True, help="JSON array or ;/, delimited sample export")
    proj.add_argument("--min-year", type=float, default=None, help="Earliest calendar year (CE, negative for BCE)")
    proj.add_argument("--max-year", type=float, default=None)
    proj.add_argument("--haplogroup", action="append", default=[], help="Repeatable Y-DNA prefix filter")
    proj.add_argument("--keep-id", default=None, help="Sample id that stays visible outside the year window")
    proj.add_argument("--compact", action="store_true", help="Single-line JSON")
    proj.set_defaults(func=_cmd_project)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m g25atlas.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (OSError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
