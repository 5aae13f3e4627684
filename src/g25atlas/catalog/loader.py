"""
Sample catalog + panel loaders.

The sample catalog is a local export of the ancient-DNA table: either a JSON array of row
objects (`data/samples/map-samples.json`) or the delimited AADR-style text export (`;` or
`,` separated, header row first). Rows stay plain dicts because the projection layer passes
every extra column through to the map untouched.
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any

from g25atlas.core.env import resolve_project_path

# Null markers used by the AADR annotation files.
_NULL_MARKERS = frozenset({"..", "n/a"})


def _clean_cell(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if value in _NULL_MARKERS:
            return ""
    return value


def _sniff_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","


def _load_delimited(text: str) -> list[dict[str, Any]]:
    header_line = text.split("\n", 1)[0]
    reader = csv.DictReader(io.StringIO(text), delimiter=_sniff_delimiter(header_line))
    rows: list[dict[str, Any]] = []
    for row in reader:
        cleaned = {str(k).strip(): _clean_cell(v) for k, v in row.items() if k is not None}
        if any(v not in ("", None) for v in cleaned.values()):
            rows.append(cleaned)
    return rows


def load_samples(path: str | Path) -> list[dict[str, Any]]:
    """Load sample rows from a JSON array or a `;`/`,` delimited export."""
    resolved = resolve_project_path(path)
    text = resolved.read_text(encoding="utf-8-sig")
    if resolved.suffix.lower() == ".json":
        payload = json.loads(text)
        if not isinstance(payload, list):
            raise ValueError(f"Sample catalog {resolved} must be a JSON array of objects")
        return [{k: _clean_cell(v) for k, v in row.items()} for row in payload if isinstance(row, dict)]
    return _load_delimited(text)


def load_panel(path: str | Path) -> str:
    """Read a G25 panel (`label,c1,...` lines) as text."""
    return resolve_project_path(path).read_text(encoding="utf-8-sig")
