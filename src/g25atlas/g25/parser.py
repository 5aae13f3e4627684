"""
G25 coordinate parser.

Input is the de facto "Vahaduo" interchange format, one sample/population per line:

    Yamnaya_Samara,0.1247,0.1389,0.0512,...

Parsing is best-effort by contract:
- blank lines and lines without a comma are headers/noise and are skipped silently,
- a blank token reads as 0 (trailing commas are common in pasted panels),
- any other token that is not a plain finite decimal becomes NaN (the line is kept),
- vector length is not enforced here; callers decide (see `is_full_g25`).

Only `.` is accepted as a decimal point. Comma-decimal normalisation is a concern of the
geo-projection layer (`g25atlas.geo.projection.normalize_coordinate`), not of this parser.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Sequence

from g25atlas.domain.models import LabeledVector

logger = logging.getLogger(__name__)

G25_DIMENSIONS = 25

# Locale-neutral decimal: optional sign, digits with optional fraction (or a bare fraction), optional exponent.
_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str) -> float:
    """Strict decimal parse: NaN for blank, malformed or out-of-range (overflowing) text."""
    text = text.strip()
    if not _NUMBER_RE.fullmatch(text):
        return math.nan
    value = float(text)
    return value if math.isfinite(value) else math.nan


def parse_coordinate(token: str) -> float:
    """Convert one coordinate token to float.

    A blank token (e.g. the one after a trailing comma in a pasted panel) reads as 0.0;
    anything else that is not a plain finite decimal yields NaN.
    """
    if not token.strip():
        return 0.0
    return parse_number(token)


def parse_g25(text: str) -> list[LabeledVector]:
    """Parse newline-delimited `label,c1,...,cN` text into labeled vectors (never raises for data)."""
    vectors: list[LabeledVector] = []
    skipped = 0
    # Only "\n" separates records; a trailing "\r" from CRLF files is dropped per line.
    for line in text.split("\n"):
        line = line.removesuffix("\r")
        if not line.strip() or "," not in line:
            skipped += 1
            continue
        label, _, remainder = line.partition(",")
        label = label.strip()
        if not label:
            skipped += 1
            continue
        coordinates = tuple(parse_coordinate(token) for token in remainder.split(","))
        vectors.append(LabeledVector(label=label, coordinates=coordinates))

    logger.debug("Parsed %d G25 vectors (%d lines skipped)", len(vectors), skipped)
    return vectors


def parse_vector(text: str) -> tuple[float, ...]:
    """Parse a single comma-joined vector.

    Accepts both `"SampleID,0.1,0.2,..."` and `"0.1,0.2,..."`: a leading token that is not a
    number is treated as the sample label and dropped. Remaining tokens follow `parse_coordinate`.
    """
    tokens = text.strip().split(",")
    if len(tokens) > 1 and math.isnan(parse_number(tokens[0])):
        tokens = tokens[1:]
    if tokens == [""]:
        return ()
    return tuple(parse_coordinate(token) for token in tokens)


def is_full_g25(coordinates: Sequence[float], *, min_length: int = G25_DIMENSIONS) -> bool:
    """Acceptance gate for an uploaded vector: enough coordinates, all of them finite."""
    return len(coordinates) >= min_length and all(math.isfinite(c) for c in coordinates)
