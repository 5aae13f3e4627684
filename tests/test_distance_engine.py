from __future__ import annotations

# math is needed for NaN/inf assertions on undefined distances.
import math

# A seeded RNG keeps the invariant checks deterministic across runs.
import random

# We use pytest for approx comparisons on computed floats.
import pytest

# Result models are compared directly so the expected output shape is explicit.
from g25atlas.domain.models import DistanceMatch, TargetResult

# The engine is pure (text in, models out), so no settings or fixtures are needed here.
from g25atlas.g25.distance import (
    attach_distances,
    compare_all,
    euclidean_distance,
    format_distance,
    prepare_plot_points,
)


def _random_panel(rng: random.Random, n: int, dims: int = 25) -> str:
    # Small-magnitude values resemble real scaled G25 coordinates.
    lines = []
    for i in range(n):
        coords = ",".join(f"{rng.uniform(-0.1, 0.1):.6f}" for _ in range(dims))
        lines.append(f"Pop_{i},{coords}")
    return "\n".join(lines)


def test_compare_all_ranks_sources_for_each_target():
    # Two sources against one target; distances are sqrt(0.0002) and sqrt(0.0005).
    results = compare_all("Yamnaya,0.10,0.20\nCorded_Ware,0.12,0.19", "User,0.11,0.21", 2)

    # Ascending order, rounded to five decimals and kept as display strings.
    assert results == [
        TargetResult(
            target="User",
            matches=[
                DistanceMatch(label="Yamnaya", distance="0.01414"),
                DistanceMatch(label="Corded_Ware", distance="0.02236"),
            ],
        )
    ]


def test_trailing_comma_on_target_does_not_poison_distances():
    # The extra blank token reads as 0 and sources are zero-padded, so distances are unchanged.
    results = compare_all("Yamnaya,0.10,0.20\nCorded_Ware,0.12,0.19", "User,0.11,0.21,")

    assert [m.distance for m in results[0].matches] == ["0.01414", "0.02236"]


def test_compare_all_with_empty_source_gives_empty_matches():
    # Each target still gets an entry so callers can show "no matches".
    assert compare_all("", "User,0.1,0.2") == [TargetResult(target="User", matches=[])]


def test_compare_all_with_empty_target_gives_no_results():
    # No parseable targets means nothing to compute (header-only counts as empty).
    assert compare_all("Yamnaya,0.1,0.2", "") == []
    assert compare_all("Yamnaya,0.1,0.2", "header only") == []


def test_nan_distance_sorts_last_without_crashing():
    source = "Bad_Row,notanumber,0.2\nGood,0.1,0.25\nExact,0.1,0.2"

    matches = compare_all(source, "User,0.1,0.2")[0].matches

    # The row with a garbage token is kept but ranked after every defined distance.
    assert [m.label for m in matches] == ["Exact", "Good", "Bad_Row"]
    assert matches[-1].distance == "NaN"
    assert math.isnan(matches[-1].value)


def test_huge_magnitude_source_ranks_last_without_overflow_error():
    # 1e200 squared overflows a float; the engine must degrade to inf instead of raising.
    source = "Huge,1e200,0.1\nGood,0.1,0.25\nBad_Row,abc,0.2"

    matches = compare_all(source, "User,0.1,0.2")[0].matches

    # inf still ranks before NaN, and both after every finite distance.
    assert [m.label for m in matches] == ["Good", "Huge", "Bad_Row"]
    assert math.isinf(matches[1].value)

    # The plot path shares the same distance function and must not raise either.
    points = prepare_plot_points(source, "User,0.1,0.2")
    assert points[0].color == "hsl(0, 80%, 50%)"
    assert math.isinf(points[0].distance)


def test_short_source_is_zero_padded_and_long_source_is_truncated():
    # Missing source positions count as 0; positions past the target's length are ignored.
    matches = compare_all("Short,0\nLong,3,4,100", "T,3,4")[0].matches

    assert matches == [
        DistanceMatch(label="Long", distance="0.00000"),
        DistanceMatch(label="Short", distance="5.00000"),
    ]


def test_equal_distances_keep_source_input_order():
    # A, B and D are all at distance 1; the stable sort keeps their input order.
    matches = compare_all("A,1\nB,-1\nC,0\nD,1", "T,0")[0].matches

    assert [m.label for m in matches] == ["C", "A", "B", "D"]


def test_results_preserve_target_order():
    # One result per target, in the order targets were supplied.
    results = compare_all("S,0,0", "Second,1,1\nFirst,0,0")

    assert [r.target for r in results] == ["Second", "First"]


def test_sort_and_truncation_invariants():
    rng = random.Random(25)
    source = _random_panel(rng, 30)
    targets = _random_panel(rng, 3)

    # For every limit: min(limit, sources) matches, sorted ascending.
    for limit in (1, 20, 30, 50):
        for result in compare_all(source, targets, limit):
            values = [m.value for m in result.matches]
            assert len(result.matches) == min(limit, 30)
            assert all(a <= b for a, b in zip(values, values[1:]))


def test_default_limit_is_twenty():
    rng = random.Random(7)

    # Forty sources, no explicit limit: the default truncation applies.
    result = compare_all(_random_panel(rng, 40), "T," + ",".join(["0"] * 25))[0]

    assert len(result.matches) == 20


def test_non_positive_limit_returns_no_matches():
    assert compare_all("A,1", "T,0", 0)[0].matches == []


def test_euclidean_distance_metric_properties():
    rng = random.Random(3)
    a, b, c = ([rng.uniform(-0.2, 0.2) for _ in range(25)] for _ in range(3))

    # Identity, symmetry and the triangle inequality (with float tolerance).
    assert euclidean_distance(a, a) == 0
    assert euclidean_distance(a, b) == pytest.approx(euclidean_distance(b, a))
    assert euclidean_distance(a, c) <= euclidean_distance(a, b) + euclidean_distance(b, c) + 1e-12


def test_format_distance_uses_five_decimals():
    # Five decimals by default; NaN gets a readable marker instead of "nan".
    assert format_distance(0.0141421356) == "0.01414"
    assert format_distance(math.nan) == "NaN"
    assert format_distance(1.0, 2) == "1.00"


def test_prepare_plot_points_colors_on_per_call_scale():
    source = "Near,0.1,0.2\nMid,0.15,0.2\nFar,0.6,0.2"

    # Only the first target is plotted; the second one is ignored.
    points = prepare_plot_points(source, "User,0.1,0.2\nIgnored,9,9")

    assert [p.label for p in points] == ["Near", "Mid", "Far"]
    assert (points[0].x, points[0].y) == (0.1, 0.2)
    assert points[2].distance == pytest.approx(0.5)
    assert points[0].color == "hsl(120, 80%, 50%)"
    # Scale saturates at 20% of the farthest distance (0.1), so Mid sits halfway.
    assert points[1].color == "hsl(60, 80%, 50%)"
    assert points[2].color == "hsl(0, 80%, 50%)"


def test_prepare_plot_points_rescales_every_call():
    # The same "Mid" source changes color when a farther source widens the scale.
    without_far = prepare_plot_points("Near,0.1,0.2\nMid,0.15,0.2", "User,0.1,0.2")
    with_far = prepare_plot_points("Near,0.1,0.2\nMid,0.15,0.2\nFar,0.6,0.2", "User,0.1,0.2")

    assert without_far[1].color == "hsl(0, 80%, 50%)"
    assert with_far[1].color == "hsl(60, 80%, 50%)"


def test_prepare_plot_points_handles_missing_target_and_short_sources():
    # No target: nothing to plot.
    assert prepare_plot_points("Near,0.1,0.2", "") == []

    # A one-dimensional source has no PC2; it is NaN internally and null in JSON.
    points = prepare_plot_points("OneDim,0.3", "User,0.1,0.2")
    assert points[0].x == 0.3
    assert math.isnan(points[0].y)
    assert points[0].model_dump(mode="json")["y"] is None


def test_attach_distances_marks_records_without_vectors():
    # Vectors may arrive as comma strings or as JSON arrays; blanks mean "no vector".
    records = [
        {"id": "a", "g25_string": "0.1,0.2"},
        {"id": "b", "g25_string": ""},
        {"id": "c", "g25_string": [0.4, 0.6]},
    ]

    out = attach_distances(records, "User,0.1,0.2")

    # Rows without a vector get the sentinel distance so they sort to the far end.
    assert out[0]["distance"] == 0.0
    assert out[1]["distance"] == 999.0
    assert out[2]["distance"] == pytest.approx(0.5)

    # Inputs are copied, never mutated (the catalog is shared across requests).
    assert "distance" not in records[0]


def test_attach_distances_with_unusable_target_returns_copies():
    records = [{"id": "a", "g25_string": "0.1,0.2"}]

    # No finite target coordinates: rows come back untouched but as new dicts.
    out = attach_distances(records, "not,a,vector")

    assert out == records
    assert out[0] is not records[0]
