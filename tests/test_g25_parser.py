from __future__ import annotations

# math.isnan is the only reliable way to assert on NaN coordinates (NaN != NaN).
import math

# The parser is pure text -> tuples, so these tests need no fixtures or settings.
from g25atlas.g25.parser import is_full_g25, parse_coordinate, parse_g25, parse_number, parse_vector


def test_parse_g25_reads_labels_and_coordinates():
    # Two Vahaduo-style lines: label first, then one coordinate per comma.
    vectors = parse_g25("Yamnaya,0.10,0.20\nCorded_Ware,0.12,0.19")

    # Input order is preserved and every token becomes a float.
    assert [v.label for v in vectors] == ["Yamnaya", "Corded_Ware"]
    assert vectors[0].coordinates == (0.10, 0.20)
    assert vectors[1].coordinates == (0.12, 0.19)


def test_parse_g25_skips_blank_header_and_unlabeled_lines():
    # Mix a header line, blank/whitespace lines, unlabeled rows and CRLF endings.
    text = "Population panel v3\n\n   \nA,1,2\n,3,4\n   ,5,6\r\nB,7,8\r\n"

    vectors = parse_g25(text)

    # Only the labeled rows survive, and the trailing "\r" never leaks into a token.
    assert [v.label for v in vectors] == ["A", "B"]
    assert vectors[1].coordinates == (7.0, 8.0)


def test_parse_g25_splits_records_on_newline_only():
    # Form feed and the Unicode line separator are not record separators in pasted panels.
    vectors = parse_g25("A,1\x0cB,2\nC,3\u2028D,4")

    # Each "\n"-delimited line stays one record (the odd separators end up inside a token).
    assert [v.label for v in vectors] == ["A", "C"]
    assert math.isnan(vectors[0].coordinates[0])
    assert vectors[0].coordinates[1] == 2.0


def test_parse_g25_trims_labels_and_tokens():
    # Padding around labels and numbers is common in hand-edited files.
    vectors = parse_g25("  Sintashta_MLBA  , 0.5 ,  -0.25")

    assert vectors[0].label == "Sintashta_MLBA"
    assert vectors[0].coordinates == (0.5, -0.25)


def test_parse_g25_keeps_line_with_unparseable_token_as_nan():
    # A garbage token must not drop the line; it becomes NaN so the row ranks last later.
    vectors = parse_g25("Bad_Row,notanumber,0.2")

    assert len(vectors) == 1
    assert math.isnan(vectors[0].coordinates[0])
    assert vectors[0].coordinates[1] == 0.2
    assert not vectors[0].is_finite


def test_parse_g25_reads_trailing_comma_as_zero_dimension():
    # Pasted panels often end a line with a comma; that extra token reads as 0.
    vectors = parse_g25("User,0.11,0.21,")

    assert vectors[0].coordinates == (0.11, 0.21, 0.0)
    assert vectors[0].is_finite


def test_parse_g25_accepts_variable_length_vectors():
    # Length is not enforced by the parser; callers gate on `is_full_g25`.
    vectors = parse_g25("Short,0.1\nFull," + ",".join(["0.01"] * 25))

    assert [v.dimensions for v in vectors] == [1, 25]


def test_parse_g25_does_not_normalize_comma_decimals():
    # "0,5" is two tokens here; the geo layer is the only place that reads comma decimals.
    vectors = parse_g25("A,0,5")

    assert vectors[0].coordinates == (0.0, 5.0)
    assert math.isnan(parse_coordinate("0,5"))


def test_parse_g25_garbage_input_degrades_to_empty():
    # Empty or comma-free input is "nothing to compute", never an exception.
    assert parse_g25("") == []
    assert parse_g25("no commas here\n\n") == []


def test_parse_coordinate_is_locale_neutral_and_strict():
    # Plain decimals (with optional sign, bare fraction and exponent) are accepted.
    assert parse_coordinate(" 1.5 ") == 1.5
    assert parse_coordinate(".5") == 0.5
    assert parse_coordinate("5.") == 5.0
    assert parse_coordinate("-0.02") == -0.02
    assert parse_coordinate("1e-3") == 0.001

    # Blank tokens read as zero, matching how panels with trailing commas are meant.
    assert parse_coordinate("") == 0.0
    assert parse_coordinate("   ") == 0.0

    # Everything else that is not a finite plain decimal is NaN, including overflow to inf.
    for bad in ["inf", "nan", "1_000", "0x10", "abc", "1e400", "-1e400"]:
        assert math.isnan(parse_coordinate(bad)), bad


def test_parse_number_treats_blank_as_missing():
    # The strict variant is used where a blank means "no value" (e.g. map coordinates).
    assert math.isnan(parse_number(""))
    assert math.isnan(parse_number("1e999"))
    assert parse_number("2.5") == 2.5


def test_rejoined_coordinates_reparse_to_same_values():
    # Joining parsed floats with repr() must reproduce the same vector.
    original = parse_g25("Sample," + ",".join(f"{i * 0.0137 - 0.1:.6f}" for i in range(25)))[0]

    rejoined = ",".join(repr(c) for c in original.coordinates)
    again = parse_g25(f"{original.label},{rejoined}")[0]

    assert again.coordinates == original.coordinates
    assert parse_vector(rejoined) == original.coordinates


def test_parse_vector_accepts_with_and_without_label():
    # Uploaded vectors may or may not carry the kit/sample id in front.
    assert parse_vector("I0231,0.1,0.2") == (0.1, 0.2)
    assert parse_vector("0.1,0.2") == (0.1, 0.2)
    assert parse_vector("I0231,0.1,0.2,") == (0.1, 0.2, 0.0)

    # A blank vector is empty, not a single zero.
    assert parse_vector("  ") == ()


def test_is_full_g25_requires_25_finite_coordinates():
    full = tuple([0.01] * 25)

    # Exactly 25 finite values pass; one short or one NaN fails.
    assert is_full_g25(full)
    assert not is_full_g25(full[:24])
    assert not is_full_g25(full[:24] + (math.nan,))

    # The threshold is configurable (engine.min_vector_length).
    assert is_full_g25(full[:10], min_length=10)
