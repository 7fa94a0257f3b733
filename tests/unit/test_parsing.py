"""Unit tests for shared config and snapshot parsing helpers."""

import pytest

from versecover.parsing import (
    normalize_optional_string,
    parse_non_negative_int,
    parse_optional_non_negative_number,
    require_identifier,
)


def test_normalize_optional_string_handles_blank_values() -> None:
    """Normalization should return `None` for `None` and blank textual values."""

    assert normalize_optional_string(None) is None
    assert normalize_optional_string("") is None
    assert normalize_optional_string("   ") is None


def test_normalize_optional_string_strips_non_blank_values() -> None:
    assert normalize_optional_string("  value  ") == "value"
    assert normalize_optional_string(42) == "42"


def test_require_identifier_reports_field_and_source() -> None:
    assert require_identifier(" gen-1 ", "id", "Snapshot") == "gen-1"

    with pytest.raises(ValueError, match="Snapshot books\\[0\\] requires non-empty `id`"):
        require_identifier("  ", "id", "Snapshot books[0]")


@pytest.mark.parametrize(("value", "expected"), [(0, 0), (31, 31), (" 12 ", 12), ("7", 7)])
def test_parse_non_negative_int_accepts_ints_and_numeric_strings(
    value: object, expected: int
) -> None:
    assert parse_non_negative_int(value, "total_verses", "Snapshot") == expected


@pytest.mark.parametrize("value", [-1, "-3", "ten", True, 2.5])
def test_parse_non_negative_int_rejects_invalid_values(value: object) -> None:
    """Negative numbers, words, booleans, and floats are all rejected."""

    with pytest.raises(ValueError, match="non-negative integer"):
        parse_non_negative_int(value, "total_verses", "Snapshot")


def test_parse_non_negative_int_requires_a_value() -> None:
    with pytest.raises(ValueError, match="requires non-empty `end_verse`"):
        parse_non_negative_int(None, "end_verse", "Snapshot")


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("  ", None), (0, 0.0), (95, 95.0), (" 50.5 ", 50.5)],
)
def test_parse_optional_non_negative_number_accepts_blank_and_numbers(
    value: object, expected: float | None
) -> None:
    assert parse_optional_non_negative_number(value, "duration_seconds", "Snapshot") == expected


@pytest.mark.parametrize("value", [-0.5, "-3", "long", False, "nan"])
def test_parse_optional_non_negative_number_rejects_invalid_values(value: object) -> None:
    with pytest.raises(ValueError, match="non-negative number"):
        parse_optional_non_negative_number(value, "duration_seconds", "Snapshot")
