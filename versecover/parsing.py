"""Shared parsing helpers for config and snapshot value normalization."""

from __future__ import annotations

import math


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def require_identifier(value: object, field_name: str, source_label: str) -> str:
    """Return a stripped identifier or raise when it is missing/blank.

    Raises:
        ValueError: If the value is `None` or blank after trimming.
    """

    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"{source_label} requires non-empty `{field_name}`.")
    return normalized


def parse_optional_non_negative_number(
    value: object, field_name: str, source_label: str
) -> float | None:
    """Parse an optional int/float field that must be zero or greater.

    Blank values become `None`; booleans are rejected.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{source_label} field `{field_name}` must be a non-negative number.")
    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            return None
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(
                f"{source_label} field `{field_name}` must be a non-negative number."
            ) from exc
    if math.isnan(parsed) or parsed < 0:
        raise ValueError(f"{source_label} field `{field_name}` must be a non-negative number.")
    return parsed


def parse_non_negative_int(value: object, field_name: str, source_label: str) -> int:
    """Parse an integer field that must be zero or greater.

    Booleans are rejected even though they are `int` subclasses.
    """

    if isinstance(value, bool):
        raise ValueError(f"{source_label} field `{field_name}` must be a non-negative integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"{source_label} requires non-empty `{field_name}`.")
        try:
            parsed = int(normalized, 10)
        except ValueError as exc:
            raise ValueError(
                f"{source_label} field `{field_name}` must be a non-negative integer."
            ) from exc
    if parsed < 0:
        raise ValueError(f"{source_label} field `{field_name}` must be a non-negative integer.")
    return parsed
