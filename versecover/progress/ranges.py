"""Verse range reconciliation utilities.

Responsibilities:
- Collapse a set of covered verse numbers into maximal contiguous ranges.
- Expand audio coverage facts into covered verse numbers for one chapter.
- Render ranges in compact `1-3,6-8` syntax.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..errors import CoverageInvariantError
from ..models.datatypes import AudioCoverageFact, VerseRange


@dataclass(frozen=True, slots=True)
class RangeReconciliation:
    """Covered verse count and the minimal list of covered ranges."""

    covered_count: int
    ranges: tuple[VerseRange, ...]


def reconcile_ranges(
    verse_numbers: Iterable[int], covered: Iterable[int]
) -> RangeReconciliation:
    """Reconcile covered verse numbers against a chapter's verse numbers.

    Args:
        verse_numbers: The chapter's verse numbers, `1..total_verses`.
        covered: Covered verse numbers; duplicates and numbers outside the
            chapter are ignored.

    Returns:
        Covered count and ascending maximal contiguous ranges.

    Raises:
        CoverageInvariantError: If any verse number is negative.
    """

    chapter_numbers = set(verse_numbers)
    covered_numbers = set(covered)
    negative = [number for number in chapter_numbers | covered_numbers if number < 0]
    if negative:
        raise CoverageInvariantError(
            f"Verse numbers must not be negative; got {min(negative)}."
        )

    ordered = sorted(covered_numbers & chapter_numbers)
    if not ordered:
        return RangeReconciliation(covered_count=0, ranges=())

    ranges: list[VerseRange] = []
    start = ordered[0]
    previous = ordered[0]
    for number in ordered[1:]:
        if number == previous + 1:
            previous = number
            continue
        ranges.append(VerseRange(start=start, end=previous))
        start = number
        previous = number
    ranges.append(VerseRange(start=start, end=previous))
    return RangeReconciliation(covered_count=len(ordered), ranges=tuple(ranges))


def covered_numbers_from_facts(
    facts: Iterable[AudioCoverageFact], total_verses: int
) -> set[int]:
    """Expand audio facts into covered verse numbers clipped to `1..total_verses`."""

    covered: set[int] = set()
    for fact in facts:
        start = max(1, fact.start_verse_number)
        end = min(total_verses, fact.end_verse_number)
        covered.update(range(start, end + 1))
    return covered


def format_ranges(ranges: Iterable[VerseRange]) -> str:
    """Format ranges into compact comma-separated syntax, `""` when empty."""

    return ",".join(verse_range.label for verse_range in ranges)
