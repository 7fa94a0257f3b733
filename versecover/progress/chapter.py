"""Chapter-level progress calculation.

Responsibilities:
- Derive status and rounded percentage from covered/total verse counts.
- Build fast-tier records from a binary "chapter has any coverage" flag.
- Build detailed-tier records from audio ranges or per-verse text coverage.

Fast and detailed records always agree at 0 % and 100 %. Between those, the
fast tier reports a chapter as fully done as soon as any fact exists, so it
can overstate partial chapters until detail is loaded.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..errors import HierarchyUnavailable
from ..models.datatypes import (
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    STATUS_NOT_STARTED,
    AudioCoverageFact,
    Chapter,
    ChapterProgress,
    ProgressSelection,
    ProgressStatus,
    Verse,
)
from ..sources.base import AudioCoverageSource, HierarchyProvider, TextCoverageSource
from ..telemetry.logger import ProgressLogger
from .ranges import covered_numbers_from_facts, reconcile_ranges


def round_percentage(part: int, whole: int) -> int:
    """Return `round(100 * part / whole)` rounding halves up, `0` for empty wholes."""

    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def percentage_for(covered: int, total: int) -> int:
    """Chapter percentage; partial chapters stay within `1..99`.

    `100` is reserved for complete chapters and `0` for untouched ones, so the
    percentage never contradicts the status.
    """

    if total <= 0 or covered <= 0:
        return 0
    if covered >= total:
        return 100
    return min(99, max(1, round_percentage(covered, total)))


def status_for(covered: int, total: int) -> ProgressStatus:
    if covered <= 0:
        return STATUS_NOT_STARTED
    if covered >= total:
        return STATUS_COMPLETE
    return STATUS_IN_PROGRESS


def _progress(
    chapter_id: str,
    total: int,
    covered: int,
    **extra: object,
) -> ChapterProgress:
    covered = max(0, min(covered, total))
    return ChapterProgress(
        chapter_id=chapter_id,
        total_verses=total,
        covered_verses=covered,
        percentage=percentage_for(covered, total),
        status=status_for(covered, total),
        **extra,
    )


class ChapterProgressCalculator:
    """Compute `ChapterProgress` records for one selection.

    The pure builders (`fast`, `from_audio_facts`, `from_text_coverage`,
    `unavailable`) never suspend. `detailed` is the only path that awaits the
    coverage source.
    """

    def __init__(
        self,
        selection: ProgressSelection,
        *,
        hierarchy: HierarchyProvider,
        audio_source: AudioCoverageSource | None = None,
        text_source: TextCoverageSource | None = None,
        logger: ProgressLogger | None = None,
    ) -> None:
        if selection.content_kind == "audio" and audio_source is None:
            raise ValueError("Audio selections require an `audio_source`.")
        if selection.content_kind == "text" and text_source is None:
            raise ValueError("Text selections require a `text_source`.")
        self.selection = selection
        self._hierarchy = hierarchy
        self._audio_source = audio_source
        self._text_source = text_source
        self._logger = logger or ProgressLogger()

    @staticmethod
    def fast(chapter: Chapter, has_coverage: bool) -> ChapterProgress:
        """Approximate a chapter as fully covered or fully empty."""

        covered = chapter.total_verses if has_coverage else 0
        return _progress(chapter.id, chapter.total_verses, covered)

    @staticmethod
    def unavailable(chapter_id: str) -> ChapterProgress:
        """Zero progress for a chapter whose hierarchy data is missing."""

        return _progress(chapter_id, 0, 0)

    def fallback(self, chapter: Chapter) -> ChapterProgress:
        """Detailed not-started record used when a chapter's coverage fetch failed.

        Audio fallbacks carry an empty range list; text records never carry ranges.
        """

        ranges = () if self.selection.content_kind == "audio" else None
        return _progress(chapter.id, chapter.total_verses, 0, ranges=ranges, detailed=True)

    @staticmethod
    def from_audio_facts(
        chapter: Chapter, facts: Iterable[AudioCoverageFact]
    ) -> ChapterProgress:
        """Exact audio progress with reconciled covered ranges."""

        relevant = [fact for fact in facts if fact.chapter_id == chapter.id]
        covered = covered_numbers_from_facts(relevant, chapter.total_verses)
        reconciliation = reconcile_ranges(chapter.verse_numbers(), covered)
        durations: dict[str, float] = {}
        for fact in relevant:
            durations[fact.media_file_id] = max(
                durations.get(fact.media_file_id, 0.0), fact.duration_seconds or 0.0
            )
        return _progress(
            chapter.id,
            chapter.total_verses,
            reconciliation.covered_count,
            ranges=reconciliation.ranges,
            media_file_ids=tuple(sorted(durations)),
            media_duration_seconds=sum(durations.values()),
            detailed=True,
        )

    @staticmethod
    def from_text_coverage(
        chapter: Chapter, verses: Sequence[Verse], verse_ids_with_text: Iterable[str]
    ) -> ChapterProgress:
        """Exact text progress counting distinct verses of this chapter with text."""

        chapter_verse_ids = {verse.id for verse in verses if verse.chapter_id == chapter.id}
        covered = len(chapter_verse_ids.intersection(verse_ids_with_text))
        return _progress(chapter.id, chapter.total_verses, covered, detailed=True)

    async def detailed(self, chapter: Chapter) -> ChapterProgress:
        """Fetch coverage facts for one chapter and compute its exact progress.

        Coverage source failures propagate to the caller; missing verse rows
        for a text chapter are treated as zero progress.
        """

        if self._audio_source is not None and self.selection.content_kind == "audio":
            facts = await self._audio_source.get_media_file_chapter_coverage(
                self.selection.version_id, chapter.id
            )
            return self.from_audio_facts(chapter, facts)

        if self._text_source is None:
            raise ValueError("Text selections require a `text_source`.")
        try:
            verses = await self._hierarchy.get_verses(chapter.id)
        except HierarchyUnavailable:
            self._logger.log_hierarchy_unavailable(chapter.id)
            return _progress(chapter.id, chapter.total_verses, 0, detailed=True)
        verse_ids = await self._text_source.get_verse_text_coverage(
            self.selection.version_id, chapter.id
        )
        return self.from_text_coverage(chapter, verses, verse_ids)
