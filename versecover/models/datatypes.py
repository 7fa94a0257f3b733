"""Core datatypes shared across Versecover modules.

Responsibilities:
- Represent immutable Scripture hierarchy records (`Book`, `Chapter`, `Verse`).
- Represent typed coverage facts decided at the source boundary.
- Represent computed progress records exchanged between aggregation stages.

Key types:
- `Book`, `Chapter`, `Verse`, `AudioCoverageFact`, `TextCoverageFact`,
  `VerseRange`, `ChapterProgress`, `BookProgress`, `CompletionTally`,
  `ProgressStats`, and `ProgressSelection`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from ..errors import CoverageInvariantError

ProgressStatus = Literal["not_started", "in_progress", "complete"]
ContentKind = Literal["audio", "text"]
DetailState = Literal["absent", "loading", "loaded"]

STATUS_NOT_STARTED: ProgressStatus = "not_started"
STATUS_IN_PROGRESS: ProgressStatus = "in_progress"
STATUS_COMPLETE: ProgressStatus = "complete"

CONTENT_KINDS: frozenset[str] = frozenset({"audio", "text"})


@dataclass(frozen=True, slots=True)
class Chapter:
    """One chapter of a book.

    Attributes:
        id: Opaque chapter identifier.
        book_id: Identifier of the owning book.
        chapter_number: 1-based chapter number within the book.
        total_verses: Authoritative verse count, the denominator for chapter math.
    """

    id: str
    book_id: str
    chapter_number: int
    total_verses: int

    def __post_init__(self) -> None:
        if self.total_verses < 0:
            raise CoverageInvariantError(
                f"Chapter `{self.id}` has negative `total_verses` ({self.total_verses})."
            )

    def verse_numbers(self) -> range:
        """Return the contiguous 1-based verse numbers of this chapter."""

        return range(1, self.total_verses + 1)


@dataclass(frozen=True, slots=True)
class Book:
    """A book of one bible version with its ordered chapters."""

    id: str
    name: str
    order: int
    chapters: tuple[Chapter, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Verse:
    """A verse row; `id` is opaque and distinct from `verse_number`."""

    id: str
    chapter_id: str
    verse_number: int


@dataclass(frozen=True, slots=True)
class AudioCoverageFact:
    """Verse range covered by one media file within one chapter.

    Attributes:
        media_file_id: Identifier of the covering media file.
        chapter_id: Chapter the range belongs to.
        start_verse_number: Inclusive 1-based start verse.
        end_verse_number: Inclusive end verse, never below the start.
        duration_seconds: Recording length, `None` when unknown.
    """

    media_file_id: str
    chapter_id: str
    start_verse_number: int
    end_verse_number: int
    duration_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.start_verse_number < 1:
            raise CoverageInvariantError(
                f"Media file `{self.media_file_id}` starts at invalid verse "
                f"{self.start_verse_number}; verse numbers are 1-based."
            )
        if self.end_verse_number < self.start_verse_number:
            raise CoverageInvariantError(
                f"Media file `{self.media_file_id}` ends at verse {self.end_verse_number} "
                f"before its start verse {self.start_verse_number}."
            )
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise CoverageInvariantError(
                f"Media file `{self.media_file_id}` has negative duration {self.duration_seconds}."
            )


@dataclass(frozen=True, slots=True)
class TextCoverageFact:
    """Whether one verse has a non-empty text submission."""

    verse_id: str
    has_text: bool

    @classmethod
    def from_text(cls, verse_id: str, text: str | None) -> TextCoverageFact:
        """Build a fact from raw verse text; whitespace-only text does not count."""

        return cls(verse_id=verse_id, has_text=bool(text and text.strip()))


@dataclass(frozen=True, slots=True)
class VerseRange:
    """Inclusive contiguous verse-number interval."""

    start: int
    end: int

    @property
    def label(self) -> str:
        """Compact label, `5` for single verses and `1-3` otherwise."""

        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True, slots=True)
class ChapterProgress:
    """Completion record for one chapter.

    Attributes:
        chapter_id: Chapter identifier.
        total_verses: Denominator copied from the hierarchy.
        covered_verses: Covered verse count (exact or fast approximation).
        percentage: Rounded integer percentage in `0..100`.
        status: `not_started`, `in_progress`, or `complete`.
        ranges: Covered verse ranges; `None` unless audio detail was loaded.
        media_file_ids: Sorted media files contributing coverage (audio detail only).
        media_duration_seconds: Summed length of those media files; unknown lengths count as 0.
        detailed: Whether the record came from the detailed tier.
    """

    chapter_id: str
    total_verses: int
    covered_verses: int
    percentage: int
    status: ProgressStatus
    ranges: tuple[VerseRange, ...] | None = None
    media_file_ids: tuple[str, ...] = field(default_factory=tuple)
    media_duration_seconds: float = 0.0
    detailed: bool = False


@dataclass(frozen=True, slots=True)
class BookProgress:
    """Roll-up of one book's chapter progress.

    `percentage` is the share of complete chapters, not a verse-weighted
    average. `total_verses` and `covered_verses` are informational sums.
    """

    book_id: str
    book_name: str
    order: int
    chapters: tuple[ChapterProgress, ...]
    total_chapters: int
    completed_chapters: int
    in_progress_chapters: int
    not_started_chapters: int
    percentage: int
    total_verses: int = 0
    covered_verses: int = 0

    @property
    def is_complete(self) -> bool:
        """A book is complete iff it has counted chapters and all are complete."""

        return self.total_chapters > 0 and self.completed_chapters == self.total_chapters

    @property
    def status(self) -> ProgressStatus:
        if self.is_complete:
            return STATUS_COMPLETE
        if self.completed_chapters or self.in_progress_chapters:
            return STATUS_IN_PROGRESS
        return STATUS_NOT_STARTED


@dataclass(frozen=True, slots=True)
class CompletionTally:
    """Completed/total counter with its rounded percentage."""

    completed: int
    total: int
    percentage: int


@dataclass(frozen=True, slots=True)
class ProgressStats:
    """Whole-version aggregate statistics for one selection."""

    books_progress: CompletionTally
    chapters_progress: CompletionTally
    verses_progress: CompletionTally


@dataclass(frozen=True, slots=True)
class ProgressSelection:
    """Bible version plus the audio or text version progress is measured for.

    Attributes:
        bible_version_id: Bible version whose hierarchy is used.
        content_kind: `audio` for verse-range coverage, `text` for per-verse coverage.
        version_id: Audio version id or text version id, depending on `content_kind`.
    """

    bible_version_id: str
    content_kind: ContentKind
    version_id: str

    def is_complete(self) -> bool:
        """Return whether every identifier is present and the kind is known."""

        return (
            bool(self.bible_version_id.strip())
            and bool(self.version_id.strip())
            and self.content_kind in CONTENT_KINDS
        )
