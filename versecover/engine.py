"""Progress engine facade used by UI and CLI callers.

Responsibilities:
- Build a fast-mode snapshot (hierarchy plus chapters with any coverage) per selection.
- Compose book progress from detailed chapter records where loaded, else fast ones.
- Expose best-effort, non-suspending chapter lookups and detail-state queries.

Key public entry points:
- `ProgressEngine.get_progress_stats`, `ProgressEngine.get_book_progress`,
  `ProgressEngine.request_detailed_book_progress`, and
  `ProgressEngine.get_chapter_progress`.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable

from .errors import CoverageFetchFailed, HierarchyUnavailable, InvalidSelection
from .models.datatypes import (
    Book,
    BookProgress,
    Chapter,
    ChapterProgress,
    DetailState,
    ProgressSelection,
    ProgressStats,
)
from .progress.book import BookProgressAggregator
from .progress.cache import DetailCache, retrieve_task_exception
from .progress.chapter import ChapterProgressCalculator
from .sources.base import AudioCoverageSource, HierarchyProvider, TextCoverageSource
from .telemetry.logger import ProgressLogger


@dataclass(slots=True)
class _SelectionSnapshot:
    """Fast-mode data and detail cache belonging to one selection."""

    selection: ProgressSelection
    books: tuple[Book, ...] = ()
    covered_chapter_ids: frozenset[str] = frozenset()
    detail: DetailCache | None = None
    books_by_id: dict[str, Book] = field(default_factory=dict)
    chapters_by_id: dict[str, Chapter] = field(default_factory=dict)

    def index(self) -> None:
        self.books_by_id = {book.id: book for book in self.books}
        self.chapters_by_id = {
            chapter.id: chapter for book in self.books for chapter in book.chapters
        }

    def fast_progress(self, book_id: str, chapter_id: str) -> ChapterProgress:
        chapter = self.chapters_by_id.get(chapter_id)
        if chapter is None or chapter.book_id != book_id:
            return ChapterProgressCalculator.unavailable(chapter_id)
        return ChapterProgressCalculator.fast(chapter, chapter_id in self.covered_chapter_ids)


class ProgressEngine:
    """Compute completion progress for one bible version and content version at a time.

    Args:
        hierarchy: Scripture structure provider.
        audio_source: Coverage source for `audio` selections.
        text_source: Coverage source for `text` selections.
        logger: Optional event logger.
    """

    def __init__(
        self,
        *,
        hierarchy: HierarchyProvider,
        audio_source: AudioCoverageSource | None = None,
        text_source: TextCoverageSource | None = None,
        logger: ProgressLogger | None = None,
    ) -> None:
        self._hierarchy = hierarchy
        self._audio_source = audio_source
        self._text_source = text_source
        self._logger = logger or ProgressLogger()
        self._current: _SelectionSnapshot | None = None
        self._pending: ProgressSelection | None = None
        self._building: dict[ProgressSelection, asyncio.Task[_SelectionSnapshot]] = {}

    @property
    def selection(self) -> ProgressSelection | None:
        return self._current.selection if self._current is not None else None

    async def get_book_progress(
        self, selection: ProgressSelection, *, refresh: bool = False
    ) -> list[BookProgress]:
        """Return progress for every book of the selection in canonical order.

        Books whose detail is loaded use verse-level chapter records; all other
        books use the fast binary approximation.
        """

        snapshot = await self._snapshot_for(selection, refresh=refresh)
        return BookProgressAggregator.order_books(
            self._compose_book(snapshot, book) for book in snapshot.books
        )

    async def get_progress_stats(
        self, selection: ProgressSelection, *, refresh: bool = False
    ) -> ProgressStats:
        """Return whole-version statistics derived from `get_book_progress`."""

        books = await self.get_book_progress(selection, refresh=refresh)
        return BookProgressAggregator.aggregate_stats(books)

    async def request_detailed_book_progress(self, book_id: str) -> None:
        """Load verse-level detail for one book of the current selection.

        Unknown books and calls made before any selection are ignored.
        """

        snapshot = self._current
        if snapshot is None or snapshot.detail is None:
            return
        if book_id not in snapshot.books_by_id:
            self._logger.log_hierarchy_unavailable(book_id)
            return
        await snapshot.detail.request_detail(book_id)

    def get_chapter_progress(self, book_id: str, chapter_id: str) -> ChapterProgress:
        """Return detailed progress when loaded, else the fast approximation."""

        snapshot = self._current
        if snapshot is None:
            return ChapterProgressCalculator.unavailable(chapter_id)
        if snapshot.detail is None:
            return snapshot.fast_progress(book_id, chapter_id)
        return snapshot.detail.get_best_effort(book_id, chapter_id)

    def get_book(self, book_id: str) -> Book | None:
        """Return reference data for a book of the current selection."""

        snapshot = self._current
        if snapshot is None:
            return None
        return snapshot.books_by_id.get(book_id)

    def get_detailed_book_progress(self, book_id: str) -> BookProgress | None:
        """Recombine one book from its best available chapter records."""

        snapshot = self._current
        if snapshot is None:
            return None
        book = snapshot.books_by_id.get(book_id)
        if book is None:
            return None
        return self._compose_book(snapshot, book)

    def detail_state(self, book_id: str) -> DetailState:
        """Distinguish a pending detail load from a loaded (possibly zero) one."""

        snapshot = self._current
        if snapshot is None or snapshot.detail is None:
            return "absent"
        return snapshot.detail.state(book_id)

    def _compose_book(self, snapshot: _SelectionSnapshot, book: Book) -> BookProgress:
        if snapshot.detail is None:
            chapters = [snapshot.fast_progress(book.id, chapter.id) for chapter in book.chapters]
        else:
            chapters = [
                snapshot.detail.get_best_effort(book.id, chapter.id) for chapter in book.chapters
            ]
        return BookProgressAggregator.aggregate_book(book, chapters)

    async def _snapshot_for(
        self, selection: ProgressSelection, *, refresh: bool
    ) -> _SelectionSnapshot:
        current = self._current
        if current is not None and current.selection == selection and not refresh:
            return current

        self._pending = selection
        in_flight = self._building.get(selection)
        if in_flight is None:
            in_flight = asyncio.get_running_loop().create_task(self._build_and_commit(selection))
            in_flight.add_done_callback(retrieve_task_exception)
            self._building[selection] = in_flight
        return await asyncio.shield(in_flight)

    async def _build_and_commit(self, selection: ProgressSelection) -> _SelectionSnapshot:
        """Build one selection's snapshot, shared by every concurrent caller."""

        try:
            snapshot = await self._build_snapshot(selection)
            # A newer selection may have started while this one was loading.
            if self._pending == selection:
                self._current = snapshot
                self._pending = None
            return snapshot
        finally:
            self._building.pop(selection, None)

    async def _build_snapshot(self, selection: ProgressSelection) -> _SelectionSnapshot:
        snapshot = _SelectionSnapshot(selection=selection)
        if not selection.is_complete() or self._source_for(selection) is None:
            self._logger.log_invalid_selection(
                selection.bible_version_id, selection.content_kind, selection.version_id
            )
            return snapshot

        try:
            books = await self._hierarchy.get_books(selection.bible_version_id)
        except InvalidSelection:
            self._logger.log_invalid_selection(
                selection.bible_version_id, selection.content_kind, selection.version_id
            )
            return snapshot
        except HierarchyUnavailable:
            self._logger.log_hierarchy_unavailable(selection.bible_version_id)
            return snapshot

        chapter_ids = [chapter.id for book in books for chapter in book.chapters]
        try:
            covered = await self._chapters_with_any_coverage(selection, chapter_ids)
        except InvalidSelection:
            self._logger.log_invalid_selection(
                selection.bible_version_id, selection.content_kind, selection.version_id
            )
            return snapshot
        except CoverageFetchFailed as exc:
            # Hierarchy stays usable; fast mode shows zero until detail loads.
            self._logger.log_bulk_coverage_failure(selection.version_id, type(exc).__name__)
            covered = set()

        snapshot.books = tuple(sorted(books, key=lambda book: (book.order, book.id)))
        snapshot.covered_chapter_ids = frozenset(covered)
        snapshot.index()
        calculator = ChapterProgressCalculator(
            selection,
            hierarchy=self._hierarchy,
            audio_source=self._audio_source,
            text_source=self._text_source,
            logger=self._logger,
        )
        snapshot.detail = DetailCache(
            hierarchy=self._hierarchy,
            calculator=calculator,
            fast_progress=snapshot.fast_progress,
            logger=self._logger,
        )
        self._logger.log_snapshot_refresh(
            selection.bible_version_id, len(snapshot.books), len(snapshot.covered_chapter_ids)
        )
        return snapshot

    def _source_for(
        self, selection: ProgressSelection
    ) -> AudioCoverageSource | TextCoverageSource | None:
        if selection.content_kind == "audio":
            return self._audio_source
        if selection.content_kind == "text":
            return self._text_source
        return None

    async def _chapters_with_any_coverage(
        self, selection: ProgressSelection, chapter_ids: Iterable[str]
    ) -> set[str]:
        if selection.content_kind == "audio" and self._audio_source is not None:
            return await self._audio_source.get_chapters_with_any_coverage(
                selection.version_id, chapter_ids
            )
        if self._text_source is None:
            raise InvalidSelection(f"No text source configured for `{selection.version_id}`.")
        return await self._text_source.get_chapters_with_any_text(
            selection.version_id, chapter_ids
        )
