"""Lazy per-book cache of verse-level chapter progress.

Responsibilities:
- Track each book through `absent -> loading -> loaded`.
- Run at most one in-flight detail load per book id and share it between callers.
- Serve best-effort chapter progress without ever suspending.

Loaded entries are never invalidated. Coverage facts are assumed
append-only, so a book expanded before new uploads keeps showing its
earlier detail until a fresh cache is created for the selection.
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Callable, Mapping

from ..errors import CoverageInvariantError, HierarchyUnavailable
from ..models.datatypes import Chapter, ChapterProgress, DetailState
from ..sources.base import HierarchyProvider
from ..telemetry.logger import ProgressLogger
from .chapter import ChapterProgressCalculator

FastProgressLookup = Callable[[str, str], ChapterProgress]


def retrieve_task_exception(task: asyncio.Task) -> None:
    """Mark a shared task's failure as retrieved even when every waiter went away."""

    if not task.cancelled():
        task.exception()


class DetailCache:
    """Owned detail cache for one selection.

    Args:
        hierarchy: Provider used to list a book's chapters.
        calculator: Calculator bound to the selection's coverage source.
        fast_progress: Callback `(book_id, chapter_id) -> ChapterProgress`
            returning the fast-tier approximation.
        logger: Optional event logger.
    """

    def __init__(
        self,
        *,
        hierarchy: HierarchyProvider,
        calculator: ChapterProgressCalculator,
        fast_progress: FastProgressLookup,
        logger: ProgressLogger | None = None,
    ) -> None:
        self._hierarchy = hierarchy
        self._calculator = calculator
        self._fast_progress = fast_progress
        self._logger = logger or ProgressLogger()
        self._entries: dict[str, dict[str, ChapterProgress]] = {}
        self._loading: dict[str, asyncio.Task[dict[str, ChapterProgress]]] = {}
        self.fetch_count = 0
        self.hits = 0
        self.misses = 0

    def state(self, book_id: str) -> DetailState:
        if book_id in self._entries:
            return "loaded"
        if book_id in self._loading:
            return "loading"
        return "absent"

    def is_loaded(self, book_id: str) -> bool:
        return self.state(book_id) == "loaded"

    def is_loading(self, book_id: str) -> bool:
        return self.state(book_id) == "loading"

    def detail_for(self, book_id: str) -> Mapping[str, ChapterProgress] | None:
        """Return the loaded detail map for a book, or `None` before it is loaded."""

        entry = self._entries.get(book_id)
        if entry is None:
            return None
        return MappingProxyType(entry)

    async def request_detail(self, book_id: str) -> Mapping[str, ChapterProgress]:
        """Load detail for a book once and return the chapter-id keyed map.

        Concurrent callers for a book that is already loading await the same
        in-flight load instead of issuing a second fetch. A caller that stops
        waiting does not cancel the load; its result is still cached.
        """

        entry = self._entries.get(book_id)
        if entry is not None:
            self.hits += 1
            return MappingProxyType(entry)

        in_flight = self._loading.get(book_id)
        if in_flight is None:
            self.misses += 1
            in_flight = asyncio.get_running_loop().create_task(self._load(book_id))
            in_flight.add_done_callback(retrieve_task_exception)
            self._loading[book_id] = in_flight
        else:
            self.hits += 1

        detail = await asyncio.shield(in_flight)
        return MappingProxyType(detail)

    def get_best_effort(self, book_id: str, chapter_id: str) -> ChapterProgress:
        """Return detailed progress when loaded, else the fast approximation."""

        entry = self._entries.get(book_id)
        if entry is not None and chapter_id in entry:
            return entry[chapter_id]
        return self._fast_progress(book_id, chapter_id)

    async def _load(self, book_id: str) -> dict[str, ChapterProgress]:
        """Fan out one detailed calculation per chapter and store the combined map."""

        self.fetch_count += 1
        self._logger.log_detail_start(book_id)
        try:
            try:
                chapters = await self._hierarchy.get_chapters(book_id)
            except HierarchyUnavailable:
                self._logger.log_hierarchy_unavailable(book_id)
                chapters = []
            except Exception as exc:
                self._logger.log_detail_failure(book_id, type(exc).__name__)
                raise

            results = await asyncio.gather(
                *(self._calculator.detailed(chapter) for chapter in chapters),
                return_exceptions=True,
            )
            detail: dict[str, ChapterProgress] = {}
            fallback_count = 0
            for chapter, result in zip(chapters, results):
                if isinstance(result, ChapterProgress):
                    detail[chapter.id] = result
                    continue
                if not isinstance(result, Exception):
                    raise result
                if isinstance(result, CoverageInvariantError):
                    # Malformed facts are programmer errors, not missing data.
                    self._logger.log_detail_failure(book_id, type(result).__name__)
                    raise result
                fallback_count += 1
                detail[chapter.id] = self._fallback(chapter, result)

            self._entries[book_id] = detail
            self._logger.log_detail_loaded(book_id, len(chapters), fallback_count)
            return detail
        finally:
            self._loading.pop(book_id, None)

    def _fallback(self, chapter: Chapter, error: Exception) -> ChapterProgress:
        """Degrade one chapter whose coverage fetch failed to not-started."""

        self._logger.log_chapter_fallback(chapter.id, type(error).__name__)
        return self._calculator.fallback(chapter)
