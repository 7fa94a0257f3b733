"""Book-level roll-up and whole-version statistics.

Responsibilities:
- Fold a book's chapter progress into completed/in-progress/not-started buckets.
- Compute `ProgressStats` strictly from per-book aggregates so book and
  chapter statistics can never disagree.

Chapters with `total_verses == 0` stay listed in `BookProgress.chapters` but
are excluded from the buckets and from the denominator.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from ..models.datatypes import (
    STATUS_COMPLETE,
    STATUS_IN_PROGRESS,
    Book,
    BookProgress,
    ChapterProgress,
    CompletionTally,
    ProgressStats,
)
from .chapter import round_percentage


def _tally(completed: int, total: int) -> CompletionTally:
    return CompletionTally(
        completed=completed,
        total=total,
        percentage=round_percentage(completed, total),
    )


class BookProgressAggregator:
    """Stateless aggregation of chapter progress into book and version statistics."""

    @staticmethod
    def aggregate_book(book: Book, chapters: Sequence[ChapterProgress]) -> BookProgress:
        """Roll up one book's chapter progress.

        Args:
            book: Book reference data supplying id, name, and canonical order.
            chapters: Chapter progress records in display order.

        Returns:
            Book progress whose percentage is the share of complete chapters.
        """

        counted = [chapter for chapter in chapters if chapter.total_verses > 0]
        completed = sum(1 for chapter in counted if chapter.status == STATUS_COMPLETE)
        in_progress = sum(1 for chapter in counted if chapter.status == STATUS_IN_PROGRESS)
        not_started = len(counted) - completed - in_progress
        return BookProgress(
            book_id=book.id,
            book_name=book.name,
            order=book.order,
            chapters=tuple(chapters),
            total_chapters=len(counted),
            completed_chapters=completed,
            in_progress_chapters=in_progress,
            not_started_chapters=not_started,
            percentage=round_percentage(completed, len(counted)),
            total_verses=sum(chapter.total_verses for chapter in counted),
            covered_verses=sum(chapter.covered_verses for chapter in counted),
        )

    @staticmethod
    def aggregate_stats(books: Iterable[BookProgress]) -> ProgressStats:
        """Compute whole-version statistics from per-book aggregates.

        Totals are sums, so the result does not depend on input order.
        """

        book_total = 0
        book_completed = 0
        chapter_total = 0
        chapter_completed = 0
        verse_total = 0
        verse_covered = 0
        for book in books:
            book_total += 1
            if book.is_complete:
                book_completed += 1
            chapter_total += book.total_chapters
            chapter_completed += book.completed_chapters
            verse_total += book.total_verses
            verse_covered += book.covered_verses

        return ProgressStats(
            books_progress=_tally(book_completed, book_total),
            chapters_progress=_tally(chapter_completed, chapter_total),
            verses_progress=_tally(verse_covered, verse_total),
        )

    @staticmethod
    def empty_stats() -> ProgressStats:
        """Zero statistics returned for selections without data."""

        return BookProgressAggregator.aggregate_stats(())

    @staticmethod
    def order_books(books: Iterable[BookProgress]) -> list[BookProgress]:
        """Sort book progress into canonical display order."""

        return sorted(books, key=lambda book: (book.order, book.book_id))
