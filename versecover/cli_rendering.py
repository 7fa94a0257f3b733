"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
version statistics, book rows, and chapter rows.
"""

from __future__ import annotations

import math
from typing import NoReturn, Sequence

import typer

from .errors import ProgressError
from .models.datatypes import Book, BookProgress, ChapterProgress, CompletionTally, ProgressStats
from .progress.ranges import format_ranges


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, ProgressError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def _tally_line(label: str, tally: CompletionTally) -> str:
    return f"{label}: {tally.completed}/{tally.total} ({tally.percentage}%)"


def echo_progress_stats(stats: ProgressStats) -> None:
    """Print whole-version book, chapter, and verse tallies."""

    typer.echo(_tally_line("Books complete", stats.books_progress))
    typer.echo(_tally_line("Chapters complete", stats.chapters_progress))
    typer.echo(_tally_line("Verses covered", stats.verses_progress))


def echo_book_rows(books: Sequence[BookProgress]) -> None:
    """Print one deterministic row per book in canonical order."""

    if not books:
        typer.echo("No books found for this selection.")
        return
    for book in books:
        typer.echo(
            f"{book.order}. {book.book_name}: "
            f"{book.completed_chapters}/{book.total_chapters} chapters complete "
            f"({book.percentage}%) [{book.status}]"
        )


def format_media_summary(progress: ChapterProgress) -> str:
    """Render `files=N` plus the total length in whole minutes when files exist."""

    count = len(progress.media_file_ids)
    if not count:
        return "files=0"
    minutes = math.floor(progress.media_duration_seconds / 60 + 0.5)
    return f"files={count} total={minutes}m"


def echo_chapter_rows(book: Book, chapters: Sequence[ChapterProgress]) -> None:
    """Print one row per chapter, with ranges and media files when audio detail is known."""

    numbers = {chapter.id: chapter.chapter_number for chapter in book.chapters}
    typer.echo(f"Book: {book.name}")
    for progress in chapters:
        row = (
            f"{numbers.get(progress.chapter_id, '?')}. "
            f"{progress.covered_verses}/{progress.total_verses} verses "
            f"({progress.percentage}%) [{progress.status}]"
        )
        if progress.ranges is not None:
            row += f" ranges={format_ranges(progress.ranges) or '-'}"
            row += f" {format_media_summary(progress)}"
        typer.echo(row)
