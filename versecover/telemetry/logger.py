"""Structured progress logging utilities.

Responsibilities:
- Emit concise, deterministic event logs for detail loads and degraded chapters.
- Route all lines through `loguru` so CLI and library callers share one sink.
"""

from __future__ import annotations

from typing import TextIO

from loguru import logger as _loguru_logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class ProgressLogger:
    """Emit deterministic event lines for progress aggregation activity.

    When `sink` is given, the loguru handlers are replaced by a single plain
    handler writing to it (CLI and tests). Without a sink the existing loguru
    configuration is left untouched.
    """

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        self._sink = sink
        if sink is not None:
            _loguru_logger.remove()
            _loguru_logger.add(sink, format="{message}", level=level, colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured runtime log line."""

        line = f"[progress] level={level} stage={stage} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_detail_start(self, book_id: str) -> None:
        self._emit("INFO", "start", "detail", book_id=book_id)

    def log_detail_loaded(self, book_id: str, chapter_count: int, fallback_count: int) -> None:
        self._emit(
            "INFO",
            "loaded",
            "detail",
            book_id=book_id,
            chapters=chapter_count,
            fallbacks=fallback_count,
        )

    def log_detail_failure(self, book_id: str, error_type: str) -> None:
        """Emit a detail-load failure without sensitive payload details."""

        self._emit("ERROR", "failure", "detail", book_id=book_id, error_type=error_type)

    def log_chapter_fallback(self, chapter_id: str, error_type: str) -> None:
        """Emit a chapter degraded to not-started after a coverage fetch failure."""

        self._emit("WARNING", "fallback", "coverage", chapter_id=chapter_id, error_type=error_type)

    def log_bulk_coverage_failure(self, version_id: str, error_type: str) -> None:
        """Emit a failed any-coverage query; fast mode then reports zero coverage."""

        self._emit(
            "WARNING", "bulk_failure", "coverage", version_id=version_id, error_type=error_type
        )

    def log_hierarchy_unavailable(self, target_id: str) -> None:
        self._emit("WARNING", "unavailable", "hierarchy", target_id=target_id)

    def log_invalid_selection(self, bible_version_id: str, content_kind: str, version_id: str) -> None:
        self._emit(
            "WARNING",
            "invalid",
            "selection",
            bible_version_id=bible_version_id,
            content_kind=content_kind,
            version_id=version_id,
        )

    def log_snapshot_refresh(self, bible_version_id: str, book_count: int, covered_chapters: int) -> None:
        """Emit a fast-mode snapshot rebuild for a new selection."""

        self._emit(
            "INFO",
            "refresh",
            "snapshot",
            bible_version_id=bible_version_id,
            books=book_count,
            covered_chapters=covered_chapters,
        )
