"""Unit tests for structured progress event logging."""

from __future__ import annotations

import io

from versecover.telemetry.logger import ProgressLogger


def test_logger_emits_deterministic_key_sorted_lines() -> None:
    """Event lines should carry stage, event, and sorted sanitized context."""

    sink = io.StringIO()
    logger = ProgressLogger(sink=sink)

    logger.log_detail_loaded("gen", chapter_count=50, fallback_count=1)
    logger.log_chapter_fallback("gen 2", "CoverageFetchFailed")

    lines = sink.getvalue().splitlines()
    assert lines == [
        "[progress] level=INFO stage=detail event=loaded book_id=gen chapters=50 fallbacks=1",
        "[progress] level=WARNING stage=coverage event=fallback "
        "chapter_id=gen_2 error_type=CoverageFetchFailed",
    ]


def test_logger_respects_minimum_level() -> None:
    sink = io.StringIO()
    logger = ProgressLogger(sink=sink, level="WARNING")

    logger.log_detail_start("gen")
    logger.log_hierarchy_unavailable("lev")

    assert sink.getvalue().splitlines() == [
        "[progress] level=WARNING stage=hierarchy event=unavailable target_id=lev"
    ]


def test_logger_renders_blank_context_as_none() -> None:
    sink = io.StringIO()
    logger = ProgressLogger(sink=sink)

    logger.log_invalid_selection("bsb", "audio", "  ")

    assert sink.getvalue().strip() == (
        "[progress] level=WARNING stage=selection event=invalid "
        "bible_version_id=bsb content_kind=audio version_id=none"
    )


def test_logger_reports_bulk_coverage_failure() -> None:
    sink = io.StringIO()
    logger = ProgressLogger(sink=sink)

    logger.log_bulk_coverage_failure("audio-en", "CoverageFetchFailed")

    assert sink.getvalue().strip() == (
        "[progress] level=WARNING stage=coverage event=bulk_failure "
        "error_type=CoverageFetchFailed version_id=audio-en"
    )
