"""Integration tests for CLI progress reports over a snapshot file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml
from typer.testing import CliRunner

from versecover.cli import app


@pytest.fixture
def snapshot_path(tmp_path: Path, sample_payload: dict[str, Any]) -> Path:
    """Write the sample snapshot to a YAML file."""

    path = tmp_path / "snapshot.yaml"
    path.write_text(yaml.safe_dump(sample_payload, sort_keys=False), encoding="utf-8")
    return path


def _audio_args(snapshot_path: Path) -> list[str]:
    return [str(snapshot_path), "--bible-version", "bsb", "--audio-version", "audio-en"]


def test_stats_command_prints_version_tallies(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["stats", *_audio_args(snapshot_path)])

    assert result.exit_code == 0, result.output
    assert "Selection: bible=bsb audio=audio-en" in result.output
    assert "Books complete: 1/3 (33%)" in result.output
    assert "Chapters complete: 3/4 (75%)" in result.output
    assert "Verses covered: 23/27 (85%)" in result.output


def test_books_command_lists_books_in_canonical_order(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["books", *_audio_args(snapshot_path)])

    assert result.exit_code == 0, result.output
    rows = [line for line in result.output.splitlines() if "chapters complete" in line]
    assert rows == [
        "1. Genesis: 2/2 chapters complete (100%) [complete]",
        "2. Exodus: 1/2 chapters complete (50%) [in_progress]",
        "8. Ruth: 0/0 chapters complete (0%) [not_started]",
    ]


def test_chapters_command_fast_mode_overstates_partial_chapter(snapshot_path: Path) -> None:
    """Without detail a chapter with any coverage is shown as complete."""

    runner = CliRunner()

    result = runner.invoke(app, ["chapters", *_audio_args(snapshot_path), "--book", "gen"])

    assert result.exit_code == 0, result.output
    assert "Book: Genesis" in result.output
    assert "2. 8/8 verses (100%) [complete]" in result.output
    assert "ranges=" not in result.output
    assert "Book complete: 2/2 chapters (100%)" in result.output


def test_chapters_command_detail_reports_ranges(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app, ["chapters", *_audio_args(snapshot_path), "--book", "gen", "--detail"]
    )

    assert result.exit_code == 0, result.output
    assert "1. 10/10 verses (100%) [complete] ranges=1-10 files=1 total=10m" in result.output
    assert "2. 6/8 verses (75%) [in_progress] ranges=1-3,6-8 files=2 total=2m" in result.output
    assert "Book complete: 1/2 chapters (50%)" in result.output


def test_chapters_command_detail_for_text_selection(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "chapters",
            str(snapshot_path),
            "--bible-version",
            "bsb",
            "--text-version",
            "text-en",
            "--book",
            "gen",
            "--detail",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "2. 1/8 verses (13%) [in_progress]" in result.output
    assert "files=" not in result.output
    assert "Book complete: 1/2 chapters (50%)" in result.output


def test_stats_command_reads_config_file(tmp_path: Path, snapshot_path: Path) -> None:
    """Config defaults should select the text version when no CLI override is given."""

    config_path = tmp_path / "versecover.yaml"
    config_path.write_text(
        f"snapshot_path: {snapshot_path}\nbible_version_id: bsb\ntext_version_id: text-en\n",
        encoding="utf-8",
    )
    runner = CliRunner()

    from_config = runner.invoke(app, ["stats", "--config", str(config_path)])
    overridden = runner.invoke(
        app, ["stats", "--config", str(config_path), "--audio-version", "audio-en"]
    )

    assert from_config.exit_code == 0, from_config.output
    assert "Selection: bible=bsb text=text-en" in from_config.output
    assert "Chapters complete: 2/4 (50%)" in from_config.output
    assert overridden.exit_code == 0, overridden.output
    assert "Selection: bible=bsb audio=audio-en" in overridden.output


def test_books_command_with_unknown_version_reports_no_books(snapshot_path: Path) -> None:
    """Unknown content versions degrade to empty progress instead of failing."""

    runner = CliRunner()

    result = runner.invoke(
        app,
        ["books", str(snapshot_path), "--bible-version", "bsb", "--audio-version", "audio-xx"],
    )

    assert result.exit_code == 0, result.output
    assert "No books found for this selection." in result.output


def test_log_level_info_emits_progress_events(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            "chapters",
            *_audio_args(snapshot_path),
            "--book",
            "gen",
            "--detail",
            "--log-level",
            "info",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "[progress] level=INFO stage=snapshot event=refresh" in result.output
    assert "[progress] level=INFO stage=detail event=loaded book_id=gen chapters=2" in result.output


def test_chapters_command_reports_unknown_book(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["chapters", *_audio_args(snapshot_path), "--book", "lev"])

    assert result.exit_code == 1
    assert "chapters failed at stage `hierarchy`" in result.output
    assert "Book `lev` is not part of bible version `bsb`." in result.output
    assert "Hint: Run `versecover books` to list available books." in result.output


def test_stats_command_reports_missing_snapshot(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["stats", *_audio_args(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "stats failed at stage `snapshot`" in result.output
    assert "Snapshot file not found" in result.output


def test_stats_command_reports_invalid_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("bible_versions:\n  - id: bsb\n    books: nope\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["stats", *_audio_args(path)])

    assert result.exit_code == 1
    assert "stats failed at stage `snapshot`" in result.output
    assert "must be a list" in result.output


def test_stats_command_requires_snapshot_without_config() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["stats", "--bible-version", "bsb", "--audio-version", "a"])

    assert result.exit_code == 1
    assert "stats failed at stage `config`" in result.output
    assert "Snapshot path is required when `--config` is not provided." in result.output


def test_books_command_rejects_two_content_versions(snapshot_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app, ["books", *_audio_args(snapshot_path), "--text-version", "text-en"]
    )

    assert result.exit_code == 1
    assert "books failed at stage `config`" in result.output
    assert "Exactly one of `audio_version_id` or `text_version_id` must be set." in result.output


def test_stats_command_reports_missing_config_file() -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["stats", "--config", "missing-versecover.yaml"])

    assert result.exit_code == 1
    assert "stats failed at stage `config`" in result.output
    assert "Config file not found: `missing-versecover.yaml`." in result.output
