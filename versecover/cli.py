"""Command-line interface for Versecover.

Responsibilities:
- Expose progress reporting commands over a hierarchy/coverage snapshot.
- Convert CLI arguments and YAML defaults into a `ProgressSelection`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from typing import Annotated

import typer

from .cli_rendering import (
    echo_book_rows,
    echo_chapter_rows,
    echo_progress_stats,
    exit_with_command_error,
)
from .config import ConfigLoader, VersecoverConfig
from .engine import ProgressEngine
from .errors import ProgressError
from .models.datatypes import Book, BookProgress, ProgressSelection
from .sources.snapshot import SnapshotRepository, load_snapshot
from .telemetry.logger import ProgressLogger

app = typer.Typer(
    name="versecover",
    no_args_is_help=True,
    help="Versecover CLI: Scripture coverage progress reports.",
)

SnapshotArgument = Annotated[
    Path | None,
    typer.Argument(help="Path to a YAML/JSON snapshot. Required unless provided by `--config`."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
BibleVersionOption = Annotated[
    str | None, typer.Option("--bible-version", help="Bible version id.")
]
AudioVersionOption = Annotated[
    str | None, typer.Option("--audio-version", help="Audio version id (range coverage).")
]
TextVersionOption = Annotated[
    str | None, typer.Option("--text-version", help="Text version id (per-verse coverage).")
]
LogLevelOption = Annotated[
    str, typer.Option("--log-level", help="Minimum level of progress event lines on stderr.")
]


def _load_yaml_config(config_path: Path | None) -> VersecoverConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ProgressError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ProgressError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _resolve_command_config(
    config_file: Path | None,
    snapshot: Path | None,
    bible_version: str | None,
    audio_version: str | None,
    text_version: str | None,
) -> VersecoverConfig:
    """Resolve effective command config from YAML defaults and explicit CLI overrides."""

    loaded = _load_yaml_config(config_file)
    resolved_snapshot = snapshot if snapshot is not None else (
        loaded.snapshot_path if loaded else None
    )
    if resolved_snapshot is None:
        raise ProgressError(
            stage="config",
            detail="Snapshot path is required when `--config` is not provided.",
            hint="Pass `<snapshot.yaml>` or use `--config <path.yaml>` with `snapshot_path`.",
        )
    resolved_bible_version = bible_version or (loaded.bible_version_id if loaded else None)
    if not resolved_bible_version:
        raise ProgressError(
            stage="config",
            detail="Bible version id is required.",
            hint="Pass `--bible-version <id>` or set `bible_version_id` in the config file.",
        )

    if audio_version is not None or text_version is not None or loaded is None:
        resolved_audio, resolved_text = audio_version, text_version
    else:
        resolved_audio, resolved_text = loaded.audio_version_id, loaded.text_version_id

    config = VersecoverConfig(
        snapshot_path=resolved_snapshot,
        bible_version_id=resolved_bible_version,
        audio_version_id=resolved_audio,
        text_version_id=resolved_text,
        extra=dict(loaded.extra) if loaded else {},
    )
    try:
        config.validate()
    except ValueError as exc:
        raise ProgressError(
            stage="config",
            detail=str(exc),
            hint="Pass exactly one of `--audio-version` or `--text-version`.",
        ) from exc
    return config


def _load_repository(path: Path) -> SnapshotRepository:
    """Load the snapshot repository and map failures to stage errors."""

    try:
        return load_snapshot(path)
    except FileNotFoundError as exc:
        raise ProgressError(
            stage="snapshot",
            detail=f"Snapshot file not found: `{path}`.",
            hint="Provide an existing YAML or JSON snapshot path.",
        ) from exc
    except ValueError as exc:
        raise ProgressError(
            stage="snapshot",
            detail=f"Invalid snapshot `{path}`: {exc}",
        ) from exc


def _build_engine(
    config: VersecoverConfig, log_level: str
) -> tuple[ProgressEngine, ProgressSelection]:
    repository = _load_repository(config.snapshot_path)
    engine = ProgressEngine(
        hierarchy=repository,
        audio_source=repository,
        text_source=repository,
        logger=ProgressLogger(sink=sys.stderr, level=log_level.upper()),
    )
    return engine, config.selection()


@app.command("stats")
def stats_command(
    snapshot: SnapshotArgument = None,
    config_file: ConfigOption = None,
    bible_version: BibleVersionOption = None,
    audio_version: AudioVersionOption = None,
    text_version: TextVersionOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print whole-version book, chapter, and verse completion."""

    try:
        config = _resolve_command_config(
            config_file, snapshot, bible_version, audio_version, text_version
        )
        engine, selection = _build_engine(config, log_level)
        stats = asyncio.run(engine.get_progress_stats(selection))
    except Exception as exc:
        exit_with_command_error("stats", exc)

    typer.echo(
        f"Selection: bible={selection.bible_version_id} "
        f"{selection.content_kind}={selection.version_id}"
    )
    echo_progress_stats(stats)


@app.command("books")
def books_command(
    snapshot: SnapshotArgument = None,
    config_file: ConfigOption = None,
    bible_version: BibleVersionOption = None,
    audio_version: AudioVersionOption = None,
    text_version: TextVersionOption = None,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print fast-mode progress for every book."""

    try:
        config = _resolve_command_config(
            config_file, snapshot, bible_version, audio_version, text_version
        )
        engine, selection = _build_engine(config, log_level)
        books = asyncio.run(engine.get_book_progress(selection))
    except Exception as exc:
        exit_with_command_error("books", exc)

    echo_book_rows(books)


async def _chapter_report(
    engine: ProgressEngine, selection: ProgressSelection, book_id: str, detail: bool
) -> tuple[Book | None, BookProgress | None]:
    """Load the selection, optionally expand one book, and return its progress."""

    await engine.get_book_progress(selection)
    if detail:
        await engine.request_detailed_book_progress(book_id)
    return engine.get_book(book_id), engine.get_detailed_book_progress(book_id)


@app.command("chapters")
def chapters_command(
    book_id: Annotated[str, typer.Option("--book", help="Book id to report chapters for.")],
    snapshot: SnapshotArgument = None,
    config_file: ConfigOption = None,
    bible_version: BibleVersionOption = None,
    audio_version: AudioVersionOption = None,
    text_version: TextVersionOption = None,
    detail: Annotated[
        bool,
        typer.Option(
            "--detail/--no-detail",
            help="Load verse-level detail instead of the fast chapter approximation.",
        ),
    ] = False,
    log_level: LogLevelOption = "WARNING",
) -> None:
    """Print chapter progress for one book."""

    try:
        config = _resolve_command_config(
            config_file, snapshot, bible_version, audio_version, text_version
        )
        engine, selection = _build_engine(config, log_level)
        book, book_progress = asyncio.run(_chapter_report(engine, selection, book_id, detail))
        if book is None or book_progress is None:
            raise ProgressError(
                stage="hierarchy",
                detail=f"Book `{book_id}` is not part of bible version `{selection.bible_version_id}`.",
                hint="Run `versecover books` to list available books.",
            )
    except Exception as exc:
        exit_with_command_error("chapters", exc)

    echo_chapter_rows(book, book_progress.chapters)
    typer.echo(
        f"Book complete: {book_progress.completed_chapters}/{book_progress.total_chapters} "
        f"chapters ({book_progress.percentage}%)"
    )


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
