"""Shared pytest fixtures for the full Versecover test suite."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any, Callable, Iterable

import pytest

from versecover.errors import CoverageFetchFailed
from versecover.models.datatypes import AudioCoverageFact, Chapter, ProgressSelection, Verse
from versecover.sources.snapshot import SnapshotRepository


def _sample_payload() -> dict[str, Any]:
    """Two-chapter Genesis, partly recorded Exodus, and a Ruth stub without verses."""

    return {
        "bible_versions": [
            {
                "id": "bsb",
                "books": [
                    {
                        "id": "exo",
                        "name": "Exodus",
                        "order": 2,
                        "chapters": [
                            {"id": "exo-1", "chapter_number": 1, "total_verses": 5},
                            {"id": "exo-2", "chapter_number": 2, "total_verses": 4},
                        ],
                    },
                    {
                        "id": "gen",
                        "name": "Genesis",
                        "order": 1,
                        "chapters": [
                            {"id": "gen-1", "chapter_number": 1, "total_verses": 10},
                            {"id": "gen-2", "chapter_number": 2, "total_verses": 8},
                        ],
                    },
                    {
                        "id": "rut",
                        "name": "Ruth",
                        "order": 8,
                        "chapters": [
                            {"id": "rut-1", "chapter_number": 1, "total_verses": 0},
                        ],
                    },
                ],
            }
        ],
        "audio_versions": [
            {
                "id": "audio-en",
                "media_files": [
                    {
                        "id": "mf-1",
                        "chapter_id": "gen-1",
                        "start_verse": 1,
                        "end_verse": 10,
                        "duration_seconds": 600,
                    },
                    {
                        "id": "mf-2",
                        "chapter_id": "gen-2",
                        "start_verse": 1,
                        "end_verse": 3,
                        "duration_seconds": 95,
                    },
                    {
                        "id": "mf-3",
                        "chapter_id": "gen-2",
                        "start_verse": 6,
                        "end_verse": 8,
                        "duration_seconds": 50.5,
                    },
                    {"id": "mf-4", "chapter_id": "exo-1", "start_verse": 1, "end_verse": 5},
                ],
            },
            {"id": "audio-empty", "media_files": []},
        ],
        "text_versions": [
            {
                "id": "text-en",
                "verse_texts": [
                    *(
                        {"verse_id": f"gen-1:{number}", "text": f"Verse {number}"}
                        for number in range(1, 11)
                    ),
                    {"verse_id": "gen-2:1", "text": "   "},
                    {"verse_id": "gen-2:2", "text": "And the earth was without form"},
                ],
            }
        ],
    }


class RecordingRepository:
    """Repository test double that counts calls and can fail or hold loads."""

    def __init__(
        self,
        inner: SnapshotRepository,
        *,
        failing_chapters: Iterable[str] = (),
        gate: asyncio.Event | None = None,
        books_gate: asyncio.Event | None = None,
    ) -> None:
        self.inner = inner
        self.calls: Counter[str] = Counter()
        self.failing_chapters = set(failing_chapters)
        self.gate = gate
        self.books_gate = books_gate

    async def get_books(self, bible_version_id: str) -> list[Any]:
        self.calls["get_books"] += 1
        if self.books_gate is not None:
            await self.books_gate.wait()
        return await self.inner.get_books(bible_version_id)

    async def get_chapters(self, book_id: str) -> list[Chapter]:
        self.calls["get_chapters"] += 1
        if self.gate is not None:
            await self.gate.wait()
        return await self.inner.get_chapters(book_id)

    async def get_verses(self, chapter_id: str) -> list[Verse]:
        self.calls["get_verses"] += 1
        return await self.inner.get_verses(chapter_id)

    async def get_media_file_chapter_coverage(
        self, audio_version_id: str, chapter_id: str
    ) -> list[AudioCoverageFact]:
        self.calls["get_media_file_chapter_coverage"] += 1
        if chapter_id in self.failing_chapters:
            raise CoverageFetchFailed(chapter_id, f"Coverage query for `{chapter_id}` timed out.")
        return await self.inner.get_media_file_chapter_coverage(audio_version_id, chapter_id)

    async def get_chapters_with_any_coverage(
        self, audio_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        self.calls["get_chapters_with_any_coverage"] += 1
        return await self.inner.get_chapters_with_any_coverage(audio_version_id, chapter_ids)

    async def get_verse_text_coverage(self, text_version_id: str, chapter_id: str) -> set[str]:
        self.calls["get_verse_text_coverage"] += 1
        if chapter_id in self.failing_chapters:
            raise RuntimeError(f"connection reset while reading `{chapter_id}`")
        return await self.inner.get_verse_text_coverage(text_version_id, chapter_id)

    async def get_chapters_with_any_text(
        self, text_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        self.calls["get_chapters_with_any_text"] += 1
        return await self.inner.get_chapters_with_any_text(text_version_id, chapter_ids)


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Provide the raw snapshot mapping shared by repository and CLI tests."""

    return _sample_payload()


@pytest.fixture
def sample_repository() -> SnapshotRepository:
    """Provide an in-memory repository built from the sample snapshot."""

    return SnapshotRepository.from_mapping(_sample_payload())


@pytest.fixture
def make_recording_repository(
    sample_repository: SnapshotRepository,
) -> Callable[..., RecordingRepository]:
    """Provide a factory for call-counting repositories over the sample snapshot."""

    def _factory(**kwargs: Any) -> RecordingRepository:
        return RecordingRepository(sample_repository, **kwargs)

    return _factory


@pytest.fixture
def audio_selection() -> ProgressSelection:
    return ProgressSelection(bible_version_id="bsb", content_kind="audio", version_id="audio-en")


@pytest.fixture
def text_selection() -> ProgressSelection:
    return ProgressSelection(bible_version_id="bsb", content_kind="text", version_id="text-en")
