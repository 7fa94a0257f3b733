"""Interfaces of the external collaborators consumed by the progress core.

Implementations may talk to a remote store; the core only awaits these
coroutines and never assumes an ordering between their completions.

Conventions:
- Unknown bible, audio, or text version ids raise `InvalidSelection`.
- Unknown book or chapter ids raise `HierarchyUnavailable`.
- Transient per-chapter failures may raise `CoverageFetchFailed`.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from ..models.datatypes import AudioCoverageFact, Book, Chapter, Verse


class HierarchyProvider(Protocol):
    """Read-only Scripture structure for a bible version."""

    async def get_books(self, bible_version_id: str) -> list[Book]:
        """Return the version's books, each with its ordered chapters."""
        ...

    async def get_chapters(self, book_id: str) -> list[Chapter]:
        """Return the book's chapters ordered by chapter number."""
        ...

    async def get_verses(self, chapter_id: str) -> list[Verse]:
        """Return the chapter's verses ordered by verse number."""
        ...


class AudioCoverageSource(Protocol):
    """Audio coverage facts: verse ranges recorded per media file."""

    async def get_media_file_chapter_coverage(
        self, audio_version_id: str, chapter_id: str
    ) -> list[AudioCoverageFact]:
        ...

    async def get_chapters_with_any_coverage(
        self, audio_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        """Bulk query used by fast mode."""
        ...


class TextCoverageSource(Protocol):
    """Text coverage facts: verses with non-empty submitted text."""

    async def get_verse_text_coverage(self, text_version_id: str, chapter_id: str) -> set[str]:
        """Return ids of the chapter's verses whose text is non-empty after trimming."""
        ...

    async def get_chapters_with_any_text(
        self, text_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        ...
