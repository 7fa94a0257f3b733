"""In-memory hierarchy and coverage repository loaded from a snapshot file.

Responsibilities:
- Parse a YAML or JSON snapshot of bible versions, audio versions, and text versions.
- Serve the hierarchy, audio coverage, and text coverage interfaces from memory.

Snapshot layout::

    bible_versions:
      - id: bsb
        books:
          - id: gen
            name: Genesis
            order: 1
            chapters:
              - id: gen-1
                chapter_number: 1
                total_verses: 31
    audio_versions:
      - id: audio-en
        media_files:
          - id: mf-1
            chapter_id: gen-1
            start_verse: 1
            end_verse: 31
            duration_seconds: 254.5
    text_versions:
      - id: text-en
        verse_texts:
          - verse_id: "gen-1:1"
            text: In the beginning...

Verse ids default to `<chapter_id>:<verse_number>`; a chapter may list
explicit `verse_ids` instead, one per verse in order.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import yaml

from ..errors import HierarchyUnavailable, InvalidSelection
from ..models.datatypes import AudioCoverageFact, Book, Chapter, TextCoverageFact, Verse
from ..parsing import (
    parse_non_negative_int,
    parse_optional_non_negative_number,
    require_identifier,
)


def default_verse_id(chapter_id: str, verse_number: int) -> str:
    """Return the generated verse id used when a snapshot lists no verse ids."""

    return f"{chapter_id}:{verse_number}"


class SnapshotRepository:
    """Serve `HierarchyProvider`, `AudioCoverageSource`, and `TextCoverageSource` from memory."""

    def __init__(
        self,
        *,
        bible_versions: Mapping[str, Sequence[Book]],
        audio_versions: Mapping[str, Sequence[AudioCoverageFact]] | None = None,
        text_versions: Mapping[str, Sequence[TextCoverageFact]] | None = None,
        verses: Mapping[str, Sequence[Verse]] | None = None,
    ) -> None:
        self._books_by_version = {
            version_id: tuple(sorted(books, key=lambda book: (book.order, book.id)))
            for version_id, books in bible_versions.items()
        }
        self._chapters_by_book: dict[str, tuple[Chapter, ...]] = {}
        self._chapters_by_id: dict[str, Chapter] = {}
        for books in self._books_by_version.values():
            for book in books:
                ordered = tuple(sorted(book.chapters, key=lambda chapter: chapter.chapter_number))
                self._chapters_by_book[book.id] = ordered
                for chapter in ordered:
                    self._chapters_by_id[chapter.id] = chapter

        explicit_verses = verses or {}
        self._verses_by_chapter: dict[str, tuple[Verse, ...]] = {}
        for chapter_id, chapter in self._chapters_by_id.items():
            if chapter_id in explicit_verses:
                self._verses_by_chapter[chapter_id] = tuple(
                    sorted(explicit_verses[chapter_id], key=lambda verse: verse.verse_number)
                )
                continue
            self._verses_by_chapter[chapter_id] = tuple(
                Verse(
                    id=default_verse_id(chapter_id, number),
                    chapter_id=chapter_id,
                    verse_number=number,
                )
                for number in chapter.verse_numbers()
            )
        self._chapter_by_verse_id = {
            verse.id: chapter_id
            for chapter_id, chapter_verses in self._verses_by_chapter.items()
            for verse in chapter_verses
        }

        self._audio_facts = {
            version_id: tuple(facts) for version_id, facts in (audio_versions or {}).items()
        }
        self._text_facts: dict[str, dict[str, TextCoverageFact]] = {}
        for version_id, facts in (text_versions or {}).items():
            by_verse: dict[str, TextCoverageFact] = {}
            for fact in facts:
                # Any non-empty submission for a verse counts.
                if fact.has_text or fact.verse_id not in by_verse:
                    by_verse[fact.verse_id] = fact
            self._text_facts[version_id] = by_verse

    @property
    def bible_version_ids(self) -> list[str]:
        return sorted(self._books_by_version)

    @property
    def audio_version_ids(self) -> list[str]:
        return sorted(self._audio_facts)

    @property
    def text_version_ids(self) -> list[str]:
        return sorted(self._text_facts)

    async def get_books(self, bible_version_id: str) -> list[Book]:
        books = self._books_by_version.get(bible_version_id)
        if books is None:
            raise InvalidSelection(f"Unknown bible version `{bible_version_id}`.")
        return list(books)

    async def get_chapters(self, book_id: str) -> list[Chapter]:
        chapters = self._chapters_by_book.get(book_id)
        if chapters is None:
            raise HierarchyUnavailable(f"Unknown book `{book_id}`.")
        return list(chapters)

    async def get_verses(self, chapter_id: str) -> list[Verse]:
        verses = self._verses_by_chapter.get(chapter_id)
        if verses is None:
            raise HierarchyUnavailable(f"Unknown chapter `{chapter_id}`.")
        return list(verses)

    async def get_media_file_chapter_coverage(
        self, audio_version_id: str, chapter_id: str
    ) -> list[AudioCoverageFact]:
        facts = self._audio_version(audio_version_id)
        return [fact for fact in facts if fact.chapter_id == chapter_id]

    async def get_chapters_with_any_coverage(
        self, audio_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        covered = {fact.chapter_id for fact in self._audio_version(audio_version_id)}
        return covered.intersection(chapter_ids)

    async def get_verse_text_coverage(self, text_version_id: str, chapter_id: str) -> set[str]:
        if chapter_id not in self._verses_by_chapter:
            raise HierarchyUnavailable(f"Unknown chapter `{chapter_id}`.")
        facts = self._text_version(text_version_id)
        return {
            verse.id
            for verse in self._verses_by_chapter[chapter_id]
            if verse.id in facts and facts[verse.id].has_text
        }

    async def get_chapters_with_any_text(
        self, text_version_id: str, chapter_ids: Iterable[str]
    ) -> set[str]:
        facts = self._text_version(text_version_id)
        covered = {
            self._chapter_by_verse_id[verse_id]
            for verse_id, fact in facts.items()
            if fact.has_text and verse_id in self._chapter_by_verse_id
        }
        return covered.intersection(chapter_ids)

    def _audio_version(self, audio_version_id: str) -> tuple[AudioCoverageFact, ...]:
        facts = self._audio_facts.get(audio_version_id)
        if facts is None:
            raise InvalidSelection(f"Unknown audio version `{audio_version_id}`.")
        return facts

    def _text_version(self, text_version_id: str) -> dict[str, TextCoverageFact]:
        facts = self._text_facts.get(text_version_id)
        if facts is None:
            raise InvalidSelection(f"Unknown text version `{text_version_id}`.")
        return facts

    @classmethod
    def from_mapping(
        cls, payload: Mapping[str, Any], source_label: str = "Snapshot"
    ) -> SnapshotRepository:
        """Build a repository from a parsed snapshot mapping.

        Raises:
            ValueError: If the payload shape or any value is invalid.
        """

        unknown = sorted(set(payload).difference(_SUPPORTED_ROOT_KEYS))
        if unknown:
            raise ValueError(f"{source_label} includes unsupported key(s): {', '.join(unknown)}.")

        bible_versions: dict[str, list[Book]] = {}
        verses: dict[str, list[Verse]] = {}
        for index, raw_version in enumerate(_list_field(payload, "bible_versions", source_label)):
            label = f"{source_label} bible_versions[{index}]"
            version_id = require_identifier(_mapping(raw_version, label).get("id"), "id", label)
            books = []
            for book_index, raw_book in enumerate(_list_field(raw_version, "books", label)):
                book, book_verses = _parse_book(raw_book, f"{label} books[{book_index}]")
                books.append(book)
                verses.update(book_verses)
            bible_versions[version_id] = books

        audio_versions: dict[str, list[AudioCoverageFact]] = {}
        for index, raw_version in enumerate(_list_field(payload, "audio_versions", source_label)):
            label = f"{source_label} audio_versions[{index}]"
            version_id = require_identifier(_mapping(raw_version, label).get("id"), "id", label)
            audio_versions[version_id] = [
                _parse_media_file(raw_file, f"{label} media_files[{file_index}]")
                for file_index, raw_file in enumerate(_list_field(raw_version, "media_files", label))
            ]

        text_versions: dict[str, list[TextCoverageFact]] = {}
        for index, raw_version in enumerate(_list_field(payload, "text_versions", source_label)):
            label = f"{source_label} text_versions[{index}]"
            version_id = require_identifier(_mapping(raw_version, label).get("id"), "id", label)
            facts = []
            for text_index, raw_text in enumerate(_list_field(raw_version, "verse_texts", label)):
                text_label = f"{label} verse_texts[{text_index}]"
                entry = _mapping(raw_text, text_label)
                verse_id = require_identifier(entry.get("verse_id"), "verse_id", text_label)
                text = entry.get("text")
                facts.append(TextCoverageFact.from_text(verse_id, None if text is None else str(text)))
            text_versions[version_id] = facts

        return cls(
            bible_versions=bible_versions,
            audio_versions=audio_versions,
            text_versions=text_versions,
            verses=verses,
        )


_SUPPORTED_ROOT_KEYS = frozenset({"bible_versions", "audio_versions", "text_versions"})


def load_snapshot(path: Path) -> SnapshotRepository:
    """Load a snapshot repository from a `.json`, `.yml`, or `.yaml` file."""

    raw_text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        payload = json.loads(raw_text)
    else:
        payload = yaml.safe_load(raw_text)
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Snapshot `{path}` must contain a top-level mapping/object.")
    return SnapshotRepository.from_mapping(payload, source_label=f"Snapshot `{path}`")


def _mapping(value: object, label: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{label} must be a mapping/object.")
    return value


def _list_field(payload: Mapping[str, Any], key: str, label: str) -> list[Any]:
    raw = payload.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{label} field `{key}` must be a list.")
    return raw


def _parse_book(raw_book: object, label: str) -> tuple[Book, dict[str, list[Verse]]]:
    entry = _mapping(raw_book, label)
    book_id = require_identifier(entry.get("id"), "id", label)
    name = require_identifier(entry.get("name", book_id), "name", label)
    order = parse_non_negative_int(entry.get("order", 0), "order", label)

    chapters = []
    verses: dict[str, list[Verse]] = {}
    for index, raw_chapter in enumerate(_list_field(entry, "chapters", label)):
        chapter_label = f"{label} chapters[{index}]"
        chapter_entry = _mapping(raw_chapter, chapter_label)
        chapter_id = require_identifier(chapter_entry.get("id"), "id", chapter_label)
        chapter_number = parse_non_negative_int(
            chapter_entry.get("chapter_number", index + 1), "chapter_number", chapter_label
        )
        total_verses = parse_non_negative_int(
            chapter_entry.get("total_verses"), "total_verses", chapter_label
        )
        chapters.append(
            Chapter(
                id=chapter_id,
                book_id=book_id,
                chapter_number=chapter_number,
                total_verses=total_verses,
            )
        )
        if "verse_ids" in chapter_entry:
            verses[chapter_id] = _parse_verse_ids(
                chapter_entry, chapter_id, total_verses, chapter_label
            )
    return Book(id=book_id, name=name, order=order, chapters=tuple(chapters)), verses


def _parse_verse_ids(
    entry: Mapping[str, Any], chapter_id: str, total_verses: int, label: str
) -> list[Verse]:
    raw_ids = _list_field(entry, "verse_ids", label)
    if len(raw_ids) != total_verses:
        raise ValueError(
            f"{label} lists {len(raw_ids)} verse ids but declares {total_verses} verses."
        )
    return [
        Verse(
            id=require_identifier(raw_id, "verse_ids", label),
            chapter_id=chapter_id,
            verse_number=number,
        )
        for number, raw_id in enumerate(raw_ids, start=1)
    ]


def _parse_media_file(raw_file: object, label: str) -> AudioCoverageFact:
    entry = _mapping(raw_file, label)
    return AudioCoverageFact(
        media_file_id=require_identifier(entry.get("id"), "id", label),
        chapter_id=require_identifier(entry.get("chapter_id"), "chapter_id", label),
        start_verse_number=parse_non_negative_int(entry.get("start_verse"), "start_verse", label),
        end_verse_number=parse_non_negative_int(entry.get("end_verse"), "end_verse", label),
        duration_seconds=parse_optional_non_negative_number(
            entry.get("duration_seconds"), "duration_seconds", label
        ),
    )
