"""Shared typed data models for Versecover.

This package contains dataclasses used across progress modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioCoverageFact,
    Book,
    BookProgress,
    Chapter,
    ChapterProgress,
    CompletionTally,
    ProgressSelection,
    ProgressStats,
    TextCoverageFact,
    Verse,
    VerseRange,
)

__all__ = [
    "AudioCoverageFact",
    "Book",
    "BookProgress",
    "Chapter",
    "ChapterProgress",
    "CompletionTally",
    "ProgressSelection",
    "ProgressStats",
    "TextCoverageFact",
    "Verse",
    "VerseRange",
]
