"""External collaborator interfaces and the in-memory snapshot implementation."""

from .base import AudioCoverageSource, HierarchyProvider, TextCoverageSource
from .snapshot import SnapshotRepository, default_verse_id, load_snapshot

__all__ = [
    "AudioCoverageSource",
    "HierarchyProvider",
    "SnapshotRepository",
    "TextCoverageSource",
    "default_verse_id",
    "load_snapshot",
]
