"""Top-level package for Versecover.

This package computes Scripture translation coverage progress: chapter and
book completion for audio recordings and text submissions mapped onto a
bible version's book/chapter/verse hierarchy. The main entry point is
`ProgressEngine`.
"""

from .engine import ProgressEngine

__all__ = ["ProgressEngine", "__version__"]

__version__ = "0.1.0"
