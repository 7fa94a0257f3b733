"""Module entrypoint for running Versecover as ``python -m versecover``."""

from __future__ import annotations

from versecover.cli import main


if __name__ == "__main__":
    main()
