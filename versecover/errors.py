"""Domain exceptions for progress aggregation and CLI diagnostics.

Expected "no data" conditions (`HierarchyUnavailable`, `CoverageFetchFailed`,
`InvalidSelection`) are absorbed by the engine into zero progress. Only
`CoverageInvariantError` is meant to escape the core.
"""

from __future__ import annotations


class ProgressError(RuntimeError):
    """Raised when a specific progress stage cannot produce data."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped progress error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class HierarchyUnavailable(ProgressError):
    """Reference data is missing for a requested book or chapter id."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="hierarchy", detail=detail, hint=hint)


class CoverageFetchFailed(ProgressError):
    """Coverage facts for one chapter could not be fetched."""

    def __init__(self, chapter_id: str, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="coverage", detail=detail, hint=hint)
        self.chapter_id = chapter_id


class InvalidSelection(ProgressError):
    """Bible version / content version combination has no data."""

    def __init__(self, detail: str, hint: str | None = None) -> None:
        super().__init__(stage="selection", detail=detail, hint=hint)


class CoverageInvariantError(ValueError):
    """Raised for malformed coverage input such as negative verse numbers."""
