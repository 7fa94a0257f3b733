"""Coverage progress aggregation.

This package reconciles covered verse ranges, computes chapter and book
progress, and caches verse-level detail per book.
"""

from .book import BookProgressAggregator
from .cache import DetailCache
from .chapter import ChapterProgressCalculator, percentage_for, status_for
from .ranges import RangeReconciliation, format_ranges, reconcile_ranges

__all__ = [
    "BookProgressAggregator",
    "ChapterProgressCalculator",
    "DetailCache",
    "RangeReconciliation",
    "format_ranges",
    "percentage_for",
    "reconcile_ranges",
    "status_for",
]
