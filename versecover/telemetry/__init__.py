"""Telemetry and observability helpers.

This package emits deterministic event lines for progress aggregation.
"""

from .logger import ProgressLogger

__all__ = ["ProgressLogger"]
