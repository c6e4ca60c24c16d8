"""
Utilities module for Entity Intelligence.

Provides logging setup, in-memory metrics and small text helpers.
"""

from entity_intel.utils.logging import setup_logging, get_logger, reset_logging
from entity_intel.utils.metrics import (
    Metrics,
    TimingStats,
    record_source_request,
    increment_llm_calls,
    time_stage,
)
from entity_intel.utils.text import (
    collapse_whitespace,
    count_occurrences,
    round_half_up,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "reset_logging",
    # Metrics
    "Metrics",
    "TimingStats",
    "record_source_request",
    "increment_llm_calls",
    "time_stage",
    # Text
    "collapse_whitespace",
    "count_occurrences",
    "round_half_up",
]
