"""
Lightweight in-memory metrics for observability.

Counts outbound requests and their failures per knowledge source, and
records per-stage pipeline timings, without external dependencies.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator


@dataclass
class TimingStats:
    """Statistics for timing measurements."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        """Average latency in milliseconds."""
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, duration_ms: float) -> None:
        """Record a timing measurement."""
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms, 2) if self.count > 0 else 0.0,
            "max_ms": round(self.max_ms, 2),
        }


class Metrics:
    """
    Thread-safe in-memory counters and timings.

    Example:
        >>> metrics = Metrics.get()
        >>> metrics.increment("knowledge_requests.wikipedia")
        >>> with metrics.timer("stage.enrichment"):
        ...     entities = matcher.match_all(candidates)
        >>> print(metrics.snapshot())
    """

    _instance: "Metrics | None" = None

    def __init__(self) -> None:
        self._counters: dict[str, int] = defaultdict(int)
        self._timings: dict[str, TimingStats] = defaultdict(TimingStats)
        self._lock = threading.Lock()

    @classmethod
    def get(cls) -> "Metrics":
        """Get the global metrics instance, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset all metrics (useful for testing)."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._timings.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """Increment a counter and return its new value."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        """Get current counter value."""
        with self._lock:
            return self._counters.get(name, 0)

    def observe(self, name: str, duration_ms: float) -> None:
        """Record a timing observation in milliseconds."""
        with self._lock:
            self._timings[name].record(duration_ms)

    def get_timing(self, name: str) -> TimingStats | None:
        """Get a copy of the timing statistics for a metric."""
        with self._lock:
            if name not in self._timings:
                return None
            stats = self._timings[name]
            return TimingStats(
                count=stats.count,
                total_ms=stats.total_ms,
                min_ms=stats.min_ms,
                max_ms=stats.max_ms,
            )

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Context manager timing a block of code into ``name``."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.observe(name, (time.perf_counter() - start) * 1000)

    def snapshot(self) -> dict:
        """Get all counters and timings as plain dictionaries."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {
                    name: stats.to_dict()
                    for name, stats in self._timings.items()
                },
            }


def record_source_request(source: str, failed: bool = False) -> None:
    """Count a knowledge source request, and its failure if any."""
    metrics = Metrics.get()
    metrics.increment(f"knowledge_requests.{source}")
    if failed:
        metrics.increment(f"knowledge_failures.{source}")


def increment_llm_calls(count: int = 1) -> None:
    """Increment LLM calls counter."""
    Metrics.get().increment("llm_calls", count)


@contextmanager
def time_stage(stage: str) -> Iterator[None]:
    """Time a pipeline stage under ``stage.<name>``."""
    with Metrics.get().timer(f"stage.{stage}"):
        yield
