"""Metrics collection for a queue.

Tracks:
- Submissions, deduplicated and priority submissions
- Task outcomes
- Discarded pending work (cancel / clear)
- Cancellations and resurrections
- Task execution latency
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any


def _percentile(sorted_values: list[float], fraction: float) -> float:
    if not sorted_values:
        return 0.0
    idx = min(int(len(sorted_values) * fraction), len(sorted_values) - 1)
    return sorted_values[idx]


@dataclass
class LatencyStats:
    """Statistics for latency measurements."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = math.inf
    max_ms: float = 0.0
    values: list[float] = field(default_factory=list)

    def record(self, duration_ms: float) -> None:
        """Record a latency measurement in milliseconds."""
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        self.values.append(duration_ms)

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def percentile(self, fraction: float) -> float:
        """Latency at the given fraction (0.5 is the median)."""
        return _percentile(sorted(self.values), fraction)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        ordered = sorted(self.values)
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms, 2) if self.count else 0.0,
            "max_ms": round(self.max_ms, 2),
            "p50_ms": round(_percentile(ordered, 0.5), 2),
            "p95_ms": round(_percentile(ordered, 0.95), 2),
            "p99_ms": round(_percentile(ordered, 0.99), 2),
        }

    def reset(self) -> None:
        """Reset all statistics."""
        self.count = 0
        self.total_ms = 0.0
        self.min_ms = math.inf
        self.max_ms = 0.0
        self.values.clear()


class QueueMetrics:
    """Counters and timings for a single queue instance.

    Metrics are observational only; the queue never reads them back.
    """

    COUNTERS = (
        "submitted",
        "priority_submitted",
        "deduplicated",
        "executed",
        "succeeded",
        "failed",
        "discarded_on_cancel",
        "discarded_on_clear",
        "cancellations",
        "resurrections",
    )

    def __init__(self) -> None:
        self._counters: dict[str, int] = dict.fromkeys(self.COUNTERS, 0)
        self.latency = LatencyStats()
        self._started: dict[str, float] = {}

    def increment(self, name: str, amount: int = 1) -> None:
        """Increase a counter.

        Raises:
            KeyError: If the counter is unknown
        """
        if name not in self._counters:
            raise KeyError(f"Unknown counter: {name}")
        self._counters[name] += amount

    def get(self, name: str) -> int:
        """Get a counter value."""
        return self._counters[name]

    def start_task(self, entry_id: str) -> None:
        """Record the start of an execution."""
        self._started[entry_id] = time.perf_counter()
        self._counters["executed"] += 1

    def end_task(self, entry_id: str, succeeded: bool) -> float | None:
        """Record the end of an execution.

        Returns:
            Duration in milliseconds, or None if the start was not recorded
        """
        started = self._started.pop(entry_id, None)
        self._counters["succeeded" if succeeded else "failed"] += 1
        if started is None:
            return None
        duration_ms = (time.perf_counter() - started) * 1000
        self.latency.record(duration_ms)
        return duration_ms

    def get_summary(self) -> dict[str, Any]:
        """Get metrics summary."""
        finished = self._counters["succeeded"] + self._counters["failed"]
        return {
            "counters": dict(self._counters),
            "failure_rate": (
                round(self._counters["failed"] / finished, 4) if finished else 0.0
            ),
            "in_flight": len(self._started),
            "latency": self.latency.to_dict(),
        }

    def reset(self) -> None:
        """Reset all counters and timings."""
        self._counters = dict.fromkeys(self.COUNTERS, 0)
        self._started.clear()
        self.latency.reset()
