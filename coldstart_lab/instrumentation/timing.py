"""
Timing and summary helpers for latency measurements.

Durations come from time.perf_counter(), a monotonic clock, and cover the
whole request/response cycle including network time.
"""

import time
from typing import Optional


class Timer:
    """Stopwatch reporting milliseconds; reads the live value while running."""

    def __init__(self, name: str = "timer"):
        self.name = name
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def start(self) -> "Timer":
        self._started = time.perf_counter()
        self._stopped = None
        return self

    def stop(self) -> "Timer":
        self._stopped = time.perf_counter()
        return self

    @property
    def elapsed_ms(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.perf_counter()
        return (end - self._started) * 1000


def mean(values: list[float]) -> Optional[float]:
    """Arithmetic mean, or None for an empty list."""
    if not values:
        return None
    return sum(values) / len(values)


def percentile(values: list[float], p: float) -> Optional[float]:
    """Linear-interpolated percentile, or None for an empty list."""
    if not values:
        return None
    sorted_values = sorted(values)
    k = (len(sorted_values) - 1) * (p / 100)
    f = int(k)
    c = f + 1 if f + 1 < len(sorted_values) else f
    return sorted_values[f] + (k - f) * (sorted_values[c] - sorted_values[f])


def relative_change(value: Optional[float], baseline: Optional[float]) -> Optional[float]:
    """(value - baseline) / baseline as a percentage.

    Returns None when either side is missing or the baseline is not positive.
    """
    if value is None or baseline is None or baseline <= 0:
        return None
    return ((value - baseline) / baseline) * 100
