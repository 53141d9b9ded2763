"""
Trial records and per-case statistics.

Trial records are produced once and never mutated. Statistics are derived
from a case's trial sequence on demand; failed trials count towards the
success rate only and are excluded from latency and cost aggregates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from itertools import accumulate
from typing import Optional

from ..instrumentation.timing import mean, percentile, relative_change
from .cases import BenchmarkCase, CaseKey

RELIABILITY_THRESHOLD = 80.0


@dataclass(frozen=True)
class TrialResult:
    """One timed request/response cycle."""

    index: int
    elapsed_ms: Optional[float]
    cost: float = 0.0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "elapsed_ms": self.elapsed_ms,
            "cost": self.cost,
            "success": self.success,
            "error": self.error,
        }


@dataclass(frozen=True)
class ColdStartTrial:
    """A cold call and a warm call made with the same mutated schema."""

    index: int
    first_ms: Optional[float]
    second_ms: Optional[float]
    cost: float = 0.0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def penalty(self) -> Optional[float]:
        """Cold-start penalty of this pair as a percentage of the warm call."""
        return relative_change(self.first_ms, self.second_ms)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "first_ms": self.first_ms,
            "second_ms": self.second_ms,
            "cost": self.cost,
            "success": self.success,
            "error": self.error,
        }


def _success_rate(successes: int, attempted: int) -> Optional[float]:
    if attempted == 0:
        return None
    return (successes / attempted) * 100


@dataclass(frozen=True)
class CaseStatistics:
    """Aggregates over one case's trials.

    Any value that would need a division by zero is None.
    """

    attempted: int
    successes: int
    avg_ms: Optional[float]
    success_rate: Optional[float]
    total_cost: float
    first_ms: Optional[float]
    cold_start_penalty: Optional[float]
    p50_ms: Optional[float] = None
    p95_ms: Optional[float] = None

    @classmethod
    def from_trials(cls, trials: list[TrialResult]) -> "CaseStatistics":
        ordered = sorted(trials, key=lambda t: t.index)
        successful = [t for t in ordered if t.success]
        latencies = [t.elapsed_ms for t in successful]

        avg_ms = mean(latencies)
        # The first call only counts if it was the case's very first trial.
        first = ordered[0] if ordered and ordered[0].index == 0 else None
        first_ms = first.elapsed_ms if first is not None and first.success else None

        return cls(
            attempted=len(ordered),
            successes=len(successful),
            avg_ms=avg_ms,
            success_rate=_success_rate(len(successful), len(ordered)),
            total_cost=sum(t.cost for t in successful),
            first_ms=first_ms,
            cold_start_penalty=relative_change(first_ms, avg_ms),
            p50_ms=percentile(latencies, 50),
            p95_ms=percentile(latencies, 95),
        )

    @property
    def reliable(self) -> bool:
        return self.success_rate is not None and self.success_rate >= RELIABILITY_THRESHOLD

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "attempted": self.attempted,
            "successes": self.successes,
            "avg_ms": self.avg_ms,
            "success_rate": self.success_rate,
            "total_cost": self.total_cost,
            "first_ms": self.first_ms,
            "cold_start_penalty": self.cold_start_penalty,
            "p50_ms": self.p50_ms,
            "p95_ms": self.p95_ms,
        }


@dataclass(frozen=True)
class ColdStartStatistics:
    """Aggregates over one case's cold/warm pairs."""

    attempted: int
    successes: int
    avg_first_ms: Optional[float]
    avg_second_ms: Optional[float]
    cold_start_penalty: Optional[float]
    success_rate: Optional[float]
    total_cost: float

    @classmethod
    def from_trials(cls, trials: list[ColdStartTrial]) -> "ColdStartStatistics":
        successful = [t for t in trials if t.success]
        avg_first = mean([t.first_ms for t in successful])
        avg_second = mean([t.second_ms for t in successful])

        return cls(
            attempted=len(trials),
            successes=len(successful),
            avg_first_ms=avg_first,
            avg_second_ms=avg_second,
            cold_start_penalty=relative_change(avg_first, avg_second),
            success_rate=_success_rate(len(successful), len(trials)),
            total_cost=sum(t.cost for t in successful),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "attempted": self.attempted,
            "successes": self.successes,
            "avg_first_ms": self.avg_first_ms,
            "avg_second_ms": self.avg_second_ms,
            "cold_start_penalty": self.cold_start_penalty,
            "success_rate": self.success_rate,
            "total_cost": self.total_cost,
        }


@dataclass
class CaseResult:
    """All trials of one matrix case."""

    case: BenchmarkCase
    trials: list[TrialResult]
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> CaseKey:
        return self.case.key

    @property
    def stats(self) -> CaseStatistics:
        return CaseStatistics.from_trials(self.trials)

    @property
    def errors(self) -> list[str]:
        return [t.error for t in self.trials if t.error is not None]

    def running_costs(self) -> list[float]:
        """Accumulated cost after each trial, in trial order."""
        ordered = sorted(self.trials, key=lambda t: t.index)
        return list(accumulate(t.cost if t.success else 0.0 for t in ordered))

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization."""
        return {
            "case": self.case.to_dict(),
            "trials": [t.to_dict() for t in self.trials],
            "stats": self.stats.to_dict(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": (self.end_time - self.start_time).total_seconds(),
            "errors": self.errors,
        }


@dataclass
class ColdStartResult:
    """All cold/warm pairs of one case."""

    case: BenchmarkCase
    trials: list[ColdStartTrial]
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> CaseKey:
        return self.case.key

    @property
    def stats(self) -> ColdStartStatistics:
        return ColdStartStatistics.from_trials(self.trials)

    @property
    def errors(self) -> list[str]:
        return [t.error for t in self.trials if t.error is not None]

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization."""
        return {
            "case": self.case.to_dict(),
            "trials": [t.to_dict() for t in self.trials],
            "stats": self.stats.to_dict(),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_seconds": (self.end_time - self.start_time).total_seconds(),
            "errors": self.errors,
        }
