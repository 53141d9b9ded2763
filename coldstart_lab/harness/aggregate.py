"""
Cross-case aggregation: leaderboards and cold-start penalty summaries.

Leaderboards are ranked within each schema group. A case whose success rate
is below the reliability threshold always ranks after every reliable case,
whatever its latency or cost.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from ..instrumentation.timing import mean
from .results import RELIABILITY_THRESHOLD, CaseResult, CaseStatistics


# ============================================================================
# Formatting
# ============================================================================

NOT_AVAILABLE = "N/A"


def fmt_ms(value: Optional[float]) -> str:
    """Duration with 4 decimals, or N/A."""
    return NOT_AVAILABLE if value is None else f"{value:.4f} ms"


def fmt_pct(value: Optional[float]) -> str:
    """Percentage with 4 decimals, or N/A."""
    return NOT_AVAILABLE if value is None else f"{value:.4f}%"


def fmt_cost(value: Optional[float]) -> str:
    """Cost in USD with 4 decimals, or N/A."""
    return NOT_AVAILABLE if value is None else f"{value:.4f}"


# ============================================================================
# Leaderboards
# ============================================================================

def group_by_schema(results: Iterable[Any]) -> dict[str, list[Any]]:
    """Group results by schema name, keeping first-seen order."""
    groups: dict[str, list[Any]] = {}
    for result in results:
        groups.setdefault(result.key.schema_name, []).append(result)
    return groups


def _rank(
    results: Iterable[CaseResult],
    value: Callable[[CaseStatistics], Optional[float]],
) -> list[CaseResult]:
    def sort_key(result: CaseResult) -> tuple:
        stats = result.stats
        v = value(stats)
        return (not stats.reliable, v is None, v if v is not None else 0.0)

    # sorted() is stable, so ties keep case order.
    return sorted(results, key=sort_key)


def rank_by_latency(results: Iterable[CaseResult]) -> list[CaseResult]:
    """Fastest first; unreliable cases last."""
    return _rank(results, lambda s: s.avg_ms)


def rank_by_cost(results: Iterable[CaseResult]) -> list[CaseResult]:
    """Cheapest first; unreliable cases last."""
    return _rank(results, lambda s: s.total_cost)


@dataclass
class Leaderboard:
    """Rankings for one schema group."""

    schema_name: str
    by_latency: list[CaseResult] = field(default_factory=list)
    by_cost: list[CaseResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "schema": self.schema_name,
            "reliability_threshold": RELIABILITY_THRESHOLD,
            "by_latency": [r.key.label for r in self.by_latency],
            "by_cost": [r.key.label for r in self.by_cost],
        }


def leaderboards(results: Iterable[CaseResult]) -> list[Leaderboard]:
    """Build latency and cost rankings for every schema group."""
    return [
        Leaderboard(
            schema_name=schema_name,
            by_latency=rank_by_latency(group),
            by_cost=rank_by_cost(group),
        )
        for schema_name, group in group_by_schema(results).items()
    ]


# ============================================================================
# Cold-start penalty summary
# ============================================================================

@dataclass(frozen=True)
class PenaltySummary:
    """Average cold-start penalty per model, per schema and overall.

    Cases whose penalty is not available are left out of every average;
    a group with no available penalty averages to None.
    """

    by_model: dict[str, Optional[float]]
    by_schema: dict[str, Optional[float]]
    overall: Optional[float]

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "by_model": self.by_model,
            "by_schema": self.by_schema,
            "overall": self.overall,
        }


def summarize_penalties(results: Iterable[Any]) -> PenaltySummary:
    """Average the cold-start penalties of matrix or cold-start results."""
    by_model: dict[str, list[float]] = {}
    by_schema: dict[str, list[float]] = {}
    overall: list[float] = []

    for result in results:
        penalty = result.stats.cold_start_penalty
        model_values = by_model.setdefault(result.key.model, [])
        schema_values = by_schema.setdefault(result.key.schema_name, [])
        if penalty is None:
            continue
        model_values.append(penalty)
        schema_values.append(penalty)
        overall.append(penalty)

    return PenaltySummary(
        by_model={name: mean(values) for name, values in by_model.items()},
        by_schema={name: mean(values) for name, values in by_schema.items()},
        overall=mean(overall),
    )
