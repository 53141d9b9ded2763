"""
Benchmark harness for structured-output latency experiments.

Provides case generation, orchestration, aggregation and reporting.
"""

from .cases import (
    BenchmarkCase,
    CaseKey,
    InvocationMode,
    ModelConfig,
    Pricing,
    DEFAULT_EXCLUSIONS,
    DEFAULT_MODELS,
    MODEL_PRESETS,
    generate_cases,
    select_models,
    select_schemas,
)

from .results import (
    TrialResult,
    ColdStartTrial,
    CaseStatistics,
    ColdStartStatistics,
    CaseResult,
    ColdStartResult,
)

from .aggregate import (
    Leaderboard,
    PenaltySummary,
    leaderboards,
    rank_by_cost,
    rank_by_latency,
    summarize_penalties,
)

from .runner import (
    BenchmarkConfig,
    BenchmarkRunner,
)

from .reporter import (
    ConsoleReporter,
    ChartReporter,
    JSONReporter,
)

__all__ = [
    # Cases
    "BenchmarkCase",
    "CaseKey",
    "InvocationMode",
    "ModelConfig",
    "Pricing",
    "DEFAULT_EXCLUSIONS",
    "DEFAULT_MODELS",
    "MODEL_PRESETS",
    "generate_cases",
    "select_models",
    "select_schemas",
    # Results
    "TrialResult",
    "ColdStartTrial",
    "CaseStatistics",
    "ColdStartStatistics",
    "CaseResult",
    "ColdStartResult",
    # Aggregation
    "Leaderboard",
    "PenaltySummary",
    "leaderboards",
    "rank_by_cost",
    "rank_by_latency",
    "summarize_penalties",
    # Runner
    "BenchmarkConfig",
    "BenchmarkRunner",
    # Reporter
    "ConsoleReporter",
    "ChartReporter",
    "JSONReporter",
]
