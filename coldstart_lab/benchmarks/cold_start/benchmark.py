"""
Cold-start benchmarks - first request vs repeated request on a new schema.

Each pair mutates the target schema so no server-side cache has seen it,
then sends two identical requests: the first measures the cold path, the
second the warm path. The penalty is reported relative to the warm call.
"""

from pathlib import Path
from typing import Optional, Sequence

from ...harness.cases import (
    DEFAULT_MODELS,
    PROVIDERS_WITH_STRUCTURED_OUTPUTS,
    BenchmarkCase,
    CaseKey,
    InvocationMode,
    ModelConfig,
    generate_cases,
)
from ...harness.reporter import ChartReporter, ConsoleReporter, JSONReporter
from ...harness.results import ColdStartResult
from ...harness.runner import BenchmarkConfig, BenchmarkRunner
from ...instrumentation.generators import Generator
from ...instrumentation.traces import Tracer
from ...schemas.definitions import ALL_SCHEMAS, DescribedSchema


def cold_start_cases(
    models: Sequence[ModelConfig],
    schemas: Sequence[DescribedSchema],
) -> list[BenchmarkCase]:
    """JSON-mode cases, with structured outputs wherever the provider has them."""
    cases = []
    for model_config in models:
        structured = model_config.provider in PROVIDERS_WITH_STRUCTURED_OUTPUTS
        cases.extend(generate_cases(
            [model_config],
            schemas,
            modes=[InvocationMode.JSON],
            structured_outputs=[structured],
        ))
    return cases


class ColdStartBenchmarkSuite:
    """Measures the cold-start penalty of every model/schema pair."""

    def __init__(
        self,
        generator: Generator,
        models: Optional[Sequence[ModelConfig]] = None,
        schemas: Optional[Sequence[DescribedSchema]] = None,
        config: Optional[BenchmarkConfig] = None,
        tracer: Optional[Tracer] = None,
        reporter: Optional[ConsoleReporter] = None,
        output_dir: Optional[Path] = None,
        charts: bool = False,
    ):
        self.models = list(models or DEFAULT_MODELS)
        self.schemas = list(schemas or ALL_SCHEMAS)
        self.config = config or BenchmarkConfig(name="cold_start")
        self.runner = BenchmarkRunner(generator, self.config, tracer=tracer)
        self.reporter = reporter or ConsoleReporter()
        self.output_dir = output_dir
        self.charts = charts

    def cases(self) -> list[BenchmarkCase]:
        return cold_start_cases(self.models, self.schemas)

    async def run_all(self) -> dict[CaseKey, ColdStartResult]:
        """Run every cold-start case and print the summary statistics."""
        cases = self.cases()

        print("\n" + "=" * 70)
        print("COLD START BENCHMARK")
        print("=" * 70)
        print(f"Cache buster: {self.config.cache_buster}")
        print(f"Pairs per case: {self.config.cold_start_runs}")

        results = await self.runner.run_cold_start(cases)
        print(self.reporter.cold_start_report(results.values()))

        if self.output_dir is not None:
            path = JSONReporter(self.output_dir).save_cold_start(results.values(), self.config.to_dict())
            print(f"\nResults saved to {path}")
            if self.charts:
                chart = ChartReporter(self.output_dir / "charts").cold_start_chart(results.values())
                if chart:
                    print(f"Chart saved to {chart}")

        return results
