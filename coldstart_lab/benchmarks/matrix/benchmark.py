"""
Matrix benchmark - latency, reliability and cost across the case matrix.

Runs every model x schema x invocation mode x structured-output case N
times. Trials of one case run in order, so the first trial is the case's
first call and its latency is compared with the case average.
"""

from pathlib import Path
from typing import Optional, Sequence

from ...harness.cases import DEFAULT_MODELS, BenchmarkCase, CaseKey, ModelConfig, generate_cases
from ...harness.reporter import ChartReporter, ConsoleReporter, JSONReporter
from ...harness.results import CaseResult
from ...harness.runner import BenchmarkConfig, BenchmarkRunner
from ...instrumentation.generators import Generator
from ...instrumentation.traces import Tracer
from ...schemas.definitions import ALL_SCHEMAS, DescribedSchema


class MatrixBenchmarkSuite:
    """Benchmarks the full case matrix and ranks cases per schema."""

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
        self.config = config or BenchmarkConfig(name="matrix")
        self.runner = BenchmarkRunner(generator, self.config, tracer=tracer)
        self.reporter = reporter or ConsoleReporter()
        self.output_dir = output_dir
        self.charts = charts

    def cases(self) -> list[BenchmarkCase]:
        """The valid cases of this suite, in run order."""
        return generate_cases(self.models, self.schemas)

    async def run_all(self) -> dict[CaseKey, CaseResult]:
        """Run every case and print the comprehensive report."""
        cases = self.cases()

        print("\n" + "=" * 70)
        print("STRUCTURED OUTPUT MATRIX BENCHMARK")
        print("=" * 70)
        print(f"Models: {', '.join(m.name for m in self.models)}")
        print(f"Schemas: {', '.join(s.name for s in self.schemas)}")
        print(f"Cases: {len(cases)}")
        print(f"Runs per case: {self.config.num_runs}")

        results = await self.runner.run_matrix(cases)
        print(self.reporter.matrix_report(results.values()))

        if self.output_dir is not None:
            path = JSONReporter(self.output_dir).save_matrix(results.values(), self.config.to_dict())
            print(f"\nResults saved to {path}")
            if self.charts:
                chart = ChartReporter(self.output_dir / "charts").latency_bar_chart(results.values())
                if chart:
                    print(f"Chart saved to {chart}")

        return results
