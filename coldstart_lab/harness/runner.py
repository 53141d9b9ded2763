"""
Benchmark orchestrator for structured-output latency experiments.

Runs benchmark cases against a generation client, timing and costing every
call. At most `max_concurrency` external calls are in flight at once and
every call carries a deadline. A failed or timed-out call is recorded as a
failed trial and never aborts the batch; there are no retries.
"""

import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..instrumentation.generators import DEFAULT_PROMPT, Generation, Generator
from ..instrumentation.timing import Timer, relative_change
from ..instrumentation.traces import Tracer
from ..schemas.definitions import DescribedSchema
from ..schemas.mutation import CacheBuster, get_cache_buster
from .aggregate import fmt_cost, fmt_ms, fmt_pct
from .cases import BenchmarkCase, CaseKey
from .results import CaseResult, ColdStartResult, ColdStartTrial, TrialResult


def _env_number(name: str, default: str, cast=int):
    return cast(os.getenv(name, default))


@dataclass
class BenchmarkConfig:
    """Configuration for a benchmark run."""

    name: str = "structured_outputs"
    description: str = ""
    num_runs: int = field(default_factory=lambda: _env_number("COLDSTART_RUNS", "50"))
    cold_start_runs: int = field(default_factory=lambda: _env_number("COLDSTART_COLD_RUNS", "25"))
    max_concurrency: int = field(default_factory=lambda: _env_number("COLDSTART_CONCURRENCY", "5"))
    timeout_seconds: float = field(
        default_factory=lambda: _env_number("COLDSTART_TIMEOUT", "120", cast=float)
    )
    prompt: str = DEFAULT_PROMPT
    cache_buster: str = "unique-field"
    verbose: bool = True
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if self.num_runs < 1:
            raise ValueError("num_runs must be at least 1")
        if self.cold_start_runs < 1:
            raise ValueError("cold_start_runs must be at least 1")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "num_runs": self.num_runs,
            "cold_start_runs": self.cold_start_runs,
            "max_concurrency": self.max_concurrency,
            "timeout_seconds": self.timeout_seconds,
            "prompt": self.prompt,
            "cache_buster": self.cache_buster,
            "metadata": self.metadata,
        }


def _describe_error(error: BaseException) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


class BenchmarkRunner:
    """Orchestrates benchmark execution.

    Usage:
        runner = BenchmarkRunner(get_generator("openai"), BenchmarkConfig(num_runs=10))
        results = await runner.run_matrix(cases)
    """

    def __init__(
        self,
        generator: Generator,
        config: Optional[BenchmarkConfig] = None,
        tracer: Optional[Tracer] = None,
        cache_buster: Optional[CacheBuster] = None,
    ):
        self.generator = generator
        self.config = config or BenchmarkConfig()
        self.tracer = tracer
        self.cache_buster = cache_buster or get_cache_buster(self.config.cache_buster)
        self.verbose = self.config.verbose
        self._limiter = asyncio.Semaphore(self.config.max_concurrency)

    async def _generate(self, case: BenchmarkCase, schema: DescribedSchema) -> Generation:
        call = self.generator.generate(
            model=case.model_config.name,
            schema=schema,
            mode=case.mode.value,
            structured_output=case.structured_output,
            prompt=self.config.prompt,
        )
        if self.tracer is None:
            return await call

        attributes = {
            "llm.model": case.model_config.name,
            "llm.mode": case.mode.value,
            "llm.structured_output": case.structured_output,
            "llm.schema": schema.name,
        }
        async with self.tracer.async_span("generate_object", attributes) as span:
            generation = await call
            if span is not None:
                span.set_attribute("llm.prompt_tokens", generation.usage.prompt_tokens)
                span.set_attribute("llm.completion_tokens", generation.usage.completion_tokens)
                span.set_attribute("llm.total_tokens", generation.usage.total_tokens)
            return generation

    async def timed_generate(
        self,
        case: BenchmarkCase,
        schema: DescribedSchema,
    ) -> tuple[Generation, float]:
        """Make one call under the deadline; returns the generation and elapsed ms.

        Only expiry of the deadline is reported as a timeout. Any exception
        raised by the call itself, a TimeoutError included, propagates as is.
        """
        timer = Timer(case.key.label).start()
        task = asyncio.ensure_future(self._generate(case, schema))
        try:
            done, _ = await asyncio.wait({task}, timeout=self.config.timeout_seconds)
            timer.stop()
            if not done:
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise TimeoutError(f"Trial timed out after {self.config.timeout_seconds}s")
        finally:
            if not task.done():
                task.cancel()
        generation = task.result()

        if self.tracer is not None and self.tracer.langfuse_enabled:
            self.tracer.record_generation(
                name=case.key.label,
                model=case.model_config.name,
                input_data={"prompt": self.config.prompt, "schema": schema.name},
                output_data=generation.object.model_dump(by_alias=True),
                usage={
                    "input": generation.usage.prompt_tokens,
                    "output": generation.usage.completion_tokens,
                },
                metadata={"latency_ms": timer.elapsed_ms, "mode": case.mode.value},
            )
        return generation, timer.elapsed_ms

    # ------------------------------------------------------------------
    # Matrix benchmark
    # ------------------------------------------------------------------

    async def run_trial(self, case: BenchmarkCase, index: int) -> TrialResult:
        """Run a single timed trial; failures are recorded, not raised."""
        key = case.key
        try:
            async with self._limiter:
                generation, elapsed_ms = await self.timed_generate(case, case.schema)
        except Exception as e:
            if self.verbose:
                print(f"[{key}] Run {index + 1} failed: {_describe_error(e)}")
            return TrialResult(index=index, elapsed_ms=None, error=_describe_error(e))

        if self.verbose:
            print(f"[{key}] Run {index + 1}: {elapsed_ms:.4f} ms")
        return TrialResult(index=index, elapsed_ms=elapsed_ms, cost=case.cost(generation.usage))

    async def run_case(self, case: BenchmarkCase) -> CaseResult:
        """Run all trials of one case in order, so trial 0 is its first call."""
        start_time = datetime.now()
        trials = []
        for i in range(self.config.num_runs):
            trials.append(await self.run_trial(case, i))

        result = CaseResult(case=case, trials=trials, start_time=start_time, end_time=datetime.now())

        if self.verbose:
            key = result.key
            stats = result.stats
            if stats.first_ms is not None:
                print(f"[{key}] First call time: {fmt_ms(stats.first_ms)}")
                print(f"[{key}] Cold-start penalty: {fmt_pct(stats.cold_start_penalty)}")
            print(f"[{key}] Average time: {fmt_ms(stats.avg_ms)}")
            print(f"[{key}] Success rate: {fmt_pct(stats.success_rate)}")
            print(f"[{key}] Cost: {fmt_cost(stats.total_cost)}")

        return result

    async def run_matrix(self, cases: Iterable[BenchmarkCase]) -> dict[CaseKey, CaseResult]:
        """Run every case concurrently, bounded by the shared limiter."""
        cases = list(cases)
        if self.verbose:
            print(f"\nRunning {len(cases)} cases x {self.config.num_runs} runs "
                  f"(max {self.config.max_concurrency} in flight)")

        results = await asyncio.gather(*(self.run_case(case) for case in cases))
        return {result.key: result for result in results}

    # ------------------------------------------------------------------
    # Cold-start benchmark
    # ------------------------------------------------------------------

    async def run_cold_start_trial(self, case: BenchmarkCase, index: int) -> ColdStartTrial:
        """Time a cold call and a warm call with one freshly mutated schema.

        Both calls hold a single limiter slot so nothing else can warm the
        mutated schema in between.
        """
        key = case.key
        try:
            async with self._limiter:
                schema = self.cache_buster(case.schema, f"{key.model}_{index}")
                first, first_ms = await self.timed_generate(case, schema)
                second, second_ms = await self.timed_generate(case, schema)
        except Exception as e:
            if self.verbose:
                print(f"  [{key}] Pair {index + 1} failed: {_describe_error(e)}")
            return ColdStartTrial(index=index, first_ms=None, second_ms=None, error=_describe_error(e))

        if self.verbose:
            print(
                f"  [{key}] 1st: {first_ms:.4f} ms, 2nd: {second_ms:.4f} ms, "
                f"Cold start penalty: {fmt_pct(relative_change(first_ms, second_ms))}"
            )
        return ColdStartTrial(
            index=index,
            first_ms=first_ms,
            second_ms=second_ms,
            cost=case.cost(first.usage) + case.cost(second.usage),
        )

    async def run_cold_start_case(self, case: BenchmarkCase) -> ColdStartResult:
        """Run all cold/warm pairs of one case concurrently."""
        start_time = datetime.now()
        trials = await asyncio.gather(
            *(self.run_cold_start_trial(case, i) for i in range(self.config.cold_start_runs))
        )
        result = ColdStartResult(
            case=case,
            trials=list(trials),
            start_time=start_time,
            end_time=datetime.now(),
        )

        if self.verbose:
            stats = result.stats
            print(f"\n  Schema: {result.key.schema_name}")
            print(f"    Model: {result.key.model}")
            print(f"    Average First Request Time: {fmt_ms(stats.avg_first_ms)}")
            print(f"    Average Second Request Time: {fmt_ms(stats.avg_second_ms)}")
            print(f"    Cold Start Penalty: {fmt_pct(stats.cold_start_penalty)}")

        return result

    async def run_cold_start(
        self,
        cases: Iterable[BenchmarkCase],
    ) -> dict[CaseKey, ColdStartResult]:
        """Run the cold-start measurement for every case."""
        cases = list(cases)
        if self.verbose:
            print(f"\nRunning {len(cases)} cold-start cases x {self.config.cold_start_runs} pairs "
                  f"(max {self.config.max_concurrency} in flight)")

        results = await asyncio.gather(*(self.run_cold_start_case(case) for case in cases))
        return {result.key: result for result in results}
