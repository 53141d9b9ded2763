import asyncio
from datetime import datetime
from typing import Optional

import pytest

from coldstart_lab.harness.cases import BenchmarkCase, InvocationMode, ModelConfig
from coldstart_lab.harness.results import CaseResult, ColdStartResult, ColdStartTrial, TrialResult
from coldstart_lab.instrumentation.generators import Generation, Usage
from coldstart_lab.schemas.definitions import DescribedSchema, SchemaModel


class Point(SchemaModel):
    x: int
    label_text: str


POINT_SCHEMA = DescribedSchema("point", "Point Schema", Point)


class FakeGenerator:
    """Scripted stand-in for a hosted generation API.

    Each call consumes the next outcome: a Usage is returned as a successful
    generation, an exception instance is raised. Once the script runs out,
    every call succeeds with the default usage.
    """

    def __init__(self, outcomes=None, delay: float = 0.0, default: Optional[Usage] = None):
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.default = default or Usage(prompt_tokens=100, completion_tokens=50)
        self.calls: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, model, schema, mode, structured_output, prompt):
        self.calls.append({
            "model": model,
            "schema": schema,
            "mode": mode,
            "structured_output": structured_output,
            "prompt": prompt,
        })
        outcome = self.outcomes.pop(0) if self.outcomes else self.default

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
        finally:
            self.in_flight -= 1

        if isinstance(outcome, BaseException):
            raise outcome
        return Generation(object=schema.model.model_construct(), usage=outcome)


def make_case(
    model: str = "gpt-4o-mini",
    schema: DescribedSchema = POINT_SCHEMA,
    mode: InvocationMode = InvocationMode.JSON,
    structured_output: bool = False,
    input_cost: float = 0.15,
    output_cost: float = 0.6,
) -> BenchmarkCase:
    return BenchmarkCase(
        model_config=ModelConfig(name=model, input_cost=input_cost, output_cost=output_cost),
        schema=schema,
        mode=mode,
        structured_output=structured_output,
    )


def make_result(case: BenchmarkCase, latencies, costs=None) -> CaseResult:
    """Build a CaseResult; a latency of None marks a failed trial."""
    costs = costs or [0.001] * len(latencies)
    trials = [
        TrialResult(index=i, elapsed_ms=ms, cost=cost)
        if ms is not None
        else TrialResult(index=i, elapsed_ms=None, error="RuntimeError: boom")
        for i, (ms, cost) in enumerate(zip(latencies, costs))
    ]
    return CaseResult(case=case, trials=trials, start_time=datetime.now(), end_time=datetime.now())


def make_cold_result(case: BenchmarkCase, pairs) -> ColdStartResult:
    """Build a ColdStartResult; a pair of None marks a failed trial."""
    trials = [
        ColdStartTrial(index=i, first_ms=pair[0], second_ms=pair[1], cost=0.002)
        if pair is not None
        else ColdStartTrial(index=i, first_ms=None, second_ms=None, error="TimeoutError")
        for i, pair in enumerate(pairs)
    ]
    return ColdStartResult(case=case, trials=trials)


@pytest.fixture
def fake_generator():
    return FakeGenerator()
