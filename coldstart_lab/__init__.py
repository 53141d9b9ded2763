"""
Schema Cold-Start Lab - benchmarks for structured-output latency.

Measures how schema complexity, invocation mode and structured-output
settings affect the latency, reliability and cost of object generation
with hosted LLM APIs, and how large the first-call (cold start) penalty is.

Key modules:
- benchmarks: Matrix and cold-start benchmark suites
- harness: Case generation, orchestration, aggregation and reporting
- instrumentation: Timing, generation clients and tracing
- schemas: Target schemas and cache-defeating mutations
"""

__version__ = "0.1.0"

from . import schemas
from . import instrumentation
from . import harness
from . import benchmarks

__all__ = [
    "benchmarks",
    "harness",
    "instrumentation",
    "schemas",
]
