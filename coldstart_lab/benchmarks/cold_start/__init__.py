"""
Cold-start benchmarks - cold vs warm request pairs on mutated schemas.
"""

from .benchmark import (
    ColdStartBenchmarkSuite,
    cold_start_cases,
)

__all__ = [
    "ColdStartBenchmarkSuite",
    "cold_start_cases",
]
