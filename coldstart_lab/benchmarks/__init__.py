"""
Benchmark suites for structured-output latency testing.

Each submodule focuses on one measurement.
"""

from . import matrix
from . import cold_start

__all__ = [
    "matrix",
    "cold_start",
]
