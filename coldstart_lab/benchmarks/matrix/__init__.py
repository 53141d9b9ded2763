"""
Matrix benchmarks - latency, reliability and cost per case.
"""

from .benchmark import MatrixBenchmarkSuite

__all__ = [
    "MatrixBenchmarkSuite",
]
