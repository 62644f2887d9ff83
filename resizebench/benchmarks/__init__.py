"""
Benchmark harness for comparing interchangeable operations.

This package runs each candidate through a serial baseline and a series of
bounded thread-pool batches, aggregates per-call latencies, and renders the
comparison as text, CSV files and charts.
"""

from .config import BenchmarkCase, DegreePlan, RunConfig, default_degree_plan, load_plan
from .executor import RunExecutor, RunResult
from .reporter import (
    ComparativeReport,
    ComparativeReporter,
    FailurePolicy,
    compare,
    format_case,
    format_report,
    format_result,
)
from .main import main

__all__ = [
    "BenchmarkCase",
    "ComparativeReport",
    "ComparativeReporter",
    "DegreePlan",
    "FailurePolicy",
    "RunConfig",
    "RunExecutor",
    "RunResult",
    "compare",
    "default_degree_plan",
    "format_case",
    "format_report",
    "format_result",
    "load_plan",
    "main",
]
