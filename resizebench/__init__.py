from .benchmarks import (
    BenchmarkCase,
    ComparativeReport,
    ComparativeReporter,
    FailurePolicy,
    RunConfig,
    RunExecutor,
    RunResult,
    compare,
    format_report,
    format_result,
)
from .clock import Clock
from .errors import BenchmarkError, EnvironmentFailure, InvalidInput, OperationFailure
from .memory import GarbageCollectingSettler, NullSettler
from .stats import Summary, aggregate

__version__ = "0.1.0"

__all__ = [
    "BenchmarkCase",
    "BenchmarkError",
    "Clock",
    "ComparativeReport",
    "ComparativeReporter",
    "EnvironmentFailure",
    "FailurePolicy",
    "GarbageCollectingSettler",
    "InvalidInput",
    "NullSettler",
    "OperationFailure",
    "RunConfig",
    "RunExecutor",
    "RunResult",
    "Summary",
    "aggregate",
    "compare",
    "format_report",
    "format_result",
]
