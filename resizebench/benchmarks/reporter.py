from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import pandas as pd

from ..errors import InvalidInput, OperationFailure
from .config import BenchmarkCase, RunConfig, check_unique
from .executor import RunExecutor, RunResult

LOGGER = logging.getLogger("resizebench.benchmark.reporter")

SAMPLE_COLUMNS = [
    "label",
    "candidate_index",
    "batch",
    "iterations",
    "concurrency_degree",
    "sample",
    "latency_ms",
    "batch_wall_clock_ms",
]

SUMMARY_COLUMNS = [
    "label",
    "batch",
    "iterations",
    "concurrency_degree",
    "mean_ms",
    "stddev_ms",
    "min_ms",
    "max_ms",
    "batch_wall_clock_ms",
    "throughput_per_s",
]


class FailurePolicy(str, enum.Enum):
    ABORT = "abort"
    SKIP_CASE = "skip"


@dataclass
class ComparativeReport:
    """Results of one comparison, keyed by candidate label in run order."""

    results: dict[str, list[RunResult]] = field(default_factory=dict)
    failures: dict[str, OperationFailure] = field(default_factory=dict)
    candidate_indexes: dict[str, int] = field(default_factory=dict)

    def __getitem__(self, label: str) -> list[RunResult]:
        return self.results[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __contains__(self, label: object) -> bool:
        return label in self.results

    def items(self):
        return self.results.items()

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dataframe(self) -> pd.DataFrame:
        """One row per recorded sample."""
        rows = []
        for label, results in self.results.items():
            for result in results:
                for position, latency in enumerate(result.samples, start=1):
                    rows.append(
                        {
                            "label": label,
                            "candidate_index": self.candidate_indexes.get(label, 0),
                            "batch": result.config.key(),
                            "iterations": result.config.iterations,
                            "concurrency_degree": result.config.concurrency_degree,
                            "sample": position,
                            "latency_ms": latency,
                            "batch_wall_clock_ms": result.batch_wall_clock,
                        }
                    )
        if not rows:
            return pd.DataFrame(columns=SAMPLE_COLUMNS)
        return pd.DataFrame(rows, columns=SAMPLE_COLUMNS)

    def summary_dataframe(self) -> pd.DataFrame:
        """One row per batch."""
        rows = [
            {
                "label": label,
                "batch": result.config.key(),
                "iterations": result.config.iterations,
                "concurrency_degree": result.config.concurrency_degree,
                "mean_ms": result.mean,
                "stddev_ms": result.stddev,
                "min_ms": result.minimum,
                "max_ms": result.maximum,
                "batch_wall_clock_ms": result.batch_wall_clock,
                "throughput_per_s": result.throughput_per_second,
            }
            for label, results in self.results.items()
            for result in results
        ]
        if not rows:
            return pd.DataFrame(columns=SUMMARY_COLUMNS)
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


class ComparativeReporter:
    """Puts every candidate through every batch of a degree plan.

    Candidates run one after another so that they never contend with each
    other for cores or memory bandwidth.
    """

    def __init__(
        self,
        executor: RunExecutor | None = None,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
        warmup_iterations: int = 0,
    ) -> None:
        if warmup_iterations < 0:
            raise InvalidInput("warmup_iterations must be >= 0")
        self._executor = executor if executor is not None else RunExecutor()
        self._failure_policy = FailurePolicy(failure_policy)
        self._warmup_iterations = warmup_iterations

    def compare(
        self, cases: Sequence[BenchmarkCase], degrees: Sequence[RunConfig]
    ) -> ComparativeReport:
        cases = list(cases)
        degrees = list(degrees)
        _validate(cases, degrees)

        report = ComparativeReport()
        for case in cases:
            report.results[case.label] = []
            report.candidate_indexes[case.label] = case.candidate_index
            try:
                self._warm_up(case)
                for config in degrees:
                    result = self._executor.run(case.operation, config, label=case.label)
                    report.results[case.label].append(result)
            except OperationFailure as exc:
                if self._failure_policy is FailurePolicy.ABORT:
                    raise
                LOGGER.warning("Skipping remaining batches for %s: %s", case.label, exc)
                report.failures[case.label] = exc
        return report

    def _warm_up(self, case: BenchmarkCase) -> None:
        for _ in range(self._warmup_iterations):
            LOGGER.debug("Warming up %s", case.label)
            try:
                case.operation()
            except Exception as exc:
                raise OperationFailure(case.label, None, exc) from exc


def compare(
    cases: Sequence[BenchmarkCase],
    degrees: Sequence[RunConfig],
    **kwargs,
) -> ComparativeReport:
    return ComparativeReporter(**kwargs).compare(cases, degrees)


def _validate(cases: list[BenchmarkCase], degrees: list[RunConfig]) -> None:
    if not cases:
        raise InvalidInput("no benchmark cases given")
    if not degrees:
        raise InvalidInput("no degree configs given")
    seen: set[str] = set()
    for case in cases:
        if case.label in seen:
            raise InvalidInput(f"duplicate case label {case.label!r}")
        if not callable(case.operation):
            raise InvalidInput(f"operation for {case.label!r} is not callable")
        seen.add(case.label)
    for config in degrees:
        config.validate()
    check_unique(degrees)


def format_result(result: RunResult) -> str:
    mode = "Serial" if result.config.is_serial else "Parallel"
    line = f"{mode} x{result.count}: {result.mean:.2f}ms ±{result.stddev:.2f}ms"
    if not result.config.is_serial:
        line += f" ({result.batch_wall_clock:.2f}ms elapsed)"
    return line


def format_case(label: str, results: Sequence[RunResult]) -> str:
    return "\n".join([f"{label}:", *(format_result(result) for result in results)])


def format_report(report: ComparativeReport) -> str:
    blocks = []
    for label, results in report.items():
        block = format_case(label, results)
        failure = report.failures.get(label)
        if failure is not None:
            block += f"\nFailed: {failure.cause!r}"
        blocks.append(block)
    return "\n\n".join(blocks)


__all__ = [
    "ComparativeReport",
    "ComparativeReporter",
    "FailurePolicy",
    "compare",
    "format_case",
    "format_report",
    "format_result",
]
