from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .benchmarks.config import RunConfig


class BenchmarkError(Exception):
    """Base class for every failure raised by the benchmark harness."""


class InvalidInput(BenchmarkError, ValueError):
    """Raised when a run is requested with inputs that cannot be measured."""


class EnvironmentFailure(BenchmarkError, RuntimeError):
    """Raised when the timer or the collector facilities are unavailable."""


class OperationFailure(BenchmarkError):
    """Raised when a candidate operation fails during a timed batch."""

    def __init__(self, label: str | None, config: RunConfig | None, cause: BaseException) -> None:
        self.label = label
        self.config = config
        self.cause = cause
        super().__init__(self._describe())

    def _describe(self) -> str:
        where = self.label or "<unlabelled>"
        if self.config is None:
            stage = "warmup"
        else:
            stage = (
                f"iterations={self.config.iterations} "
                f"degree={self.config.concurrency_degree}"
            )
        return f"operation {where!r} failed during {stage}: {self.cause!r}"


__all__ = [
    "BenchmarkError",
    "EnvironmentFailure",
    "InvalidInput",
    "OperationFailure",
]
