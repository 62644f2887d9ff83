from __future__ import annotations

import functools
import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable

from ..clock import Clock
from ..errors import InvalidInput, OperationFailure
from ..memory import MemorySettler, NullSettler
from ..stats import aggregate
from .collector import SampleSink
from .config import Operation, RunConfig

LOGGER = logging.getLogger("resizebench.benchmark.executor")


@dataclass(frozen=True)
class RunResult:
    config: RunConfig
    samples: tuple[float, ...]
    mean: float
    stddev: float
    batch_wall_clock: float
    label: str | None = None

    def __post_init__(self) -> None:
        if len(self.samples) != self.config.iterations:
            raise InvalidInput(
                f"expected {self.config.iterations} samples, got {len(self.samples)}"
            )

    @property
    def count(self) -> int:
        return len(self.samples)

    @property
    def minimum(self) -> float:
        return min(self.samples)

    @property
    def maximum(self) -> float:
        return max(self.samples)

    @property
    def throughput_per_second(self) -> float:
        if self.batch_wall_clock <= 0:
            return 0.0
        return self.count / self.batch_wall_clock * 1000.0


class RunExecutor:
    """Runs one batch of an operation at a fixed concurrency degree.

    Degree 1 calls the operation directly on the calling thread, one call
    after another. Higher degrees go through a thread pool bounded to the
    degree, so at most that many calls are in flight at once. Every call is
    timed on its own, starting when a worker actually picks it up.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        settler: MemorySettler | None = None,
    ) -> None:
        self._clock = clock if clock is not None else Clock()
        self._settler = settler if settler is not None else NullSettler()

    def run(
        self, operation: Operation, config: RunConfig, label: str | None = None
    ) -> RunResult:
        config.validate()
        if not callable(operation):
            raise InvalidInput(f"operation for {label!r} is not callable")

        if config.force_memory_pressure:
            LOGGER.debug("Settling memory before batch %s", config.key())
            self._settler.settle()

        sink = SampleSink(capacity=config.iterations)
        unit = functools.partial(self._invoke, operation, sink, label, config)

        LOGGER.info(
            "Running %s: iterations=%d degree=%d",
            label or "<operation>",
            config.iterations,
            config.concurrency_degree,
        )
        if config.is_serial:
            wall_clock = self._dispatch_serial(unit, config.iterations)
        else:
            wall_clock = self._dispatch_concurrent(unit, config)

        samples = sink.snapshot()
        summary = aggregate(samples)
        result = RunResult(
            config=config,
            samples=samples,
            mean=summary.mean,
            stddev=summary.stddev,
            batch_wall_clock=wall_clock,
            label=label,
        )
        LOGGER.info(
            "Finished %s %s: mean=%.2fms stddev=%.2fms elapsed=%.2fms",
            label or "<operation>",
            config.key(),
            result.mean,
            result.stddev,
            result.batch_wall_clock,
        )
        return result

    def _invoke(
        self,
        operation: Operation,
        sink: SampleSink,
        label: str | None,
        config: RunConfig,
    ) -> None:
        token = self._clock.start()
        try:
            operation()
        except Exception as exc:
            raise OperationFailure(label, config, exc) from exc
        sink.record(self._clock.elapsed_millis(token))

    def _dispatch_serial(self, unit: Callable[[], None], iterations: int) -> float:
        token = self._clock.start()
        for _ in range(iterations):
            unit()
        return self._clock.elapsed_millis(token)

    def _dispatch_concurrent(self, unit: Callable[[], None], config: RunConfig) -> float:
        with ThreadPoolExecutor(
            max_workers=config.concurrency_degree,
            thread_name_prefix="resizebench-unit",
        ) as pool:
            token = self._clock.start()
            futures = [pool.submit(unit) for _ in range(config.iterations)]
            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            wall_clock = self._clock.elapsed_millis(token)
            for future in not_done:
                future.cancel()

        failure = _first_failure(futures, done)
        if failure is not None:
            raise failure
        return wall_clock


def _first_failure(futures: list[Future], done: set[Future]) -> BaseException | None:
    for future in futures:
        if future in done and not future.cancelled():
            exc = future.exception()
            if exc is not None:
                return exc
    return None


__all__ = ["RunExecutor", "RunResult"]
