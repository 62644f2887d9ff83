from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass
from typing import Iterator

from .errors import EnvironmentFailure

NANOS_PER_MILLI = 1_000_000


@dataclass
class Interval:
    elapsed_ms: float | None = None


class Clock:
    """Monotonic high-resolution timer backed by the performance counter."""

    def __init__(self) -> None:
        info = time.get_clock_info("perf_counter")
        if not info.monotonic:
            raise EnvironmentFailure("perf_counter is not monotonic on this platform")
        self.resolution_ms = info.resolution * 1000.0

    def start(self) -> int:
        return time.perf_counter_ns()

    def elapsed_millis(self, token: int) -> float:
        return (time.perf_counter_ns() - token) / NANOS_PER_MILLI

    @contextlib.contextmanager
    def measure(self) -> Iterator[Interval]:
        interval = Interval()
        token = self.start()
        try:
            yield interval
        finally:
            interval.elapsed_ms = self.elapsed_millis(token)


__all__ = ["Clock", "Interval"]
