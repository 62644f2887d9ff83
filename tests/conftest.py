from __future__ import annotations

import threading
import time

import pytest

from resizebench.clock import Clock


class CountingClock(Clock):
    """Real clock that remembers how often it was read."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self.starts = 0
        self.reads = 0

    def start(self) -> int:
        with self._lock:
            self.starts += 1
        return super().start()

    def elapsed_millis(self, token: int) -> float:
        with self._lock:
            self.reads += 1
        return super().elapsed_millis(token)


class RecordingSettler:
    def __init__(self, events: list[str] | None = None) -> None:
        self.calls = 0
        self.events = events if events is not None else []

    def settle(self) -> None:
        self.calls += 1
        self.events.append("settle")


class ConcurrencyProbe:
    """Operation that sleeps and tracks how many copies of itself overlap."""

    def __init__(self, delay_s: float = 0.0) -> None:
        self._delay_s = delay_s
        self._lock = threading.Lock()
        self.active = 0
        self.peak = 0
        self.calls = 0

    def __call__(self) -> None:
        with self._lock:
            self.calls += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self._delay_s:
                time.sleep(self._delay_s)
        finally:
            with self._lock:
                self.active -= 1


class FailOnCall:
    """Operation that raises on its nth invocation, counting from 1."""

    def __init__(self, fail_on: int, delay_s: float = 0.0) -> None:
        self._fail_on = fail_on
        self._delay_s = delay_s
        self._lock = threading.Lock()
        self.calls = 0

    def __call__(self) -> None:
        with self._lock:
            self.calls += 1
            current = self.calls
        if self._delay_s:
            time.sleep(self._delay_s)
        if current == self._fail_on:
            raise RuntimeError(f"boom on call {current}")


@pytest.fixture
def counting_clock() -> CountingClock:
    return CountingClock()


@pytest.fixture
def settler() -> RecordingSettler:
    return RecordingSettler()
