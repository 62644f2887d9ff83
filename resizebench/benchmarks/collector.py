from __future__ import annotations

import threading


class SampleSink:
    """Append-only latency bag shared by the invocation units of one batch."""

    def __init__(self, capacity: int | None = None) -> None:
        self._lock = threading.Lock()
        self._samples: list[float] = []
        self._capacity = capacity

    def record(self, latency_ms: float) -> None:
        with self._lock:
            if self._capacity is not None and len(self._samples) >= self._capacity:
                raise OverflowError(
                    f"sample sink already holds {self._capacity} samples"
                )
            self._samples.append(latency_ms)

    def snapshot(self) -> tuple[float, ...]:
        with self._lock:
            return tuple(self._samples)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)


__all__ = ["SampleSink"]
