"""Strategies for settling the heap before a timed batch."""

from __future__ import annotations

import gc
import logging
import time
from typing import Callable, Protocol

from .errors import EnvironmentFailure, InvalidInput

LOGGER = logging.getLogger("resizebench.memory")

QUIESCENCE_SECONDS_DEFAULT = 1.0


class MemorySettler(Protocol):
    def settle(self) -> None:
        ...


class NullSettler:
    """Settler for runtimes without a comparable collector facility."""

    def settle(self) -> None:
        return None


class GarbageCollectingSettler:
    """Run a full collection over every generation, then sit idle.

    CPython never moves objects, so the full pass is as close as the runtime
    gets to a compacting collection. The quiescence sleep lets allocator and
    OS activity triggered by the pass die down before timing starts.
    """

    def __init__(
        self,
        quiescence_seconds: float = QUIESCENCE_SECONDS_DEFAULT,
        sleep: Callable[[float], None] = time.sleep,
        collect: Callable[[], int] = gc.collect,
    ) -> None:
        if quiescence_seconds < 0:
            raise InvalidInput("quiescence_seconds must be >= 0")
        self._quiescence_seconds = quiescence_seconds
        self._sleep = sleep
        self._collect = collect

    def settle(self) -> None:
        try:
            unreachable = self._collect()
        except Exception as exc:  # noqa: BLE001
            raise EnvironmentFailure("garbage collector refused a full pass") from exc
        LOGGER.debug(
            "Full collection reclaimed %s objects; sleeping %.2fs",
            unreachable,
            self._quiescence_seconds,
        )
        if self._quiescence_seconds:
            self._sleep(self._quiescence_seconds)


__all__ = [
    "GarbageCollectingSettler",
    "MemorySettler",
    "NullSettler",
    "QUIESCENCE_SECONDS_DEFAULT",
]
