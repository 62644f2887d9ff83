from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .errors import InvalidInput


@dataclass(frozen=True)
class Summary:
    mean: float
    stddev: float


def aggregate(samples: Iterable[float]) -> Summary:
    """Return the mean and population standard deviation of ``samples``.

    The deviation divides by N rather than N - 1 so that numbers stay
    comparable with the figures the desktop tool has always printed.
    """
    values = np.fromiter(samples, dtype=float)
    if values.size == 0:
        raise InvalidInput("cannot aggregate an empty sample set")
    if not np.all(np.isfinite(values)):
        raise InvalidInput("sample set contains non-finite latencies")

    mean = float(math.fsum(values) / values.size)
    variance = math.fsum((values - mean) ** 2) / values.size
    return Summary(mean=mean, stddev=math.sqrt(variance))


__all__ = ["Summary", "aggregate"]
