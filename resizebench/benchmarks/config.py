from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from ..errors import InvalidInput

Operation = Callable[[], object]

SERIAL_ITERATIONS_DEFAULT = 10
PARALLEL_DEGREES_DEFAULT: tuple[int, ...] = (4, 8)


@dataclass(frozen=True)
class RunConfig:
    """One measurement batch: how many calls, how many in flight at once."""

    iterations: int
    concurrency_degree: int = 1
    force_memory_pressure: bool = False

    @classmethod
    def serial(cls, iterations: int, force_memory_pressure: bool = False) -> RunConfig:
        return cls(iterations, 1, force_memory_pressure)

    @classmethod
    def parallel(
        cls, iterations: int, degree: int, force_memory_pressure: bool = False
    ) -> RunConfig:
        return cls(iterations, degree, force_memory_pressure)

    @property
    def is_serial(self) -> bool:
        return self.concurrency_degree == 1

    def validate(self) -> None:
        if isinstance(self.iterations, bool) or not isinstance(self.iterations, int):
            raise InvalidInput(f"iterations must be an integer, got {self.iterations!r}")
        if self.iterations < 1:
            raise InvalidInput(f"iterations must be >= 1, got {self.iterations}")
        if isinstance(self.concurrency_degree, bool) or not isinstance(
            self.concurrency_degree, int
        ):
            raise InvalidInput(
                f"concurrency_degree must be an integer, got {self.concurrency_degree!r}"
            )
        if self.concurrency_degree < 1:
            raise InvalidInput(
                f"concurrency_degree must be >= 1, got {self.concurrency_degree}"
            )

    def key(self) -> str:
        if self.is_serial:
            key = f"serial-x{self.iterations}"
        else:
            key = f"parallel-{self.concurrency_degree}-x{self.iterations}"
        return f"{key}-gc" if self.force_memory_pressure else key


@dataclass(frozen=True)
class BenchmarkCase:
    """One of the candidates under comparison."""

    label: str
    operation: Operation = field(compare=False)
    candidate_index: int = 0


@dataclass(frozen=True)
class DegreePlan:
    """Ordered set of batches every candidate is put through."""

    name: str
    configs: Sequence[RunConfig]
    description: str | None = None

    def __iter__(self) -> Iterator[RunConfig]:
        return iter(self.configs)

    def __len__(self) -> int:
        return len(self.configs)

    def with_memory_pressure(self, enabled: bool) -> DegreePlan:
        return DegreePlan(
            name=self.name,
            configs=[
                RunConfig(c.iterations, c.concurrency_degree, enabled)
                for c in self.configs
            ],
            description=self.description,
        )


def check_unique(configs: Sequence[RunConfig]) -> None:
    """Reject plans that list the same batch twice."""
    seen: set[str] = set()
    for config in configs:
        key = config.key()
        if key in seen:
            raise InvalidInput(f"batch {key} is listed more than once")
        seen.add(key)


def default_degree_plan(
    serial_iterations: int = SERIAL_ITERATIONS_DEFAULT,
    parallel_degrees: Sequence[int] = PARALLEL_DEGREES_DEFAULT,
    force_memory_pressure: bool = False,
) -> DegreePlan:
    """Serial baseline followed by one fully-saturated batch per degree.

    Each parallel batch dispatches exactly ``degree`` calls so that every
    call starts at once, which is how the desktop tool measured contention.
    """

    configs = [RunConfig.serial(serial_iterations, force_memory_pressure)]
    configs.extend(
        RunConfig.parallel(degree, degree, force_memory_pressure)
        for degree in parallel_degrees
    )
    return DegreePlan(
        name="default",
        configs=configs,
        description="Serial baseline, then saturated parallel batches.",
    )


def load_plan(path: str | Path | None, **defaults: Any) -> DegreePlan:
    """Load a degree plan from JSON or fall back to :func:`default_degree_plan`.

    The file holds ``{"name": ..., "configs": [{"iterations": 10,
    "concurrency_degree": 1, "force_memory_pressure": false}, ...]}``.
    """

    if not path:
        return default_degree_plan(**defaults)

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidInput(f"cannot read degree plan {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidInput(f"degree plan {path} is not valid JSON") from exc

    entries = raw.get("configs") if isinstance(raw, dict) else None
    if not entries:
        raise InvalidInput(f"degree plan {path} lists no configs")

    configs = []
    for entry in entries:
        try:
            config = RunConfig(
                iterations=entry["iterations"],
                concurrency_degree=entry.get("concurrency_degree", 1),
                force_memory_pressure=bool(entry.get("force_memory_pressure", False)),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise InvalidInput(f"malformed config entry in {path}: {entry!r}") from exc
        config.validate()
        configs.append(config)
    check_unique(configs)

    return DegreePlan(
        name=raw.get("name", Path(path).stem),
        configs=configs,
        description=raw.get("description"),
    )


__all__ = [
    "BenchmarkCase",
    "DegreePlan",
    "Operation",
    "RunConfig",
    "check_unique",
    "default_degree_plan",
    "load_plan",
]
