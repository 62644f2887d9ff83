from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from ..candidates import (
    RESAMPLING_FILTERS,
    ResizeSettings,
    build_cases,
    render_samples,
    slugify,
    synthetic_image,
)
from ..errors import BenchmarkError, InvalidInput
from ..memory import QUIESCENCE_SECONDS_DEFAULT, GarbageCollectingSettler
from .charts import render_report_charts
from .config import DegreePlan, RunConfig, check_unique, load_plan
from .executor import RunExecutor
from .reporter import ComparativeReport, ComparativeReporter, FailurePolicy, format_report

LOGGER = logging.getLogger("resizebench.benchmark")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare image resizers under concurrency")
    parser.add_argument(
        "--image",
        default=os.environ.get("RESIZEBENCH_IMAGE"),
        help="Source image; a synthetic 1920x1080 JPEG is used when omitted",
    )
    parser.add_argument(
        "--width", type=int, default=int(os.environ.get("RESIZEBENCH_WIDTH", "400"))
    )
    parser.add_argument(
        "--height",
        type=int,
        default=int(os.environ.get("RESIZEBENCH_HEIGHT", "0")),
        help="Target height (0 keeps the aspect ratio)",
    )
    parser.add_argument(
        "--quality", type=int, default=int(os.environ.get("RESIZEBENCH_QUALITY", "90"))
    )
    parser.add_argument(
        "--filters",
        default=os.environ.get("RESIZEBENCH_FILTERS", ",".join(RESAMPLING_FILTERS)),
        help="Comma-separated resampling filters to compare",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=int(os.environ.get("RESIZEBENCH_ITERATIONS", "10")),
        help="Calls in the serial batch",
    )
    parser.add_argument(
        "--degrees",
        default=os.environ.get("RESIZEBENCH_DEGREES", "4,8"),
        help="Comma-separated concurrency degrees for the parallel batches",
    )
    parser.add_argument(
        "--parallel-iterations",
        type=int,
        default=int(os.environ.get("RESIZEBENCH_PARALLEL_ITERATIONS", "0")),
        help="Calls per parallel batch (0 dispatches exactly one call per slot)",
    )
    parser.add_argument(
        "--plan-path",
        default=os.environ.get("RESIZEBENCH_PLAN_PATH"),
        help="Optional JSON file describing the batches to run",
    )
    parser.add_argument(
        "--force-gc",
        action="store_true",
        default=_env_flag("RESIZEBENCH_FORCE_GC"),
        help="Run a full garbage collection and pause before every batch",
    )
    parser.add_argument(
        "--quiescence",
        type=float,
        default=float(
            os.environ.get("RESIZEBENCH_QUIESCENCE", str(QUIESCENCE_SECONDS_DEFAULT))
        ),
        help="Seconds to idle after a forced collection",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=int(os.environ.get("RESIZEBENCH_WARMUP", "1")),
        help="Untimed calls per candidate before its first batch",
    )
    parser.add_argument(
        "--on-failure",
        choices=[policy.value for policy in FailurePolicy],
        default=os.environ.get("RESIZEBENCH_ON_FAILURE", FailurePolicy.ABORT.value),
        help="Abort the comparison or skip the failing candidate",
    )
    parser.add_argument(
        "--output-dir",
        default=os.environ.get("RESIZEBENCH_OUTPUT_DIR"),
        help="Directory to store benchmark artefacts (CSV, charts, manifest)",
    )
    parser.add_argument(
        "--charts",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Render charts into the output directory",
    )
    parser.add_argument(
        "--save-samples",
        action="store_true",
        help="Write one resized image per candidate into the output directory",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the planned batches without executing them",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("RESIZEBENCH_LOG_LEVEL", "INFO"),
        help="Logging level",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_plan(args: argparse.Namespace) -> DegreePlan:
    if args.plan_path:
        plan = load_plan(args.plan_path)
        return plan.with_memory_pressure(True) if args.force_gc else plan

    degrees = _parse_degrees(args.degrees)
    configs = [RunConfig.serial(args.iterations, args.force_gc)]
    for degree in degrees:
        iterations = args.parallel_iterations or degree
        configs.append(RunConfig.parallel(iterations, degree, args.force_gc))
    return DegreePlan(name="cli", configs=configs)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        plan = build_plan(args)
        for config in plan:
            config.validate()
        check_unique(list(plan))
    except BenchmarkError as exc:
        LOGGER.error("Invalid benchmark plan: %s", exc)
        return 1

    if args.dry_run:
        _print_plan(plan)
        return 0

    settings = ResizeSettings(width=args.width, height=args.height, quality=args.quality)
    if args.image:
        try:
            source = Path(args.image).read_bytes()
        except OSError as exc:
            LOGGER.error("Cannot read source image %s: %s", args.image, exc)
            return 1
        LOGGER.info("Source image: %s (%d bytes)", args.image, len(source))
    else:
        source = synthetic_image()
        LOGGER.info("Source image: synthetic (%d bytes)", len(source))

    filters = [item.strip() for item in args.filters.split(",") if item.strip()]
    try:
        cases = build_cases(source, settings, filters)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 1

    output_dir = Path(args.output_dir) if args.output_dir else None
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        LOGGER.info("Benchmark output directory: %s", output_dir)
        if args.save_samples:
            try:
                render_samples(cases, output_dir, settings)
            except BenchmarkError as exc:
                LOGGER.error("Sample rendering failed: %s", exc)
                return 1

    try:
        settler = GarbageCollectingSettler(quiescence_seconds=args.quiescence)
        reporter = ComparativeReporter(
            executor=RunExecutor(settler=settler),
            failure_policy=FailurePolicy(args.on_failure),
            warmup_iterations=args.warmup,
        )
        report = reporter.compare(cases, list(plan))
    except BenchmarkError as exc:
        LOGGER.error("Benchmark aborted: %s", exc)
        return 1

    print(format_report(report))

    if output_dir is not None:
        write_artefacts(report, plan, output_dir, charts=args.charts)
    return 0 if report.succeeded else 1


def write_artefacts(
    report: ComparativeReport, plan: DegreePlan, output_dir: Path, charts: bool = True
) -> Path:
    samples = report.to_dataframe()
    for (label, batch), frame in samples.groupby(["label", "batch"], sort=False):
        path = output_dir / f"{slugify(label)}__{batch}.csv"
        frame.to_csv(path, index=False)
        LOGGER.info("Saved %s (%d rows)", path, len(frame))

    summary_path = output_dir / "summary.csv"
    report.summary_dataframe().to_csv(summary_path, index=False)
    LOGGER.info("Saved summary to %s", summary_path)

    chart_paths: list[Path] = []
    if charts:
        chart_paths = render_report_charts(report, output_dir)

    manifest = {
        "plan": plan.name,
        "batches": [config.key() for config in plan],
        "summary": str(summary_path),
        "charts": [str(path) for path in chart_paths],
        "failures": {label: str(exc) for label, exc in report.failures.items()},
    }
    manifest_path = output_dir / "benchmark_manifest.json"
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)
    LOGGER.info("Benchmark manifest written to %s", manifest_path)
    return manifest_path


def _parse_degrees(raw: str) -> list[int]:
    try:
        degrees = [int(item) for item in raw.split(",") if item.strip()]
    except ValueError as exc:
        raise InvalidInput(f"degrees must be integers, got {raw!r}") from exc
    if any(degree < 2 for degree in degrees):
        raise InvalidInput("parallel degrees must be >= 2; the serial batch always runs")
    return degrees


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}


def _print_plan(plan: DegreePlan) -> None:
    print(f"Plan: {plan.name}" + (f" ({plan.description})" if plan.description else ""))
    for config in plan:
        print(
            f"  - {config.key()}: iterations={config.iterations}, "
            f"degree={config.concurrency_degree}, "
            f"force_gc={config.force_memory_pressure}"
        )


if __name__ == "__main__":
    sys.exit(main())
