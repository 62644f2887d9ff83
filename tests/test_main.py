import json
import sys

import pytest

from resizebench.benchmarks.config import BenchmarkCase
from resizebench.benchmarks.main import build_plan, main, parse_args


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("RESIZEBENCH_FORCE_GC", "RESIZEBENCH_DEGREES", "RESIZEBENCH_ITERATIONS"):
        monkeypatch.delenv(name, raising=False)


def test_default_plan_from_arguments():
    plan = build_plan(parse_args([]))

    assert [(c.iterations, c.concurrency_degree) for c in plan] == [(10, 1), (4, 4), (8, 8)]


def test_parallel_iterations_and_force_gc():
    plan = build_plan(
        parse_args(["--iterations", "3", "--degrees", "2", "--parallel-iterations", "6", "--force-gc"])
    )

    assert [(c.iterations, c.concurrency_degree) for c in plan] == [(3, 1), (6, 2)]
    assert all(c.force_memory_pressure for c in plan)


def test_environment_defaults(monkeypatch):
    monkeypatch.setenv("RESIZEBENCH_DEGREES", "2,3")
    monkeypatch.setenv("RESIZEBENCH_FORCE_GC", "true")

    plan = build_plan(parse_args([]))

    assert [c.concurrency_degree for c in plan] == [1, 2, 3]
    assert all(c.force_memory_pressure for c in plan)


def test_dry_run_prints_plan(capsys):
    assert main(["--dry-run", "--iterations", "4", "--degrees", "2"]) == 0

    out = capsys.readouterr().out
    assert "serial-x4" in out
    assert "parallel-2-x2" in out


@pytest.mark.parametrize("degrees", ["1", "x", "0,4"])
def test_invalid_degrees_exit_non_zero(degrees):
    assert main(["--dry-run", "--degrees", degrees]) == 1


def test_zero_iterations_exit_non_zero():
    assert main(["--dry-run", "--iterations", "0"]) == 1


def test_unknown_filter_exit_non_zero():
    assert main(["--filters", "magic", "--iterations", "1", "--degrees", ""]) == 1


def test_full_run_writes_artefacts(tmp_path, capsys):
    output_dir = tmp_path / "out"

    status = main(
        [
            "--filters",
            "nearest,bilinear",
            "--iterations",
            "2",
            "--degrees",
            "2",
            "--warmup",
            "0",
            "--output-dir",
            str(output_dir),
            "--no-charts",
            "--save-samples",
        ]
    )

    assert status == 0
    out = capsys.readouterr().out
    assert "Pillow Nearest:\nSerial x2:" in out
    assert "Parallel x2:" in out
    assert (output_dir / "summary.csv").exists()
    assert (output_dir / "pillow-nearest__serial-x2.csv").exists()
    assert (output_dir / "pillow-bilinear__parallel-2-x2.csv").exists()
    assert (output_dir / "img-pillow-nearest.jpg").exists()

    manifest = json.loads((output_dir / "benchmark_manifest.json").read_text())
    assert manifest["batches"] == ["serial-x2", "parallel-2-x2"]
    assert manifest["charts"] == []
    assert manifest["failures"] == {}


def test_repeated_degree_exits_non_zero(tmp_path):
    assert main(["--degrees", "2,2", "--output-dir", str(tmp_path), "--no-charts"]) == 1
    assert not (tmp_path / "benchmark_manifest.json").exists()


def test_missing_plan_file_exits_non_zero(tmp_path):
    assert main(["--dry-run", "--plan-path", str(tmp_path / "nope.json")]) == 1


def test_missing_image_exits_non_zero(tmp_path):
    status = main(["--image", str(tmp_path / "nope.jpg"), "--iterations", "1", "--degrees", ""])

    assert status == 1


def test_failing_sample_render_exits_non_zero(tmp_path, monkeypatch):
    def broken():
        raise RuntimeError("encoder crashed")

    monkeypatch.setattr(
        sys.modules["resizebench.benchmarks.main"],
        "build_cases",
        lambda source, settings, filters: [BenchmarkCase("Broken", broken, 1)],
    )

    status = main(["--output-dir", str(tmp_path), "--save-samples", "--degrees", ""])

    assert status == 1


def test_csv_names_are_file_safe(tmp_path, monkeypatch):
    monkeypatch.setattr(
        sys.modules["resizebench.benchmarks.main"],
        "build_cases",
        lambda source, settings, filters: [BenchmarkCase("GDI+ / WIC: Fant", lambda: None, 1)],
    )

    status = main(
        ["--output-dir", str(tmp_path), "--iterations", "2", "--degrees", "", "--no-charts"]
    )

    assert status == 0
    assert (tmp_path / "gdi-wic-fant__serial-x2.csv").exists()
