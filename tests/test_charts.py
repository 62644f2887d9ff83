from resizebench.benchmarks.charts import (
    LATENCY_CHART_FILENAME,
    WALL_CLOCK_CHART_FILENAME,
    render_report_charts,
)
from resizebench.benchmarks.config import RunConfig
from resizebench.benchmarks.executor import RunResult
from resizebench.benchmarks.reporter import ComparativeReport


def _result(config, latency, wall_clock):
    return RunResult(
        config=config,
        samples=(latency,) * config.iterations,
        mean=latency,
        stddev=0.0,
        batch_wall_clock=wall_clock,
    )


def test_renders_both_charts(tmp_path):
    report = ComparativeReport(
        results={
            "A": [_result(RunConfig.serial(2), 10.0, 20.0), _result(RunConfig.parallel(4, 4), 12.0, 14.0)],
            "B": [_result(RunConfig.serial(2), 8.0, 16.0), _result(RunConfig.parallel(4, 4), 9.0, 10.0)],
        }
    )

    paths = render_report_charts(report, tmp_path)

    assert [p.name for p in paths] == [LATENCY_CHART_FILENAME, WALL_CLOCK_CHART_FILENAME]
    assert all(p.stat().st_size > 0 for p in paths)


def test_empty_report_renders_nothing(tmp_path):
    assert render_report_charts(ComparativeReport(), tmp_path) == []


def test_memory_pressure_variant_of_a_batch_renders(tmp_path):
    report = ComparativeReport(
        results={
            "A": [
                _result(RunConfig.serial(2), 10.0, 20.0),
                _result(RunConfig.serial(2, force_memory_pressure=True), 9.0, 18.0),
            ]
        }
    )

    paths = render_report_charts(report, tmp_path)

    assert len(paths) == 2
