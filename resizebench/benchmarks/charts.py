from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .reporter import ComparativeReport

LOGGER = logging.getLogger("resizebench.benchmark.charts")

sns.set_style("whitegrid")
plt.rcParams["figure.dpi"] = 100
plt.rcParams["savefig.dpi"] = 300
plt.rcParams["font.size"] = 10
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 13
plt.rcParams["legend.fontsize"] = 9

CANDIDATE_COLORS = ["#2E86AB", "#A23B72", "#F18F01", "#C73E1D", "#6A994E"]

LATENCY_CHART_FILENAME = "latency_by_degree.png"
WALL_CLOCK_CHART_FILENAME = "wall_clock_by_degree.png"


def render_report_charts(report: ComparativeReport, output_dir: Path) -> list[Path]:
    """Render the latency and wall-clock charts for a finished comparison."""
    summary = report.summary_dataframe()
    if summary.empty:
        LOGGER.warning("No batches recorded; skipping charts")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    latency_path = output_dir / LATENCY_CHART_FILENAME
    wall_clock_path = output_dir / WALL_CLOCK_CHART_FILENAME

    _render_latency_bars(summary, latency_path)
    LOGGER.info("Rendering chart %s", latency_path)
    _render_wall_clock_lines(summary, wall_clock_path)
    LOGGER.info("Rendering chart %s", wall_clock_path)
    return [latency_path, wall_clock_path]


def _render_latency_bars(summary: pd.DataFrame, chart_path: Path) -> None:
    """Grouped bars of mean latency per batch with stddev whiskers."""
    labels = list(dict.fromkeys(summary["label"]))
    batches = list(dict.fromkeys(summary["batch"]))

    fig, ax = plt.subplots(figsize=(12, 6))
    width = 0.8 / max(len(labels), 1)
    positions = np.arange(len(batches))

    for idx, label in enumerate(labels):
        subset = summary[summary["label"] == label].set_index("batch").reindex(batches)
        bars = ax.bar(
            positions + idx * width - 0.4 + width / 2,
            subset["mean_ms"].fillna(0.0),
            width,
            yerr=subset["stddev_ms"].fillna(0.0),
            capsize=4,
            label=label,
            color=CANDIDATE_COLORS[idx % len(CANDIDATE_COLORS)],
            alpha=0.85,
            edgecolor="white",
            linewidth=1.5,
        )
        for bar, value in zip(bars, subset["mean_ms"]):
            if pd.isna(value):
                continue
            ax.text(
                bar.get_x() + bar.get_width() / 2.0,
                bar.get_height(),
                f"{value:.1f}",
                ha="center",
                va="bottom",
                fontsize=8,
            )

    ax.set_xticks(positions)
    ax.set_xticklabels(batches)
    ax.set_xlabel("Batch", fontweight="semibold")
    ax.set_ylabel("Mean latency per call (ms)", fontweight="semibold")
    ax.set_title("Per-call Latency by Candidate and Concurrency", fontweight="bold", pad=15)
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3, axis="y", linestyle="--")
    ax.legend(loc="upper left", frameon=True, fancybox=True)

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def _render_wall_clock_lines(summary: pd.DataFrame, chart_path: Path) -> None:
    """Batch wall clock per call against concurrency degree."""
    frame = summary.assign(
        wall_clock_per_call_ms=summary["batch_wall_clock_ms"] / summary["iterations"]
    )

    fig, ax = plt.subplots(figsize=(10, 6))
    sns.lineplot(
        data=frame,
        x="concurrency_degree",
        y="wall_clock_per_call_ms",
        hue="label",
        marker="o",
        linewidth=2.5,
        markersize=8,
        palette=sns.color_palette(CANDIDATE_COLORS, n_colors=frame["label"].nunique()),
        ax=ax,
    )
    ax.set_xticks(sorted(frame["concurrency_degree"].unique()))
    ax.set_xlabel("Concurrency degree", fontweight="semibold")
    ax.set_ylabel("Wall clock per call (ms)", fontweight="semibold")
    ax.set_title("Effective Cost per Call vs Concurrency", fontweight="bold", pad=15)
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3, linestyle="--")

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
