"""Plotting tools for chart series."""

from dataclasses import dataclass
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.ticker import PercentFormatter, StrMethodFormatter

from ..metrics.trends import Trend
from ..series.builder import ChartSeries
from .utils import ensure_directory

PERCENT_METRICS = frozenset({"profit_margin"})
COUNT_METRICS = frozenset({"orders"})


@dataclass(frozen=True)
class SeriesPlotConfig:
    """Styling options for month-by-month series plots."""

    title: str | None = None
    xlabel: str = "Month"
    ylabel: str | None = None
    color: str = "#126782"
    comparison_color: str = "#d08300"
    line_width: float = 2.5
    marker: str = "o"
    figsize: tuple[float, float] = (11, 6)
    dpi: int = 150


@dataclass(frozen=True)
class PlotReport:
    """Metadata describing a saved plot."""

    path: Path
    metric: str
    points: int
    trend: Trend


def _axis_title(metric: str) -> str:
    return metric.replace("_", " ").title()


def _as_array(values: list[float | None]) -> np.ndarray:
    """Convert optional values to floats, leaving gaps as NaN so lines break."""
    return np.array([np.nan if value is None else value for value in values], dtype=float)


def generate_series_plot(
    series: ChartSeries,
    metric: str = "revenue",
    *,
    output_dir: str | Path = "out",
    filename: str = "series.png",
    config: SeriesPlotConfig | None = None,
) -> PlotReport:
    """Render one metric of a chart series, with the comparison overlay when present."""
    if not series.has_data:
        raise ValueError("Cannot plot a series without data points.")
    config = config or SeriesPlotConfig()
    out_dir = ensure_directory(output_dir)

    primary = np.asarray(series.values(metric), dtype=float)
    positions = np.arange(primary.size)
    labels = [point.label for point in series.points]

    fig, ax = plt.subplots(figsize=config.figsize)
    ax.plot(
        positions,
        primary,
        color=config.color,
        linewidth=config.line_width,
        marker=config.marker,
        label=str(series.window),
    )
    if series.comparison_window is not None:
        ax.plot(
            positions,
            _as_array(series.comparison_values(metric)),
            color=config.comparison_color,
            linewidth=config.line_width,
            linestyle="--",
            marker=config.marker,
            label=str(series.comparison_window),
        )

    if metric in PERCENT_METRICS:
        ax.yaxis.set_major_formatter(PercentFormatter(100))
    elif metric not in COUNT_METRICS:
        ax.yaxis.set_major_formatter(StrMethodFormatter("${x:,.0f}"))
    ax.set_xticks(positions)
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_title(config.title or f"{_axis_title(metric)} by Month")
    ax.set_xlabel(config.xlabel)
    ax.set_ylabel(config.ylabel or _axis_title(metric))

    ax.legend(loc="upper left")
    ax.grid(True, linestyle="--", linewidth=0.5, alpha=0.6)
    fig.tight_layout()

    output_path = out_dir / filename
    fig.savefig(output_path, dpi=config.dpi)
    plt.close(fig)
    return PlotReport(
        path=output_path,
        metric=metric,
        points=int(primary.size),
        trend=series.trend(metric),
    )


__all__ = ["PlotReport", "SeriesPlotConfig", "generate_series_plot"]
