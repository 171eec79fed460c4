"""Derived metrics over record collections."""

from .aggregate import DerivedMetrics, aggregate, positive_mean, safe_divide
from .performance import PerformanceRow, performance_rows
from .timeseries import (
    Forecast,
    MonthlyChange,
    Seasonality,
    TimeSeriesAnalysis,
    analyze_time_series,
    forecast_next_month,
)
from .trends import Change, Trend, calculate_change, calculate_trend, overall_trend

__all__ = [
    "Change",
    "DerivedMetrics",
    "Forecast",
    "MonthlyChange",
    "PerformanceRow",
    "Seasonality",
    "TimeSeriesAnalysis",
    "Trend",
    "aggregate",
    "analyze_time_series",
    "calculate_change",
    "calculate_trend",
    "forecast_next_month",
    "overall_trend",
    "performance_rows",
    "positive_mean",
    "safe_divide",
]
