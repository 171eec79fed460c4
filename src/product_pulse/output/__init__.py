"""Visualization utilities for product analytics."""

from .plots import PlotReport, SeriesPlotConfig, generate_series_plot

__all__ = ["PlotReport", "SeriesPlotConfig", "generate_series_plot"]
