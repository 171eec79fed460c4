"""Chart series construction for the month-by-month views."""

from .builder import METRICS, ChartPoint, ChartSeries, ChartSeriesBuilder, MonthValues

__all__ = ["ChartPoint", "ChartSeries", "ChartSeriesBuilder", "METRICS", "MonthValues"]
