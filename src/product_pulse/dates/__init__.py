"""Month-label normalization and dataset-wide year inference."""

from .cache import AnalysisCache, MemoryAnalysisCache, NullAnalysisCache, analysis_key
from .models import Confidence, DateAnalysis, TimeWindow
from .months import format_month, month_label, month_range, month_span, parse_month, shift_month
from .resolver import DEFAULT_RANGE, DateResolver, analyze_dates, normalize_month

__all__ = [
    "AnalysisCache",
    "Confidence",
    "DEFAULT_RANGE",
    "DateAnalysis",
    "DateResolver",
    "MemoryAnalysisCache",
    "NullAnalysisCache",
    "TimeWindow",
    "analysis_key",
    "analyze_dates",
    "format_month",
    "month_label",
    "month_range",
    "month_span",
    "normalize_month",
    "parse_month",
    "shift_month",
]
