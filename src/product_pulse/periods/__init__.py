"""Comparison-window calculation."""

from .windows import (
    AlignmentStrategy,
    ComparisonConfig,
    ComparisonMode,
    alignment_for,
    comparison_label,
    get_comparison_period,
    preceding_period,
    previous_year,
)

__all__ = [
    "AlignmentStrategy",
    "ComparisonConfig",
    "ComparisonMode",
    "alignment_for",
    "comparison_label",
    "get_comparison_period",
    "preceding_period",
    "previous_year",
]
