"""Derivation of comparison windows from a primary month window."""

import enum

from attrs import define, field

from ..dates.models import TimeWindow
from ..dates.months import format_month, month_span, parse_month, shift_month


class ComparisonMode(str, enum.Enum):
    """How the comparison window relates to the primary window."""

    NONE = "none"
    PREVIOUS_YEAR = "previousYear"
    PRECEDING_PERIOD = "precedingPeriod"
    CUSTOM_RANGE = "customRange"


class AlignmentStrategy(str, enum.Enum):
    """How chart points are paired with comparison values."""

    BY_CALENDAR_YEAR = "byCalendarYear"
    BY_POSITIONAL_INDEX = "byPositionalIndex"


@define(slots=True, frozen=True)
class ComparisonConfig:
    """Tagged comparison choice; only ``CUSTOM_RANGE`` carries a window."""

    mode: ComparisonMode = field(converter=ComparisonMode, default=ComparisonMode.NONE)
    custom_range: TimeWindow | None = None

    def __attrs_post_init__(self) -> None:
        if self.mode is ComparisonMode.CUSTOM_RANGE and self.custom_range is None:
            raise ValueError("A custom comparison requires an explicit custom_range.")
        if self.mode is not ComparisonMode.CUSTOM_RANGE and self.custom_range is not None:
            raise ValueError(f"custom_range is only valid for {ComparisonMode.CUSTOM_RANGE.value}.")

    @classmethod
    def none(cls) -> "ComparisonConfig":
        return cls(ComparisonMode.NONE)

    @classmethod
    def previous_year(cls) -> "ComparisonConfig":
        return cls(ComparisonMode.PREVIOUS_YEAR)

    @classmethod
    def preceding_period(cls) -> "ComparisonConfig":
        return cls(ComparisonMode.PRECEDING_PERIOD)

    @classmethod
    def custom(cls, window: TimeWindow) -> "ComparisonConfig":
        return cls(ComparisonMode.CUSTOM_RANGE, window)


def previous_year(window: TimeWindow) -> TimeWindow:
    """Same months, one year earlier."""
    start_year, start_month = parse_month(window.start)
    end_year, end_month = parse_month(window.end)
    return TimeWindow(
        format_month(start_year - 1, start_month),
        format_month(end_year - 1, end_month),
    )


def preceding_period(window: TimeWindow) -> TimeWindow:
    """The equally long window that ends the month before ``window.start``."""
    length = month_span(window.start, window.end)
    end = shift_month(window.start, -1)
    return TimeWindow(shift_month(end, -(length - 1)), end)


def get_comparison_period(window: TimeWindow, config: ComparisonConfig) -> TimeWindow | None:
    """Resolve the comparison window for ``config``; None when comparing nothing."""
    if config.mode is ComparisonMode.PREVIOUS_YEAR:
        return previous_year(window)
    if config.mode is ComparisonMode.PRECEDING_PERIOD:
        return preceding_period(window)
    if config.mode is ComparisonMode.CUSTOM_RANGE:
        return config.custom_range
    return None


def alignment_for(config: ComparisonConfig) -> AlignmentStrategy | None:
    """Alignment used when charting ``config``; calendar alignment only for year-over-year."""
    if config.mode is ComparisonMode.PREVIOUS_YEAR:
        return AlignmentStrategy.BY_CALENDAR_YEAR
    if config.mode in (ComparisonMode.PRECEDING_PERIOD, ComparisonMode.CUSTOM_RANGE):
        return AlignmentStrategy.BY_POSITIONAL_INDEX
    return None


COMPARISON_LABELS = {
    ComparisonMode.NONE: "",
    ComparisonMode.PREVIOUS_YEAR: "Previous Year",
    ComparisonMode.PRECEDING_PERIOD: "Preceding Period",
    ComparisonMode.CUSTOM_RANGE: "Custom Range",
}


def comparison_label(config: ComparisonConfig) -> str:
    return COMPARISON_LABELS[config.mode]


__all__ = [
    "AlignmentStrategy",
    "COMPARISON_LABELS",
    "ComparisonConfig",
    "ComparisonMode",
    "alignment_for",
    "comparison_label",
    "get_comparison_period",
    "preceding_period",
    "previous_year",
]
