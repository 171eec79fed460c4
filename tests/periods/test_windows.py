"""Unit tests for comparison-window calculation."""

import pytest

from product_pulse.dates import TimeWindow
from product_pulse.periods import (
    AlignmentStrategy,
    ComparisonConfig,
    ComparisonMode,
    alignment_for,
    comparison_label,
    get_comparison_period,
    preceding_period,
    previous_year,
)


@pytest.mark.parametrize(
    "window, expected",
    [
        (TimeWindow("2025-04", "2025-06"), TimeWindow("2025-01", "2025-03")),
        (TimeWindow("2025-01", "2025-02"), TimeWindow("2024-11", "2024-12")),
        (TimeWindow("2025-03", "2025-03"), TimeWindow("2025-02", "2025-02")),
        (TimeWindow("2024-01", "2025-12"), TimeWindow("2022-01", "2023-12")),
    ],
)
def test_preceding_period(window, expected):
    result = preceding_period(window)
    assert result == expected
    assert result.length == window.length


def test_previous_year():
    assert previous_year(TimeWindow("2025-02", "2025-07")) == TimeWindow("2024-02", "2024-07")


def test_get_comparison_period():
    window = TimeWindow("2025-04", "2025-06")
    custom = TimeWindow("2023-01", "2023-12")
    assert get_comparison_period(window, ComparisonConfig.none()) is None
    assert get_comparison_period(window, ComparisonConfig.previous_year()) == TimeWindow(
        "2024-04", "2024-06"
    )
    assert get_comparison_period(window, ComparisonConfig.preceding_period()) == TimeWindow(
        "2025-01", "2025-03"
    )
    assert get_comparison_period(window, ComparisonConfig.custom(custom)) == custom


def test_comparison_config_validation():
    with pytest.raises(ValueError, match="custom_range"):
        ComparisonConfig(ComparisonMode.CUSTOM_RANGE)
    with pytest.raises(ValueError, match="only valid"):
        ComparisonConfig(ComparisonMode.PREVIOUS_YEAR, TimeWindow("2024-01", "2024-02"))
    assert ComparisonConfig("precedingPeriod").mode is ComparisonMode.PRECEDING_PERIOD


def test_alignment_and_labels():
    assert alignment_for(ComparisonConfig.none()) is None
    assert alignment_for(ComparisonConfig.previous_year()) is AlignmentStrategy.BY_CALENDAR_YEAR
    assert (
        alignment_for(ComparisonConfig.preceding_period())
        is AlignmentStrategy.BY_POSITIONAL_INDEX
    )
    custom = ComparisonConfig.custom(TimeWindow("2024-01", "2024-03"))
    assert alignment_for(custom) is AlignmentStrategy.BY_POSITIONAL_INDEX
    assert comparison_label(custom) == "Custom Range"
    assert comparison_label(ComparisonConfig.none()) == ""


def test_time_window_validation():
    with pytest.raises(ValueError, match="YYYY-MM"):
        TimeWindow("2025-3", "2025-06")
    assert TimeWindow.parse("2025-01:2025-03").months() == ["2025-01", "2025-02", "2025-03"]
    with pytest.raises(ValueError, match="START:END"):
        TimeWindow.parse("2025-01")
    assert TimeWindow("2025-06", "2025-01").length == 0


@pytest.mark.parametrize("bound", ["2025-13", "2025-00", "2025-1"])
def test_time_window_rejects_out_of_calendar_months(bound):
    with pytest.raises(ValueError, match="YYYY-MM"):
        TimeWindow("2025-01", bound)
