"""Unit tests for chart series construction."""

import pytest

from product_pulse.data.models import Dataset
from product_pulse.dates import DateResolver, TimeWindow
from product_pulse.periods import AlignmentStrategy, ComparisonConfig
from product_pulse.series import ChartSeriesBuilder


@pytest.fixture
def builder(resolver):
    return ChartSeriesBuilder(resolver)


def test_build_without_comparison(builder, second_quarter):
    series = builder.build(second_quarter)
    assert series.has_data
    assert series.months == ["2025-04", "2025-05", "2025-06"]
    assert [point.label for point in series.points] == ["Apr 2025", "May 2025", "Jun 2025"]
    assert series.values("revenue") == [3100, 3100, 3100]
    assert series.values("total_cost") == [2050, 2050, 2050]
    assert series.comparison_window is None
    assert series.alignment is None
    assert series.comparison_values("revenue") == [None, None, None]
    assert "comparison_revenue" not in series.to_rows()[0]


def test_build_for_single_product(builder, second_quarter):
    series = builder.build(second_quarter, product_id="P4")
    assert series.values("revenue") == [100, 100, 100]
    assert series.values("profit") == [-50, -50, -50]
    assert series.values("avg_cpa") == [150, 150, 150]


def test_preceding_period_pairs_by_position(builder, second_quarter):
    series = builder.build(second_quarter, ComparisonConfig.preceding_period())
    assert series.comparison_window == TimeWindow("2025-01", "2025-03")
    assert series.alignment is AlignmentStrategy.BY_POSITIONAL_INDEX
    assert series.comparison_values("revenue") == [5000, 5000, 5000]
    assert [point.comparison_month for point in series.points] == [
        "2025-01",
        "2025-02",
        "2025-03",
    ]


def test_custom_range_leaves_surplus_points_empty(builder, second_quarter):
    custom = ComparisonConfig.custom(TimeWindow("2025-01", "2025-02"))
    series = builder.build(second_quarter, custom)
    assert series.comparison_values("revenue") == [5000, 5000, None]
    rows = series.to_rows()
    assert rows[2]["comparison_month"] is None
    assert rows[2]["comparison_revenue"] is None
    assert rows[0]["comparison_revenue"] == 5000


def test_previous_year_aligns_by_calendar(make_record, anchor):
    records = [
        make_record(month="2024-03", revenue=400),
        make_record(month="2025-03", revenue=500),
        make_record(month="2025-04", revenue=600),
    ]
    builder = ChartSeriesBuilder(DateResolver(Dataset(records), anchor))
    series = builder.build(TimeWindow("2025-03", "2025-04"), ComparisonConfig.previous_year())
    assert series.alignment is AlignmentStrategy.BY_CALENDAR_YEAR
    assert series.comparison_window == TimeWindow("2024-03", "2024-04")
    assert series.comparison_values("revenue") == [400, None]
    assert [point.comparison_month for point in series.points] == ["2024-03", "2024-04"]


def test_bare_months_are_charted_in_calendar_order(make_record, anchor):
    records = [
        make_record(month="5", revenue=300),
        make_record(month="11", revenue=100),
        make_record(month="2", revenue=200),
    ]
    builder = ChartSeriesBuilder(DateResolver(Dataset(records), anchor))
    series = builder.build(TimeWindow("2024-01", "2025-12"))
    assert series.months == ["2024-11", "2025-02", "2025-05"]
    trend = series.trend("revenue")
    assert trend.direction == "up"
    assert trend.percent == pytest.approx(50.0)


def test_empty_window(builder):
    series = builder.build(TimeWindow("2020-01", "2020-12"), ComparisonConfig.previous_year())
    assert not series.has_data
    assert series.to_rows() == []


def test_unknown_metric(builder, second_quarter):
    series = builder.build(second_quarter)
    with pytest.raises(ValueError, match="Unknown metric"):
        series.values("margin")
