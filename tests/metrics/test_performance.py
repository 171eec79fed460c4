"""Unit tests for per-month performance rows."""

import pytest

from product_pulse.data.models import Dataset
from product_pulse.dates import DateResolver
from product_pulse.metrics import performance_rows
from product_pulse.metrics.performance import rate


def test_rate():
    assert rate(300, 1000) == "excellent"
    assert rate(100, 1000) == "good"
    assert rate(0, 1000) == "poor"
    assert rate(-5, 0) == "poor"


def test_performance_rows_are_sorted_and_trended(make_record, anchor):
    records = [
        make_record(month="5", revenue=1500, ad_spend=300, orders=15, cpa=20),
        make_record(month="3", revenue=1000, ad_spend=300, orders=10, cpa=30),
        make_record(month="4", revenue=400, ad_spend=500, orders=4, cpa=125),
    ]
    resolver = DateResolver(Dataset(records), anchor)
    rows = performance_rows(records, resolver)

    assert [row.month for row in rows] == ["2025-03", "2025-04", "2025-05"]
    assert [row.label for row in rows] == ["Mar 2025", "Apr 2025", "May 2025"]
    assert [row.trend for row in rows] == ["stable", "declining", "improving"]
    assert [row.rating for row in rows] == ["excellent", "poor", "excellent"]
    assert rows[1].profit == -100
    assert rows[1].is_profitable is False
    assert rows[0].to_dict()["profit_margin"] == pytest.approx(70.0)
