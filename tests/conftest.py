"""Global test configuration and fixtures."""

from datetime import date

import pytest

from product_pulse.data.models import Dataset, Record
from product_pulse.dates import DateResolver, TimeWindow

ANCHOR = date(2025, 6, 15)
FIRST_QUARTER = ("2025-01", "2025-02", "2025-03")
SECOND_QUARTER = ("2025-04", "2025-05", "2025-06")


def build_record(**overrides) -> Record:
    """Return a record with sensible identity columns, overridden as needed."""
    values: dict[str, object] = {
        "id": "P1",
        "name": "Widget",
        "category": "Gadgets",
        "brand": "Acme",
        "month": "2025-01",
    }
    values.update(overrides)
    return Record(**values)


@pytest.fixture
def anchor() -> date:
    return ANCHOR


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def portfolio_dataset() -> Dataset:
    """Five products over the first half of 2025.

    * P1 is steady: 1000 revenue and 300 costs every month.
    * P2 drops from 1000 to 200 monthly profit between Q1 and Q2.
    * P3 mirrors P2 but sits in a kit category.
    * P4 only sells in Q2 and loses money.
    * P5 only appears in December 2024.
    """
    rows: list[Record] = []
    for month in FIRST_QUARTER:
        rows.append(
            build_record(
                id="P1", month=month, revenue=1000, ad_spend=200, non_ad_costs=100,
                orders=10, adjusted_cpa=20,
            )
        )
        rows.append(
            build_record(
                id="P2", name="Gizmo", month=month, revenue=2000, ad_spend=500,
                non_ad_costs=500, orders=20, adjusted_cpa=25,
            )
        )
        rows.append(
            build_record(
                id="P3", name="Starter Set", category="Starter Kit", month=month,
                revenue=2000, ad_spend=500, non_ad_costs=500, orders=20,
            )
        )
    for month in SECOND_QUARTER:
        rows.append(
            build_record(
                id="P1", month=month, revenue=1000, ad_spend=200, non_ad_costs=100,
                orders=10, adjusted_cpa=20,
            )
        )
        rows.append(
            build_record(
                id="P2", name="Gizmo", month=month, revenue=1000, ad_spend=400,
                non_ad_costs=400, orders=6,
            )
        )
        rows.append(
            build_record(
                id="P3", name="Starter Set", category="Starter Kit", month=month,
                revenue=1000, ad_spend=400, non_ad_costs=400, orders=6,
            )
        )
    for month in SECOND_QUARTER:
        rows.append(
            build_record(
                id="P4", name="Dud", category="Misc", month=month, revenue=100,
                ad_spend=150, orders=1,
            )
        )
    rows.append(build_record(id="P5", name="Ghost", category="Misc", month="2024-12", revenue=500))
    return Dataset(rows)


@pytest.fixture
def resolver(portfolio_dataset, anchor) -> DateResolver:
    return DateResolver(portfolio_dataset, anchor)


@pytest.fixture
def first_quarter() -> TimeWindow:
    return TimeWindow("2025-01", "2025-03")


@pytest.fixture
def second_quarter() -> TimeWindow:
    return TimeWindow("2025-04", "2025-06")
