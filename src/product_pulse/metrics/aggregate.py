"""Reduction of record collections into derived business metrics."""

from collections.abc import Iterable, Sequence
from typing import TypeAlias, cast

import numpy as np
import numpy.typing as npt
from attrs import define

from ..data.models import Record

FloatArray: TypeAlias = npt.NDArray[np.float64]


def column(records: Sequence[Record], name: str) -> FloatArray:
    """Extract one numeric attribute of every record as a float array."""
    return cast(
        FloatArray,
        np.fromiter((getattr(record, name) for record in records), dtype=float, count=len(records)),
    )


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0.0 instead of inf/NaN when the denominator is not positive."""
    if denominator <= 0:
        return 0.0
    result = numerator / denominator
    return float(result) if np.isfinite(result) else 0.0


def positive_mean(values: FloatArray) -> float:
    """Mean over strictly positive entries only; zero when there are none."""
    positive = values[values > 0]
    if positive.size == 0:
        return 0.0
    return float(positive.mean())


@define(slots=True, frozen=True)
class DerivedMetrics:
    """Totals and ratios for a set of records."""

    total_revenue: float = 0.0
    total_ad_spend: float = 0.0
    total_costs: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0
    total_orders: float = 0.0
    avg_order_value: float = 0.0
    avg_cpa: float = 0.0
    adjusted_cpa: float = 0.0

    @property
    def is_profitable(self) -> bool:
        """Strictly positive profit; break-even is not profitable."""
        return self.profit > 0

    def to_dict(self) -> dict[str, float | bool]:
        return {
            "total_revenue": self.total_revenue,
            "total_ad_spend": self.total_ad_spend,
            "total_costs": self.total_costs,
            "profit": self.profit,
            "profit_margin": self.profit_margin,
            "total_orders": self.total_orders,
            "avg_order_value": self.avg_order_value,
            "avg_cpa": self.avg_cpa,
            "adjusted_cpa": self.adjusted_cpa,
            "is_profitable": self.is_profitable,
        }


def aggregate(records: Iterable[Record]) -> DerivedMetrics:
    """Compute :class:`DerivedMetrics` for ``records``.

    Every ratio falls back to zero when its denominator is zero, so the result
    is finite for any non-negative input, including an empty collection.
    CPA is ad spend per order; adjusted CPA averages only the rows that
    report a positive value.
    """
    rows = list(records)
    if not rows:
        return DerivedMetrics()

    revenue = float(column(rows, "revenue").sum())
    ad_spend = float(column(rows, "ad_spend").sum())
    costs = (
        ad_spend
        + float(column(rows, "non_ad_costs").sum())
        + float(column(rows, "third_party_costs").sum())
    )
    orders = float(column(rows, "orders").sum())
    profit = revenue - costs

    return DerivedMetrics(
        total_revenue=revenue,
        total_ad_spend=ad_spend,
        total_costs=costs,
        profit=profit,
        profit_margin=safe_divide(profit, revenue) * 100,
        total_orders=orders,
        avg_order_value=safe_divide(revenue, orders),
        avg_cpa=safe_divide(ad_spend, orders),
        adjusted_cpa=positive_mean(column(rows, "adjusted_cpa")),
    )


__all__ = ["DerivedMetrics", "aggregate", "column", "positive_mean", "safe_divide"]
