"""Month-by-month performance rows for a single product's table view."""

from collections.abc import Iterable
from typing import Literal

from attrs import asdict, define

from ..data.models import Record
from ..dates.months import month_label
from ..dates.resolver import DateResolver
from .aggregate import safe_divide
from .trends import OverallTrend, overall_trend

Rating = Literal["excellent", "good", "poor"]

# Profit above this share of revenue rates a month as excellent.
EXCELLENT_MARGIN = 0.2


@define(slots=True, frozen=True)
class PerformanceRow:
    month: str
    label: str
    revenue: float
    ad_spend: float
    non_ad_costs: float
    third_party_costs: float
    total_costs: float
    profit: float
    profit_margin: float
    orders: float
    cpa: float
    adjusted_cpa: float
    average_sale: float
    is_profitable: bool
    rating: Rating
    trend: OverallTrend

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def rate(profit: float, revenue: float) -> Rating:
    if profit > revenue * EXCELLENT_MARGIN:
        return "excellent"
    if profit > 0:
        return "good"
    return "poor"


def performance_rows(records: Iterable[Record], resolver: DateResolver) -> list[PerformanceRow]:
    """One row per record, oldest month first, each trended against the row before it."""
    ordered = sorted(records, key=lambda record: resolver.normalize(record.month))
    rows: list[PerformanceRow] = []
    previous: dict[str, float] | None = None
    for record in ordered:
        month = resolver.normalize(record.month)
        profit = record.profit
        margin = safe_divide(profit, record.revenue) * 100
        snapshot = {
            "revenue": record.revenue,
            "profit": profit,
            "profit_margin": margin,
            "orders": record.orders,
            "cpa": record.cpa,
            "adjusted_cpa": record.adjusted_cpa,
        }
        rows.append(
            PerformanceRow(
                month=month,
                label=month_label(month),
                revenue=record.revenue,
                ad_spend=record.ad_spend,
                non_ad_costs=record.non_ad_costs,
                third_party_costs=record.third_party_costs,
                total_costs=record.total_costs,
                profit=profit,
                profit_margin=margin,
                orders=record.orders,
                cpa=record.cpa,
                adjusted_cpa=record.adjusted_cpa,
                average_sale=record.average_sale,
                is_profitable=profit > 0,
                rating=rate(profit, record.revenue),
                trend=overall_trend(snapshot, previous),
            )
        )
        previous = snapshot
    return rows


__all__ = ["PerformanceRow", "performance_rows", "rate"]
