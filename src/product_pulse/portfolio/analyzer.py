"""Per-product and portfolio-wide rollups, rankings and decline detection."""

from collections import defaultdict
from collections.abc import Iterable, Sequence

import structlog
from attrs import asdict, define, evolve, field

from ..data.models import ProductInfo, Record
from ..dates.models import TimeWindow
from ..dates.months import parse_month
from ..dates.resolver import DateResolver
from ..metrics.aggregate import DerivedMetrics, aggregate
from ..metrics.trends import calculate_change
from ..periods.windows import preceding_period

logger = structlog.get_logger(__name__)


def _terms(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(value.lower() for value in values)


@define(slots=True, frozen=True)
class DeclineCriteria:
    """Thresholds used by decline detection and concentration reporting."""

    min_previous_profit: float = 500.0
    min_current_orders: float = 5.0
    min_decline_ratio: float = 0.20
    excluded_category_terms: tuple[str, ...] = field(
        converter=_terms, default=("package", "bundle", "kit")
    )
    concentration_top_n: int = 5

    def is_excluded(self, category: str) -> bool:
        """Bundles and kits swing with their components, so they are skipped."""
        lowered = category.lower()
        return any(term in lowered for term in self.excluded_category_terms)


@define(slots=True, frozen=True, kw_only=True)
class ProductMetrics:
    """Window rollup for one product."""

    id: str
    name: str
    category: str
    brand: str
    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0
    orders: float = 0.0
    avg_order_value: float = 0.0
    avg_cpa: float = 0.0
    adjusted_cpa: float = 0.0
    previous_period_profit: float | None = None
    profit_decline: float | None = None
    profit_decline_percentage: float | None = None

    @classmethod
    def from_metrics(cls, product: ProductInfo, metrics: DerivedMetrics) -> "ProductMetrics":
        return cls(
            id=product.id,
            name=product.name,
            category=product.category,
            brand=product.brand,
            revenue=metrics.total_revenue,
            costs=metrics.total_costs,
            profit=metrics.profit,
            profit_margin=metrics.profit_margin,
            orders=metrics.total_orders,
            avg_order_value=metrics.avg_order_value,
            avg_cpa=metrics.avg_cpa,
            adjusted_cpa=metrics.adjusted_cpa,
        )

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@define(slots=True, frozen=True)
class PerformanceDistribution:
    """Product counts by profitability.

    The buckets are disjoint: ``profitable`` needs positive profit,
    ``unprofitable`` negative profit with revenue, ``breakeven`` zero profit
    with revenue and ``inactive`` covers products without revenue.
    """

    profitable: int = 0
    unprofitable: int = 0
    breakeven: int = 0
    inactive: int = 0
    total: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@define(slots=True, frozen=True)
class PortfolioMetrics:
    total_revenue: float = 0.0
    total_costs: float = 0.0
    total_profit: float = 0.0
    profit_margin: float = 0.0
    total_orders: float = 0.0
    avg_order_value: float = 0.0
    total_products: int = 0
    profitable_products: int = 0
    portfolio_adjusted_cpa: float = 0.0
    revenue_concentration: float = 0.0

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


@define(slots=True, frozen=True)
class ProductSummary:
    """Single-product headline figures with growth against the preceding period."""

    product: ProductInfo | None
    window: TimeWindow
    comparison_window: TimeWindow
    metrics: DerivedMetrics
    growth: float = 0.0
    growth_label: str = "vs previous period"

    def to_dict(self) -> dict[str, object]:
        return {
            "product": asdict(self.product) if self.product else None,
            "window": {"start": self.window.start, "end": self.window.end},
            "comparison_window": {
                "start": self.comparison_window.start,
                "end": self.comparison_window.end,
            },
            "metrics": self.metrics.to_dict(),
            "growth": self.growth,
            "growth_label": self.growth_label,
        }


def _top(rows: Sequence[ProductMetrics], limit: int) -> list[ProductMetrics]:
    return list(rows[: max(limit, 0)])


@define(slots=True)
class PortfolioAnalyzer:
    """Rankings and rollups over every product in the resolver's dataset."""

    resolver: DateResolver
    criteria: DeclineCriteria = field(factory=DeclineCriteria)

    def _rollup(self, records: Iterable[Record]) -> list[ProductMetrics]:
        grouped: dict[str, list[Record]] = defaultdict(list)
        for record in records:
            grouped[record.id].append(record)
        return [
            ProductMetrics.from_metrics(product, aggregate(grouped.get(product.id, ())))
            for product in self.resolver.dataset.unique_products()
        ]

    def product_metrics(self, window: TimeWindow) -> list[ProductMetrics]:
        """One row per product, including products with no activity in ``window``."""
        return self._rollup(self.resolver.filter_records(window))

    def top_products(self, window: TimeWindow, limit: int = 5) -> list[ProductMetrics]:
        rows = sorted(self.product_metrics(window), key=lambda row: row.revenue, reverse=True)
        return _top(rows, limit)

    def top_products_by_profit(self, window: TimeWindow, limit: int = 5) -> list[ProductMetrics]:
        active = [row for row in self.product_metrics(window) if row.revenue > 0]
        return _top(sorted(active, key=lambda row: row.profit, reverse=True), limit)

    def top_products_by_margin(self, window: TimeWindow, limit: int = 5) -> list[ProductMetrics]:
        active = [row for row in self.product_metrics(window) if row.revenue > 0]
        return _top(sorted(active, key=lambda row: row.profit_margin, reverse=True), limit)

    def bottom_performers(self, window: TimeWindow, limit: int = 5) -> list[ProductMetrics]:
        active = [row for row in self.product_metrics(window) if row.revenue > 0]
        return _top(sorted(active, key=lambda row: row.profit_margin), limit)

    def revenue_concentration(
        self,
        window: TimeWindow,
        rows: Sequence[ProductMetrics] | None = None,
    ) -> float:
        """Share of window revenue, in percent, earned by the top products."""
        rows = self.product_metrics(window) if rows is None else rows
        total = sum(row.revenue for row in rows)
        if total <= 0:
            return 0.0
        ranked = sorted(rows, key=lambda row: row.revenue, reverse=True)
        top = sum(row.revenue for row in ranked[: self.criteria.concentration_top_n])
        return top / total * 100

    def declined_products(self, window: TimeWindow, limit: int = 5) -> list[ProductMetrics]:
        """Products whose profit fell sharply against the preceding equal-length window.

        A product qualifies when its previous profit was material, it still
        has order volume, and its profit fell by more than the configured ratio.
        """
        criteria = self.criteria
        previous_window = preceding_period(window)
        current_rows = self.product_metrics(window)
        previous_profit = {row.id: row.profit for row in self.product_metrics(previous_window)}

        declined: list[ProductMetrics] = []
        for row in current_rows:
            if criteria.is_excluded(row.category):
                continue
            before = previous_profit.get(row.id, 0.0)
            if before <= criteria.min_previous_profit:
                continue
            if row.orders < criteria.min_current_orders or row.profit >= before:
                continue
            decline = before - row.profit
            if decline / before <= criteria.min_decline_ratio:
                continue
            declined.append(
                evolve(
                    row,
                    previous_period_profit=before,
                    profit_decline=decline,
                    profit_decline_percentage=decline / before * 100,
                )
            )

        declined.sort(key=lambda row: row.profit_decline or 0.0, reverse=True)
        logger.debug(
            "portfolio.declines",
            window=str(window),
            previous_window=str(previous_window),
            qualifying=len(declined),
        )
        return _top(declined, limit)

    def performance_distribution(self, window: TimeWindow) -> PerformanceDistribution:
        rows = self.product_metrics(window)
        profitable = sum(1 for row in rows if row.profit > 0)
        unprofitable = sum(1 for row in rows if row.profit < 0 and row.revenue > 0)
        breakeven = sum(1 for row in rows if row.profit == 0 and row.revenue > 0)
        inactive = sum(1 for row in rows if row.revenue <= 0 and row.profit <= 0)
        return PerformanceDistribution(
            profitable=profitable,
            unprofitable=unprofitable,
            breakeven=breakeven,
            inactive=inactive,
            total=len(rows),
        )

    def portfolio_metrics(self, window: TimeWindow) -> PortfolioMetrics:
        """Headline totals for the whole portfolio within ``window``."""
        records = self.resolver.filter_records(window)
        totals = aggregate(records)
        rows = self._rollup(records)
        return PortfolioMetrics(
            total_revenue=totals.total_revenue,
            total_costs=totals.total_costs,
            total_profit=totals.profit,
            profit_margin=totals.profit_margin,
            total_orders=totals.total_orders,
            avg_order_value=totals.avg_order_value,
            total_products=len(rows),
            profitable_products=sum(1 for row in rows if row.profit > 0),
            portfolio_adjusted_cpa=totals.adjusted_cpa,
            revenue_concentration=self.revenue_concentration(window, rows),
        )

    def product_summary(self, product_id: str, window: TimeWindow) -> ProductSummary:
        """Headline metrics for one product plus revenue growth vs the preceding period."""
        dataset = self.resolver.dataset
        product = next((info for info in dataset.unique_products() if info.id == product_id), None)
        history = dataset.product_records(product_id)
        previous_window = preceding_period(window)
        current = self.resolver.filter_records(window, history)
        metrics = aggregate(current)
        summary = ProductSummary(
            product=product,
            window=window,
            comparison_window=previous_window,
            metrics=metrics,
        )
        if not current:
            return summary

        previous = self.resolver.filter_records(previous_window, history)
        if not previous:
            return evolve(summary, growth_label="vs previous period (no data)")
        previous_revenue = aggregate(previous).total_revenue
        if previous_revenue == 0:
            return summary

        growth = calculate_change(metrics.total_revenue, previous_revenue).percentage
        crosses_year = parse_month(previous_window.start)[0] != parse_month(window.start)[0]
        label = "vs same period last year" if crosses_year else "vs previous period"
        return evolve(summary, growth=growth, growth_label=label)


__all__ = [
    "DeclineCriteria",
    "PerformanceDistribution",
    "PortfolioAnalyzer",
    "PortfolioMetrics",
    "ProductMetrics",
    "ProductSummary",
]
