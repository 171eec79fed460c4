"""Month-by-month chart series with optional comparison overlays."""

from collections.abc import Sequence

import structlog
from attrs import asdict, define, field, fields

from ..data.models import Record
from ..dates.models import TimeWindow
from ..dates.months import month_label, shift_month
from ..dates.resolver import DateResolver
from ..metrics.aggregate import DerivedMetrics, aggregate
from ..metrics.trends import Trend, calculate_trend
from ..periods.windows import (
    AlignmentStrategy,
    ComparisonConfig,
    alignment_for,
    get_comparison_period,
)

logger = structlog.get_logger(__name__)


@define(slots=True, frozen=True)
class MonthValues:
    """Aggregated values for one month of the charted scope."""

    revenue: float = 0.0
    ad_spend: float = 0.0
    total_cost: float = 0.0
    orders: float = 0.0
    adjusted_cpa: float = 0.0
    avg_order_value: float = 0.0
    avg_cpa: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0

    @classmethod
    def from_metrics(cls, metrics: DerivedMetrics) -> "MonthValues":
        return cls(
            revenue=metrics.total_revenue,
            ad_spend=metrics.total_ad_spend,
            total_cost=metrics.total_costs,
            orders=metrics.total_orders,
            adjusted_cpa=metrics.adjusted_cpa,
            avg_order_value=metrics.avg_order_value,
            avg_cpa=metrics.avg_cpa,
            profit=metrics.profit,
            profit_margin=metrics.profit_margin,
        )


METRICS: tuple[str, ...] = tuple(attribute.name for attribute in fields(MonthValues))


def _check_metric(metric: str) -> str:
    if metric not in METRICS:
        valid = ", ".join(METRICS)
        raise ValueError(f"Unknown metric {metric!r}. Choose one of: {valid}.")
    return metric


@define(slots=True, frozen=True)
class ChartPoint:
    month: str
    label: str
    values: MonthValues
    comparison_month: str | None = None
    comparison: MonthValues | None = None


@define(slots=True, frozen=True)
class ChartSeries:
    """Ordered chart points for a primary window plus the comparison metadata."""

    window: TimeWindow
    points: tuple[ChartPoint, ...] = field(converter=tuple, factory=tuple)
    comparison_window: TimeWindow | None = None
    alignment: AlignmentStrategy | None = None

    @property
    def has_data(self) -> bool:
        return bool(self.points)

    @property
    def months(self) -> list[str]:
        return [point.month for point in self.points]

    def values(self, metric: str) -> list[float]:
        """Primary values of ``metric`` in month order."""
        _check_metric(metric)
        return [getattr(point.values, metric) for point in self.points]

    def comparison_values(self, metric: str) -> list[float | None]:
        """Comparison values of ``metric``; None where a point has no counterpart."""
        _check_metric(metric)
        return [
            getattr(point.comparison, metric) if point.comparison is not None else None
            for point in self.points
        ]

    def trend(self, metric: str) -> Trend:
        return calculate_trend(self.values(metric))

    def to_rows(self) -> list[dict[str, object]]:
        """Flatten the series into one dict per month, ready for export."""
        rows: list[dict[str, object]] = []
        for point in self.points:
            row: dict[str, object] = {"month": point.month, "label": point.label}
            row.update(asdict(point.values))
            if self.comparison_window is not None:
                row["comparison_month"] = point.comparison_month
                for metric in METRICS:
                    row[f"comparison_{metric}"] = (
                        getattr(point.comparison, metric) if point.comparison is not None else None
                    )
            rows.append(row)
        return rows


@define(slots=True)
class ChartSeriesBuilder:
    """Build :class:`ChartSeries` objects from a resolver's dataset."""

    resolver: DateResolver

    def _monthly(self, window: TimeWindow, scope: Sequence[Record]) -> dict[str, MonthValues]:
        grouped = self.resolver.records_by_month(window, scope)
        return {month: MonthValues.from_metrics(aggregate(rows)) for month, rows in grouped.items()}

    def build(
        self,
        window: TimeWindow,
        comparison: ComparisonConfig | None = None,
        product_id: str | None = None,
    ) -> ChartSeries:
        """Aggregate ``window`` month by month and attach comparison values.

        Year-over-year comparisons pair each month with the same month one
        year earlier. Preceding and custom comparisons pair points by
        position, so a shorter comparison window leaves trailing points
        without a counterpart.
        """
        comparison = comparison or ComparisonConfig.none()
        dataset = self.resolver.dataset
        scope = dataset.product_records(product_id) if product_id else dataset.records

        primary = self._monthly(window, scope)
        comparison_window = get_comparison_period(window, comparison)
        alignment = alignment_for(comparison)

        paired: list[tuple[str | None, MonthValues | None]]
        if comparison_window is None:
            paired = [(None, None)] * len(primary)
        elif alignment is AlignmentStrategy.BY_CALENDAR_YEAR:
            previous = self._monthly(comparison_window, scope)
            paired = []
            for month in primary:
                counterpart = shift_month(month, -12)
                paired.append((counterpart, previous.get(counterpart)))
        else:
            ordered = list(self._monthly(comparison_window, scope).items())
            paired = [
                ordered[index] if index < len(ordered) else (None, None)
                for index in range(len(primary))
            ]

        points = [
            ChartPoint(
                month=month,
                label=month_label(month),
                values=values,
                comparison_month=counterpart_month,
                comparison=counterpart,
            )
            for (month, values), (counterpart_month, counterpart) in zip(
                primary.items(), paired, strict=True
            )
        ]
        series = ChartSeries(
            window=window,
            points=points,
            comparison_window=comparison_window,
            alignment=alignment,
        )
        logger.debug(
            "series.built",
            window=str(window),
            comparison=comparison.mode.value,
            product_id=product_id,
            points=len(points),
        )
        return series


__all__ = ["ChartPoint", "ChartSeries", "ChartSeriesBuilder", "METRICS", "MonthValues"]
