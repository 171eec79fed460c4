"""Time-series view of monthly totals: deltas, direction, seasonality and a forecast.

Month-to-month changes compare consecutive months that have data, so a gap
in the upload is skipped rather than treated as a zero month. Directions
compare the mean of the last three months against the mean of the first
three, with a 5% dead band around the earlier value.
"""

from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Literal

import numpy as np
import structlog
from attrs import asdict, define, field

from ..dates.models import TimeWindow
from ..dates.months import parse_month, shift_month
from ..dates.resolver import DateResolver
from .aggregate import DerivedMetrics, aggregate, safe_divide
from .trends import calculate_change

logger = structlog.get_logger(__name__)

Direction = Literal["up", "down", "stable"]
Momentum = Literal["accelerating", "decelerating", "steady"]
ForecastConfidence = Literal["high", "medium", "low"]

DIRECTION_BAND = 0.05
TREND_SPAN = 3
SEASONALITY_RATIO = 1.3
FORECAST_DAMPING = 0.7
# Variance of the recent month-to-month percentages, in squared points.
CONFIDENCE_LIMITS: tuple[tuple[float, ForecastConfidence], ...] = (
    (100.0, "high"),
    (400.0, "medium"),
)


@define(slots=True, frozen=True)
class MonthlyChange:
    """Revenue of ``month`` against a reference month."""

    month: str
    current: float
    previous: float
    change: float
    change_percent: float


@define(slots=True, frozen=True)
class Seasonality:
    monthly_averages: dict[int, float] = field(factory=dict)
    best_months: tuple[int, ...] = field(converter=tuple, factory=tuple)
    worst_months: tuple[int, ...] = field(converter=tuple, factory=tuple)
    is_seasonal: bool = False


@define(slots=True, frozen=True)
class TimeSeriesAnalysis:
    """Month-level revenue movement inside one window."""

    window: TimeWindow
    month_to_month: tuple[MonthlyChange, ...] = field(converter=tuple, factory=tuple)
    year_over_year: tuple[MonthlyChange, ...] = field(converter=tuple, factory=tuple)
    revenue_direction: Direction = "stable"
    profit_direction: Direction = "stable"
    efficiency_direction: Direction = "stable"
    momentum: Momentum = "steady"
    seasonality: Seasonality = field(factory=Seasonality)

    @property
    def months(self) -> list[str]:
        return [change.month for change in self.month_to_month]

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@define(slots=True, frozen=True)
class Forecast:
    month: str | None
    revenue: float
    confidence: ForecastConfidence
    change_variance: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def direction(recent: float, earlier: float, *, lower_is_better: bool = False) -> Direction:
    """Classify ``recent`` against ``earlier`` with a 5% band around ``earlier``.

    For cost ratios such as CPA set ``lower_is_better`` so that a falling
    value reads as ``"up"``.
    """
    if lower_is_better:
        recent, earlier = -recent, -earlier
    band = abs(earlier) * DIRECTION_BAND
    if recent > earlier + band:
        return "up"
    if recent < earlier - band:
        return "down"
    return "stable"


def _edge_direction(values: Sequence[float], *, lower_is_better: bool = False) -> Direction:
    if not values:
        return "stable"
    series = np.asarray(values, dtype=float)
    earlier = float(series[:TREND_SPAN].mean())
    recent = float(series[-TREND_SPAN:].mean())
    return direction(recent, earlier, lower_is_better=lower_is_better)


def momentum(change_percents: Sequence[float]) -> Momentum:
    """Shape of the last three month-to-month percentages."""
    recent = np.asarray(change_percents[-TREND_SPAN:], dtype=float)
    if recent.size < 2:
        return "steady"
    steps = np.diff(recent)
    if np.all(steps >= 0):
        return "accelerating"
    if np.all(steps <= 0):
        return "decelerating"
    return "steady"


def forecast_confidence(variance: float) -> ForecastConfidence:
    for limit, label in CONFIDENCE_LIMITS:
        if variance < limit:
            return label
    return "low"


def monthly_metrics(
    resolver: DateResolver,
    window: TimeWindow,
    product_id: str | None = None,
) -> dict[str, DerivedMetrics]:
    """Aggregate the scope month by month inside ``window``."""
    dataset = resolver.dataset
    scope = dataset.product_records(product_id) if product_id else dataset.records
    grouped = resolver.records_by_month(window, scope)
    return {month: aggregate(rows) for month, rows in grouped.items()}


def seasonality(monthly: Mapping[str, DerivedMetrics]) -> Seasonality:
    """Average revenue per calendar month across every year present.

    ``worst_months`` lists the weakest month first.
    """
    by_calendar_month: dict[int, list[float]] = defaultdict(list)
    for month, metrics in monthly.items():
        by_calendar_month[parse_month(month)[1]].append(metrics.total_revenue)
    if not by_calendar_month:
        return Seasonality()

    averages = {
        number: float(np.mean(values)) for number, values in sorted(by_calendar_month.items())
    }
    ranked = sorted(averages, key=lambda number: (-averages[number], number))
    highest, lowest = averages[ranked[0]], averages[ranked[-1]]
    return Seasonality(
        monthly_averages=averages,
        best_months=ranked[:TREND_SPAN],
        worst_months=ranked[::-1][:TREND_SPAN],
        is_seasonal=highest > lowest * SEASONALITY_RATIO,
    )


def _month_to_month(monthly: Mapping[str, DerivedMetrics]) -> list[MonthlyChange]:
    changes: list[MonthlyChange] = []
    previous = 0.0
    for month, metrics in monthly.items():
        current = metrics.total_revenue
        delta = calculate_change(current, previous)
        changes.append(
            MonthlyChange(
                month=month,
                current=current,
                previous=previous,
                change=delta.absolute,
                change_percent=delta.percentage if previous > 0 else 0.0,
            )
        )
        previous = current
    return changes


def _year_over_year(
    monthly: Mapping[str, DerivedMetrics],
    history: Mapping[str, DerivedMetrics],
) -> list[MonthlyChange]:
    changes: list[MonthlyChange] = []
    for month, metrics in monthly.items():
        counterpart = history.get(shift_month(month, -12))
        previous = counterpart.total_revenue if counterpart is not None else 0.0
        delta = calculate_change(metrics.total_revenue, previous)
        changes.append(
            MonthlyChange(
                month=month,
                current=metrics.total_revenue,
                previous=previous,
                change=delta.absolute,
                change_percent=delta.percentage if previous > 0 else 0.0,
            )
        )
    return changes


def analyze_time_series(
    resolver: DateResolver,
    window: TimeWindow,
    product_id: str | None = None,
) -> TimeSeriesAnalysis:
    """Analyse revenue, profit and CPA movement month by month inside ``window``.

    Year-over-year counterparts and seasonality draw on every month of the
    scope, not only the window.
    """
    monthly = monthly_metrics(resolver, window, product_id)
    history = monthly_metrics(resolver, resolver.detected_range(), product_id)

    month_to_month = _month_to_month(monthly)
    rows = list(monthly.values())
    analysis = TimeSeriesAnalysis(
        window=window,
        month_to_month=month_to_month,
        year_over_year=_year_over_year(monthly, history),
        revenue_direction=_edge_direction([row.total_revenue for row in rows]),
        profit_direction=_edge_direction([row.profit for row in rows]),
        efficiency_direction=_edge_direction(
            [safe_divide(row.total_costs, row.total_orders) for row in rows],
            lower_is_better=True,
        ),
        momentum=momentum([change.change_percent for change in month_to_month]),
        seasonality=seasonality(history),
    )
    logger.debug(
        "timeseries.analyzed",
        window=str(window),
        product_id=product_id,
        months=len(month_to_month),
        revenue_direction=analysis.revenue_direction,
        momentum=analysis.momentum,
    )
    return analysis


def forecast_next_month(analysis: TimeSeriesAnalysis) -> Forecast:
    """Project next month's revenue from the last three months.

    The recent mean is nudged by 70% of the latest month-to-month change.
    Confidence falls as the recent percentage changes spread out.
    """
    if not analysis.month_to_month:
        return Forecast(month=None, revenue=0.0, confidence="low")

    recent = analysis.month_to_month[-TREND_SPAN:]
    revenues = np.array([change.current for change in recent], dtype=float)
    percents = np.array([change.change_percent for change in recent], dtype=float)
    latest = float(percents[-1])
    revenue = float(revenues.mean()) * (1 + latest / 100 * FORECAST_DAMPING)
    variance = float(np.var(percents))
    return Forecast(
        month=shift_month(recent[-1].month, 1),
        revenue=revenue,
        confidence=forecast_confidence(variance),
        change_variance=variance,
    )


__all__ = [
    "Forecast",
    "MonthlyChange",
    "Seasonality",
    "TimeSeriesAnalysis",
    "analyze_time_series",
    "direction",
    "forecast_confidence",
    "forecast_next_month",
    "momentum",
    "monthly_metrics",
    "seasonality",
]
