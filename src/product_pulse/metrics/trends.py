"""Change and trend helpers shared by summaries, tables and charts."""

from collections.abc import Mapping, Sequence
from typing import Literal

from attrs import define

TrendDirection = Literal["up", "down"]
OverallTrend = Literal["improving", "declining", "stable"]

# (metric, weight, lower_is_better)
TREND_WEIGHTS: tuple[tuple[str, int, bool], ...] = (
    ("revenue", 3, False),
    ("profit", 3, False),
    ("profit_margin", 2, False),
    ("orders", 2, False),
    ("cpa", 1, True),
    ("adjusted_cpa", 1, True),
)
CHANGE_THRESHOLD = 0.02


@define(slots=True, frozen=True)
class Change:
    absolute: float
    percentage: float


@define(slots=True, frozen=True)
class Trend:
    direction: TrendDirection
    percent: float


def calculate_change(current: float, previous: float) -> Change:
    """Absolute and percentage change; the percentage is 0 when ``previous`` is 0."""
    absolute = current - previous
    percentage = (absolute / previous) * 100 if previous != 0 else 0.0
    return Change(absolute=absolute, percentage=percentage)


def calculate_trend(values: Sequence[float]) -> Trend:
    """Direction and size of the move between the last two values."""
    if len(values) < 2:
        return Trend(direction="up", percent=0.0)
    current, previous = values[-1], values[-2]
    direction: TrendDirection = "up" if current > previous else "down"
    percent = abs((current - previous) / previous * 100) if previous > 0 else 0.0
    return Trend(direction=direction, percent=percent)


def overall_trend(
    current: Mapping[str, float],
    previous: Mapping[str, float] | None,
) -> OverallTrend:
    """Weighted vote across key metrics between two consecutive periods.

    Moves under 2% are ignored. Revenue and profit weigh most; for the CPA
    metrics a decrease counts as an improvement. Changes are relative to the
    magnitude of the previous value, so a loss shrinking toward profit
    reads as an improvement.
    """
    if previous is None:
        return "stable"

    positive = 0
    total = 0
    for metric, weight, lower_is_better in TREND_WEIGHTS:
        before = previous.get(metric, 0.0)
        if before == 0:
            continue
        change = (current.get(metric, 0.0) - before) / abs(before)
        if abs(change) <= CHANGE_THRESHOLD:
            continue
        improved = change < 0 if lower_is_better else change > 0
        if improved:
            positive += weight
        total += weight

    if total == 0:
        return "stable"
    ratio = positive / total
    if ratio > 0.6:
        return "improving"
    if ratio < 0.4:
        return "declining"
    return "stable"


__all__ = [
    "Change",
    "Trend",
    "calculate_change",
    "calculate_trend",
    "overall_trend",
]
