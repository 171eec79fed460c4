"""Holder for the currently loaded dataset and everything derived from it."""

from datetime import date

import structlog
from attrs import define, field

from .data.models import Dataset
from .dates.cache import AnalysisCache, MemoryAnalysisCache
from .dates.models import TimeWindow
from .dates.resolver import DateResolver
from .portfolio.analyzer import DeclineCriteria, PortfolioAnalyzer
from .series.builder import ChartSeriesBuilder

logger = structlog.get_logger(__name__)


@define(slots=True)
class AnalysisSession:
    """Owns one dataset at a time under a fixed anchor date.

    Replacing the dataset through :meth:`load` or :meth:`clear` invalidates
    the date-analysis cache before any further query runs.
    """

    now: date
    dataset: Dataset = field(factory=Dataset)
    cache: AnalysisCache = field(factory=MemoryAnalysisCache)
    criteria: DeclineCriteria = field(factory=DeclineCriteria)
    _resolver: DateResolver | None = field(default=None, init=False, repr=False)

    def load(self, dataset: Dataset) -> None:
        self.cache.invalidate()
        self.dataset = dataset
        self._resolver = None
        logger.info(
            "session.loaded",
            records=len(dataset),
            products=len(dataset.unique_products()),
            fingerprint=dataset.fingerprint[:12],
        )

    def clear(self) -> None:
        self.load(Dataset())

    @property
    def resolver(self) -> DateResolver:
        if self._resolver is None:
            self._resolver = DateResolver(self.dataset, self.now, self.cache)
        return self._resolver

    @property
    def portfolio(self) -> PortfolioAnalyzer:
        return PortfolioAnalyzer(self.resolver, criteria=self.criteria)

    @property
    def series(self) -> ChartSeriesBuilder:
        return ChartSeriesBuilder(self.resolver)

    def detected_range(self) -> TimeWindow:
        return self.resolver.detected_range()


__all__ = ["AnalysisSession"]
