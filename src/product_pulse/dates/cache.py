"""Memoization of dataset-wide date analysis."""

from collections.abc import Callable
from datetime import date
from typing import Protocol

import structlog
from attrs import define, field

from ..data.models import Dataset
from .models import DateAnalysis

logger = structlog.get_logger(__name__)


def analysis_key(dataset: Dataset, now: date) -> str:
    """Cache key combining the dataset fingerprint with the anchor month."""
    return f"{dataset.fingerprint}@{now:%Y-%m}"


class AnalysisCache(Protocol):
    """Storage for the year-inference result of the current dataset."""

    def get_or_compute(self, key: str, factory: Callable[[], DateAnalysis]) -> DateAnalysis:
        """Return the analysis stored under ``key``, computing it when absent."""
        ...

    def invalidate(self) -> None:
        """Forget any stored analysis."""
        ...


@define(slots=True)
class MemoryAnalysisCache:
    """Single-slot cache: only the most recent dataset's analysis is kept."""

    hits: int = 0
    misses: int = 0
    _key: str | None = field(default=None, init=False, repr=False)
    _analysis: DateAnalysis | None = field(default=None, init=False, repr=False)

    def get_or_compute(self, key: str, factory: Callable[[], DateAnalysis]) -> DateAnalysis:
        if self._analysis is not None and self._key == key:
            self.hits += 1
            return self._analysis
        self.misses += 1
        logger.debug("cache.miss", key=key[:12], replaced=self._key is not None)
        self._analysis = factory()
        self._key = key
        return self._analysis

    def invalidate(self) -> None:
        if self._key is not None:
            logger.debug("cache.invalidated", key=self._key[:12])
        self._key = None
        self._analysis = None


@define(slots=True)
class NullAnalysisCache:
    """Cache that never stores anything; every lookup recomputes."""

    def get_or_compute(self, key: str, factory: Callable[[], DateAnalysis]) -> DateAnalysis:
        return factory()

    def invalidate(self) -> None:
        return None


__all__ = ["AnalysisCache", "MemoryAnalysisCache", "NullAnalysisCache", "analysis_key"]
