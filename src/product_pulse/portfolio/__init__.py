"""Portfolio-level rollups and rankings."""

from .analyzer import (
    DeclineCriteria,
    PerformanceDistribution,
    PortfolioAnalyzer,
    PortfolioMetrics,
    ProductMetrics,
    ProductSummary,
)

__all__ = [
    "DeclineCriteria",
    "PerformanceDistribution",
    "PortfolioAnalyzer",
    "PortfolioMetrics",
    "ProductMetrics",
    "ProductSummary",
]
