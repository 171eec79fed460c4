"""Resolution of raw month labels into canonical ``YYYY-MM`` months.

Uploads label months either with an explicit year (``2025-03``, ``03/2025``,
``2025/3``, ``Mar 2025``) or as a bare month number (``"3"``). Bare months are
ambiguous, so their year is inferred once per dataset relative to an explicit
anchor date:

* months after the anchor's month belong to the previous year;
* all other months belong to the anchor's year.

The heuristic assumes an upload spans at most parts of two consecutive years
ending at the anchor. Re-analysing the same upload under a different anchor
can therefore move bare months to a different year.
"""

import re
from collections import defaultdict
from collections.abc import Iterable
from datetime import date

import structlog
from attrs import define, field

from ..data.models import Dataset, Record
from .cache import AnalysisCache, MemoryAnalysisCache, analysis_key
from .models import Confidence, DateAnalysis, TimeWindow
from .months import CANONICAL_PATTERN, format_month

logger = structlog.get_logger(__name__)

BARE_MONTH_PATTERN = re.compile(r"^(0?[1-9]|1[0-2])$")
MONTH_YEAR_PATTERN = re.compile(r"^(\d{1,2})/(\d{4})$")
YEAR_MONTH_PATTERN = re.compile(r"^(\d{4})/(\d{1,2})$")
TEXT_MONTH_PATTERN = re.compile(r"^([A-Za-z]{3,9})\s+(\d{4})$")

MONTH_NAMES: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}  # fmt: skip

# Stable placeholder returned when nothing in the upload can be normalized.
DEFAULT_RANGE = TimeWindow("2024-01", "2025-12")

# Above this many distinct bare months the two-year assumption gets shaky.
WIDE_RANGE_THRESHOLD = 6


def _year_month(year: str, month: str) -> str | None:
    number = int(month)
    return format_month(int(year), number) if 1 <= number <= 12 else None


def _explicit_year(month: str) -> str | None:
    """Convert labels that carry their own year; None when the label has none."""
    match = MONTH_YEAR_PATTERN.match(month)
    if match:
        return _year_month(match.group(2), match.group(1))
    match = YEAR_MONTH_PATTERN.match(month)
    if match:
        return _year_month(match.group(1), match.group(2))
    match = TEXT_MONTH_PATTERN.match(month)
    if match:
        number = MONTH_NAMES.get(match.group(1).lower())
        if number is not None:
            return format_month(int(match.group(2)), number)
    return None


def infer_year(month: int, now: date) -> int:
    """Anchor-relative year for a bare month number."""
    return now.year - 1 if month > now.month else now.year


def normalize_month(month: str, analysis: DateAnalysis | None, *, now: date) -> str:
    """Normalize a single raw label against a dataset analysis.

    Unrecognised labels are returned unchanged, which keeps them out of every
    window comparison without raising.
    """
    text = month.strip()
    if CANONICAL_PATTERN.match(text):
        return text
    explicit = _explicit_year(text)
    if explicit is not None:
        return explicit
    if BARE_MONTH_PATTERN.match(text):
        number = int(text)
        year = analysis.year_mapping.get(number) if analysis else None
        if year is None:
            year = infer_year(number, now)
        return format_month(year, number)
    return month


def analyze_dates(records: Iterable[Record], *, now: date) -> DateAnalysis:
    """Infer years for bare month labels across a whole upload."""
    unique_months = {record.month.strip() for record in records}
    has_date_column = any(
        CANONICAL_PATTERN.match(month) or _explicit_year(month) is not None
        for month in unique_months
    )
    bare_months = sorted(
        {int(month) for month in unique_months if BARE_MONTH_PATTERN.match(month)}
    )

    warnings: list[str] = []
    confidence = Confidence.HIGH
    if has_date_column:
        warnings.append("Explicit year detected in month labels - using it directly")
    year_mapping = {month: infer_year(month, now) for month in bare_months}
    if len(bare_months) > WIDE_RANGE_THRESHOLD:
        confidence = Confidence.MEDIUM
        warnings.append(
            "Large date range detected with numeric months - consider labelling months "
            "with their year (YYYY-MM)"
        )
        logger.warning(
            "dates.wide_numeric_range",
            distinct_months=len(bare_months),
            anchor=now.isoformat(),
        )

    partial = DateAnalysis(year_mapping=year_mapping)
    normalized = sorted(
        {
            value
            for value in (normalize_month(month, partial, now=now) for month in unique_months)
            if CANONICAL_PATTERN.match(value)
        }
    )
    detected = TimeWindow(normalized[0], normalized[-1]) if normalized else DEFAULT_RANGE

    analysis = DateAnalysis(
        year_mapping=year_mapping,
        confidence=confidence,
        warnings=warnings,
        detected_range=detected,
        has_date_column=has_date_column,
    )
    logger.debug(
        "dates.analyzed",
        distinct_labels=len(unique_months),
        bare_months=len(bare_months),
        confidence=confidence.value,
        detected=str(detected),
    )
    return analysis


@define(slots=True)
class DateResolver:
    """Normalize and filter the rows of one dataset under a fixed anchor date."""

    dataset: Dataset
    now: date
    cache: AnalysisCache = field(factory=MemoryAnalysisCache)
    _analysis: DateAnalysis | None = field(default=None, init=False, repr=False)

    @property
    def analysis(self) -> DateAnalysis:
        """The dataset-wide inference, fetched from the cache on first use."""
        if self._analysis is None:
            key = analysis_key(self.dataset, self.now)
            self._analysis = self.cache.get_or_compute(
                key, lambda: analyze_dates(self.dataset.records, now=self.now)
            )
        return self._analysis

    def normalize(self, month: str) -> str:
        """Return the canonical month for a raw label."""
        return normalize_month(month, self.analysis, now=self.now)

    def detected_range(self) -> TimeWindow:
        """Earliest and latest normalized months in the dataset."""
        return self.analysis.detected_range or DEFAULT_RANGE

    def in_window(self, month: str, window: TimeWindow) -> bool:
        """True when a raw label normalizes to a real month inside ``window``."""
        normalized = self.normalize(month)
        return bool(CANONICAL_PATTERN.match(normalized)) and window.contains(normalized)

    def is_in_range(self, month: str, start: str, end: str) -> bool:
        """Inclusive membership of a raw label in ``start..end``.

        The bounds must be canonical months; anything else raises ``ValueError``.
        """
        return self.in_window(month, TimeWindow(start, end))

    def normalized_months(self, records: Iterable[Record] | None = None) -> list[str]:
        """Sorted distinct canonical months present in ``records``."""
        source = self.dataset.records if records is None else records
        return sorted(
            {
                value
                for value in (self.normalize(record.month) for record in source)
                if CANONICAL_PATTERN.match(value)
            }
        )

    def filter_records(
        self,
        window: TimeWindow,
        records: Iterable[Record] | None = None,
    ) -> list[Record]:
        """Rows whose normalized month falls inside ``window``."""
        source = self.dataset.records if records is None else records
        return [
            record
            for record in source
            if self.in_window(record.month, window)
        ]

    def records_by_month(
        self,
        window: TimeWindow,
        records: Iterable[Record] | None = None,
    ) -> dict[str, list[Record]]:
        """Group in-window rows by canonical month, in ascending month order."""
        grouped: dict[str, list[Record]] = defaultdict(list)
        for record in self.filter_records(window, records):
            grouped[self.normalize(record.month)].append(record)
        return dict(sorted(grouped.items()))


__all__ = [
    "DEFAULT_RANGE",
    "DateResolver",
    "analyze_dates",
    "infer_year",
    "normalize_month",
]
