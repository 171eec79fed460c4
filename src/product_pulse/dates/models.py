"""Value types produced by date resolution."""

import enum

from attrs import define, field

from .months import is_canonical, month_range, month_span


def _canonical(value: str) -> str:
    """Validate that a window bound is a canonical month."""
    value = str(value).strip()
    if not is_canonical(value):
        raise ValueError(f"Invalid month {value!r}. Expected format YYYY-MM.")
    return value


@define(slots=True, frozen=True)
class TimeWindow:
    """Inclusive range of canonical months.

    ``start > end`` is accepted and simply matches nothing.
    """

    start: str = field(converter=_canonical)
    end: str = field(converter=_canonical)

    @classmethod
    def parse(cls, value: str) -> "TimeWindow":
        """Build a window from ``"YYYY-MM:YYYY-MM"``."""
        start, sep, end = value.partition(":")
        if not sep:
            raise ValueError(f"Invalid window {value!r}. Expected START:END.")
        return cls(start, end)

    @property
    def length(self) -> int:
        """Number of months covered; zero for inverted windows."""
        return max(month_span(self.start, self.end), 0)

    def months(self) -> list[str]:
        return month_range(self.start, self.end)

    def contains(self, month: str) -> bool:
        """Lexical membership test on a canonical month."""
        return self.start <= month <= self.end

    def __str__(self) -> str:
        return f"{self.start}:{self.end}"


class Confidence(str, enum.Enum):
    """How far the year inference for bare months can be trusted."""

    HIGH = "high"
    MEDIUM = "medium"


@define(slots=True, frozen=True)
class DateAnalysis:
    """Dataset-wide inference result for ambiguous month labels."""

    year_mapping: dict[int, int] = field(factory=dict)
    confidence: Confidence = Confidence.HIGH
    warnings: tuple[str, ...] = field(converter=tuple, factory=tuple)
    detected_range: TimeWindow | None = None
    has_date_column: bool = False

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "year_mapping": {str(month): year for month, year in sorted(self.year_mapping.items())},
            "confidence": self.confidence.value,
            "warnings": list(self.warnings),
            "detected_range": (
                {"start": self.detected_range.start, "end": self.detected_range.end}
                if self.detected_range
                else None
            ),
            "has_date_column": self.has_date_column,
        }


__all__ = ["Confidence", "DateAnalysis", "TimeWindow"]
