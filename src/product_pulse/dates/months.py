"""Arithmetic and formatting helpers for canonical ``YYYY-MM`` months."""

import calendar
import re

CANONICAL_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def is_canonical(value: str) -> bool:
    """Return True when ``value`` is a zero-padded ``YYYY-MM`` string."""
    return bool(CANONICAL_PATTERN.match(value))


def format_month(year: int, month: int) -> str:
    """Render a (year, month) pair as a canonical month."""
    return f"{year:04d}-{month:02d}"


def parse_month(value: str) -> tuple[int, int]:
    """Split a canonical month into integer (year, month)."""
    if not is_canonical(value):
        raise ValueError(f"Invalid month {value!r}. Expected format YYYY-MM.")
    year, month = value.split("-")
    return int(year), int(month)


def shift_month(value: str, delta: int) -> str:
    """Move a canonical month by ``delta`` months, rolling over year boundaries."""
    year, month = parse_month(value)
    index = year * 12 + (month - 1) + delta
    return format_month(index // 12, index % 12 + 1)


def month_span(start: str, end: str) -> int:
    """Number of months in the inclusive range ``start..end``.

    Zero or negative when ``start`` is after ``end``.
    """
    start_year, start_month = parse_month(start)
    end_year, end_month = parse_month(end)
    return (end_year - start_year) * 12 + (end_month - start_month) + 1


def month_range(start: str, end: str) -> list[str]:
    """Return every canonical month from ``start`` to ``end`` inclusive."""
    return [shift_month(start, offset) for offset in range(max(month_span(start, end), 0))]


def month_label(value: str) -> str:
    """Human label such as ``Mar 2025``; non-canonical input is returned as-is."""
    if not is_canonical(value):
        return value
    year, month = parse_month(value)
    return f"{calendar.month_abbr[month]} {year}"


__all__ = [
    "CANONICAL_PATTERN",
    "format_month",
    "is_canonical",
    "month_label",
    "month_range",
    "month_span",
    "parse_month",
    "shift_month",
]
