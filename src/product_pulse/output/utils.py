"""Shared helpers for rendering reports and plots."""

from pathlib import Path


def ensure_directory(path: str | Path) -> Path:
    """Create the directory at ``path`` if needed and return its Path."""
    directory = Path(path)
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
    return directory


def format_percent(value: float) -> str:
    """Format a value already expressed in percent, e.g. ``12.345 -> '12.35%'``."""
    return f"{value:.2f}%"


def format_currency(value: float) -> str:
    """Format an amount with a dollar sign and thousands separators."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
