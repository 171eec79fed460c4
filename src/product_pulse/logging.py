"""structlog setup for product-pulse.

Events are named ``<component>.<action>``: ``dates.analyzed``,
``cache.miss``, ``parser.rows_skipped``, ``portfolio.declines``,
``series.built``, ``session.loaded`` and the CLI's ``command.start``. The
chain below splits the prefix into a ``component`` field and stamps every
event with ``app="product-pulse"`` so JSON logs can be filtered per stage.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

APP_NAME = "product-pulse"

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def resolve_level(level: str) -> int:
    """Translate a level name into its :mod:`logging` constant."""
    normalized = level.strip().lower()
    if normalized not in LOG_LEVELS:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Unsupported log level {level!r}. Choose one of: {valid}.")
    return LOG_LEVELS[normalized]


def add_component(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Copy the dotted prefix of the event name into ``component``."""
    event = event_dict.get("event")
    if isinstance(event, str) and "." in event:
        event_dict.setdefault("component", event.split(".", 1)[0])
    return event_dict


def add_app_name(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def configure_logging(
    level: str = "info",
    *,
    json_output: bool = False,
) -> None:
    """Install the processor chain used for every analytics log event.

    Console rendering is meant for interactive runs; ``json_output`` switches
    to sorted-key JSON lines so exported logs can be diffed between runs.
    """
    level_value = resolve_level(level)

    logging.basicConfig(level=level_value, format="%(message)s", stream=sys.stderr)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_app_name,
        add_component,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    renderer: Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = [
    "APP_NAME",
    "LOG_LEVELS",
    "add_app_name",
    "add_component",
    "configure_logging",
    "resolve_level",
]
