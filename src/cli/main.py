"""Command line entry point for the product-pulse application."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import click
import structlog

from product_pulse.data import load_dataset
from product_pulse.dates import TimeWindow
from product_pulse.logging import configure_logging
from product_pulse.metrics import analyze_time_series, forecast_next_month, performance_rows
from product_pulse.output import generate_series_plot
from product_pulse.output.utils import format_currency, format_percent
from product_pulse.periods import ComparisonConfig, ComparisonMode, comparison_label
from product_pulse.series import METRICS
from product_pulse.session import AnalysisSession

AS_OF_HELP = (
    "Anchor date (YYYY-MM-DD) used to infer years for bare month labels. "
    "Defaults to today; may also be set via PRODUCT_PULSE_AS_OF."
)
DATA_PATH_TYPE = click.Path(exists=True, dir_okay=False, path_type=Path)

LOG_FORMAT_CHOICES = ("console", "json")
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")
COMPARISON_CHOICES = {
    "none": ComparisonMode.NONE,
    "previous-year": ComparisonMode.PREVIOUS_YEAR,
    "preceding-period": ComparisonMode.PRECEDING_PERIOD,
    "custom": ComparisonMode.CUSTOM_RANGE,
}

logger = structlog.get_logger(__name__)


def _anchor(ctx: click.Context) -> date:
    ctx.ensure_object(dict)
    return ctx.obj.get("now") or date.today()


def _load_session(ctx: click.Context, data_path: Path) -> AnalysisSession:
    """Read an upload and wrap it in a session anchored at the configured date."""
    try:
        dataset = load_dataset(data_path)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="DATA_PATH") from exc
    if not dataset.is_loaded:
        raise click.ClickException(f"No product rows were found in {data_path}.")
    session = AnalysisSession(now=_anchor(ctx))
    session.load(dataset)
    return session


def _resolve_window(
    session: AnalysisSession,
    start: str | None,
    end: str | None,
) -> TimeWindow:
    """Build the analysis window, falling back to the detected data range."""
    detected = session.detected_range()
    try:
        return TimeWindow(start or detected.start, end or detected.end)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--start/--end") from exc


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def _write_csv(rows: list[dict[str, object]], path: Path) -> None:
    """Write series rows to CSV via pandas."""
    import pandas as pd  # type: ignore

    df = pd.DataFrame(rows)
    df.to_csv(path, index=False)


def _write_json(rows: list[dict[str, object]], path: Path) -> None:
    path.write_text(json.dumps(rows, indent=2))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    envvar="PRODUCT_PULSE_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Verbosity for structured logs.",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMAT_CHOICES, case_sensitive=False),
    envvar="PRODUCT_PULSE_LOG_FORMAT",
    default="console",
    show_default=True,
    help="Render logs as console-friendly text or JSON.",
)
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    envvar="PRODUCT_PULSE_AS_OF",
    default=None,
    help=AS_OF_HELP,
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str,
    log_format: str,
    as_of: datetime | None,
) -> None:
    """Analyse monthly product performance uploads."""
    configure_logging(level=log_level, json_output=log_format.lower() == "json")
    ctx.ensure_object(dict)
    now = as_of.date() if as_of else date.today()
    ctx.obj.update({"now": now})
    logger.bind(command_group="product-pulse").debug(
        "cli.initialized",
        as_of=now.isoformat(),
        log_level=log_level.lower(),
        log_format=log_format.lower(),
    )


@cli.command("dates")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.pass_context
def dates(ctx: click.Context, data_path: Path) -> None:
    """Report how month labels were interpreted."""
    session = _load_session(ctx, data_path)
    logger.bind(command="dates").info("command.start", path=str(data_path))
    payload = session.resolver.analysis.to_dict()
    payload["anchor"] = session.now.isoformat()
    payload["months"] = session.resolver.normalized_months()
    _echo_json(payload)


@cli.command("summary")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.option("--start", default=None, help="Start month (YYYY-MM). Defaults to the first month.")
@click.option("--end", default=None, help="End month (YYYY-MM). Defaults to the last month.")
@click.option("--product", "product_id", default=None, help="Summarise a single product id.")
@click.pass_context
def summary(
    ctx: click.Context,
    *,
    data_path: Path,
    start: str | None,
    end: str | None,
    product_id: str | None,
) -> None:
    """Headline metrics for the portfolio, or for one product."""
    session = _load_session(ctx, data_path)
    window = _resolve_window(session, start, end)
    cmd_log = logger.bind(command="summary", window=str(window))
    cmd_log.info("command.start", product_id=product_id)
    analyzer = session.portfolio

    if product_id:
        product_summary = analyzer.product_summary(product_id, window)
        if product_summary.product is None:
            raise click.BadParameter(f"Unknown product id {product_id!r}.", param_hint="--product")
        payload = product_summary.to_dict()
        payload["display"] = {
            "revenue": format_currency(product_summary.metrics.total_revenue),
            "profit": format_currency(product_summary.metrics.profit),
            "growth": f"{format_percent(product_summary.growth)} {product_summary.growth_label}",
        }
        _echo_json(payload)
        return

    metrics = analyzer.portfolio_metrics(window)
    payload = {
        "window": {"start": window.start, "end": window.end},
        "metrics": metrics.to_dict(),
        "distribution": analyzer.performance_distribution(window).to_dict(),
        "display": {
            "revenue": format_currency(metrics.total_revenue),
            "profit": format_currency(metrics.total_profit),
            "profit_margin": format_percent(metrics.profit_margin),
            "revenue_concentration": format_percent(metrics.revenue_concentration),
        },
    }
    _echo_json(payload)


@cli.command("rankings")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.option("--start", default=None, help="Start month (YYYY-MM).")
@click.option("--end", default=None, help="End month (YYYY-MM).")
@click.option("--limit", type=int, default=5, show_default=True, help="Rows per ranking.")
@click.pass_context
def rankings(
    ctx: click.Context,
    *,
    data_path: Path,
    start: str | None,
    end: str | None,
    limit: int,
) -> None:
    """Top, bottom and declining products for a window."""
    if limit <= 0:
        raise click.BadParameter("limit must be a positive integer.", param_hint="--limit")
    session = _load_session(ctx, data_path)
    window = _resolve_window(session, start, end)
    logger.bind(command="rankings", window=str(window)).info("command.start", limit=limit)
    analyzer = session.portfolio

    payload = {
        "window": {"start": window.start, "end": window.end},
        "top_revenue": [row.to_dict() for row in analyzer.top_products(window, limit)],
        "top_profit": [row.to_dict() for row in analyzer.top_products_by_profit(window, limit)],
        "top_margin": [row.to_dict() for row in analyzer.top_products_by_margin(window, limit)],
        "bottom_margin": [row.to_dict() for row in analyzer.bottom_performers(window, limit)],
        "declined": [row.to_dict() for row in analyzer.declined_products(window, limit)],
    }
    _echo_json(payload)


@cli.command("series")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.option("--start", default=None, help="Start month (YYYY-MM).")
@click.option("--end", default=None, help="End month (YYYY-MM).")
@click.option(
    "--comparison",
    type=click.Choice(tuple(COMPARISON_CHOICES), case_sensitive=False),
    default="none",
    show_default=True,
    help="Comparison overlay for the chart.",
)
@click.option("--compare-start", default=None, help="Custom comparison start month.")
@click.option("--compare-end", default=None, help="Custom comparison end month.")
@click.option("--product", "product_id", default=None, help="Restrict to a single product id.")
@click.option(
    "--metric",
    type=click.Choice(METRICS, case_sensitive=False),
    default="revenue",
    show_default=True,
    help="Metric drawn by --plot.",
)
@click.option(
    "--export",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Destination file (.csv or .json).",
)
@click.option(
    "--plot",
    "plot_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Destination PNG for a chart of --metric.",
)
@click.pass_context
def series(
    ctx: click.Context,
    *,
    data_path: Path,
    start: str | None,
    end: str | None,
    comparison: str,
    compare_start: str | None,
    compare_end: str | None,
    product_id: str | None,
    metric: str,
    export: Path | None,
    plot_path: Path | None,
) -> None:
    """Month-by-month chart series with an optional comparison overlay."""
    mode = COMPARISON_CHOICES[comparison.lower()]
    has_custom_bounds = compare_start is not None or compare_end is not None
    if mode is ComparisonMode.CUSTOM_RANGE and not (compare_start and compare_end):
        raise click.UsageError("--comparison custom requires --compare-start and --compare-end.")
    if mode is not ComparisonMode.CUSTOM_RANGE and has_custom_bounds:
        raise click.UsageError("--compare-start/--compare-end require --comparison custom.")
    if export is not None and export.suffix.lower() not in {".csv", ".json"}:
        raise click.BadParameter("Export path must end with .csv or .json", param_hint="--export")

    session = _load_session(ctx, data_path)
    window = _resolve_window(session, start, end)
    if mode is ComparisonMode.CUSTOM_RANGE:
        try:
            config = ComparisonConfig.custom(TimeWindow(compare_start, compare_end))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--compare-start/--compare-end") from exc
    else:
        config = ComparisonConfig(mode)

    cmd_log = logger.bind(command="series", window=str(window), comparison=mode.value)
    cmd_log.info("command.start", product_id=product_id)
    chart = session.series.build(window, config, product_id=product_id)
    if not chart.has_data:
        raise click.ClickException("No data points were found for the requested window.")

    rows = chart.to_rows()
    if export is not None:
        export.parent.mkdir(parents=True, exist_ok=True)
        if export.suffix.lower() == ".csv":
            _write_csv(rows, export)
        else:
            _write_json(rows, export)
        cmd_log.debug("series.exported", path=str(export), rows=len(rows))
        click.echo(f"Series written to {export}")

    if plot_path is not None:
        report = generate_series_plot(
            chart,
            metric.lower(),
            output_dir=plot_path.parent,
            filename=plot_path.name,
        )
        click.echo(f"Plot written to {report.path}")

    if export is None and plot_path is None:
        trend = chart.trend(metric.lower())
        _echo_json(
            {
                "window": {"start": window.start, "end": window.end},
                "comparison_window": (
                    {"start": chart.comparison_window.start, "end": chart.comparison_window.end}
                    if chart.comparison_window
                    else None
                ),
                "comparison_label": comparison_label(config),
                "alignment": chart.alignment.value if chart.alignment else None,
                "trend": {
                    "metric": metric.lower(),
                    "direction": trend.direction,
                    "percent": trend.percent,
                },
                "points": rows,
            }
        )


@cli.command("timeseries")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.option("--start", default=None, help="Start month (YYYY-MM).")
@click.option("--end", default=None, help="End month (YYYY-MM).")
@click.option("--product", "product_id", default=None, help="Restrict to a single product id.")
@click.pass_context
def timeseries(
    ctx: click.Context,
    *,
    data_path: Path,
    start: str | None,
    end: str | None,
    product_id: str | None,
) -> None:
    """Month-to-month movement, seasonality and a next-month revenue forecast."""
    session = _load_session(ctx, data_path)
    window = _resolve_window(session, start, end)
    if product_id and not session.dataset.product_records(product_id):
        raise click.BadParameter(f"Unknown product id {product_id!r}.", param_hint="--product")
    logger.bind(command="timeseries", window=str(window)).info(
        "command.start", product_id=product_id
    )
    analysis = analyze_time_series(session.resolver, window, product_id)
    forecast = forecast_next_month(analysis)
    _echo_json(
        {
            "analysis": analysis.to_dict(),
            "forecast": forecast.to_dict(),
            "display": {"forecast_revenue": format_currency(forecast.revenue)},
        }
    )


@cli.command("performance")
@click.argument("data_path", type=DATA_PATH_TYPE)
@click.option("--product", "product_id", required=True, help="Product id to tabulate.")
@click.pass_context
def performance(ctx: click.Context, *, data_path: Path, product_id: str) -> None:
    """Month-by-month performance table for one product."""
    session = _load_session(ctx, data_path)
    logger.bind(command="performance").info("command.start", product_id=product_id)
    records = session.dataset.product_records(product_id)
    if not records:
        raise click.ClickException(f"No rows were found for product {product_id!r}.")
    rows = performance_rows(records, session.resolver)
    _echo_json([row.to_dict() for row in rows])


if __name__ == "__main__":
    cli()
