"""Command line tests driven through click's CliRunner."""

import json

import pytest
from click.testing import CliRunner

import cli.main as cli_mod

HEADER = "Product ID,Product Name,Category,Brand,Month,Revenue,Ad Spend,Non-Ad Costs,Orders\n"
AS_OF = ["--as-of", "2025-06-15"]


@pytest.fixture
def upload(tmp_path):
    """Six bare months for two products; P2's profit collapses in the second quarter."""
    lines = [HEADER]
    for month in range(1, 7):
        lines.append(f"P1,Widget,Gadgets,Acme,{month},1000,200,100,10\n")
        if month <= 3:
            lines.append(f"P2,Gizmo,Gadgets,Acme,{month},2000,500,500,20\n")
        else:
            lines.append(f"P2,Gizmo,Gadgets,Acme,{month},1000,400,400,6\n")
    path = tmp_path / "upload.csv"
    path.write_text("".join(lines))
    return path


def _invoke(*args):
    return CliRunner().invoke(cli_mod.cli, [*AS_OF, *map(str, args)])


def _json_from_output(output: str):
    starts = [index for index in (output.find("{"), output.find("[")) if index != -1]
    assert starts, f"Expected JSON document in output, got: {output!r}"
    return json.loads(output[min(starts):])


def test_dates(upload):
    r = _invoke("dates", upload)
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    assert payload["anchor"] == "2025-06-15"
    assert payload["confidence"] == "high"
    assert payload["year_mapping"]["3"] == 2025
    assert payload["detected_range"] == {"start": "2025-01", "end": "2025-06"}
    assert payload["months"][0] == "2025-01"


def test_summary_portfolio(upload):
    r = _invoke("summary", upload, "--start", "2025-04", "--end", "2025-06")
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    assert payload["metrics"]["total_revenue"] == 6000
    assert payload["metrics"]["total_products"] == 2
    assert payload["distribution"]["profitable"] == 2
    assert payload["display"]["revenue"] == "$6,000.00"


def test_summary_product(upload):
    r = _invoke("summary", upload, "--start", "2025-04", "--end", "2025-06", "--product", "P2")
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    assert payload["product"]["name"] == "Gizmo"
    assert payload["growth"] == pytest.approx(-50.0)
    assert payload["growth_label"] == "vs previous period"


def test_summary_unknown_product(upload):
    r = _invoke("summary", upload, "--product", "nope")
    assert r.exit_code == 2
    assert "Unknown product id" in r.output


def test_summary_rejects_bad_month(upload):
    r = _invoke("summary", upload, "--start", "April")
    assert r.exit_code == 2
    assert "YYYY-MM" in r.output


def test_rankings(upload):
    r = _invoke("rankings", upload, "--start", "2025-04", "--end", "2025-06", "--limit", "1")
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    assert [row["id"] for row in payload["top_margin"]] == ["P1"]
    assert [row["id"] for row in payload["declined"]] == ["P2"]
    assert payload["declined"][0]["profit_decline"] == 2400


def test_rankings_rejects_non_positive_limit(upload):
    r = _invoke("rankings", upload, "--limit", "0")
    assert r.exit_code == 2


def test_series_json(upload):
    r = _invoke(
        "series", upload, "--start", "2025-04", "--end", "2025-06",
        "--comparison", "preceding-period",
    )
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    assert payload["comparison_window"] == {"start": "2025-01", "end": "2025-03"}
    assert payload["alignment"] == "byPositionalIndex"
    assert payload["comparison_label"] == "Preceding Period"
    assert [point["revenue"] for point in payload["points"]] == [2000, 2000, 2000]
    assert [point["comparison_revenue"] for point in payload["points"]] == [3000, 3000, 3000]


def test_series_export_csv(upload, tmp_path):
    export = tmp_path / "out" / "series.csv"
    r = _invoke("series", upload, "--product", "P1", "--export", export)
    assert r.exit_code == 0, r.output
    contents = export.read_text()
    assert contents.splitlines()[0].startswith("month,label,revenue")
    assert len(contents.splitlines()) == 7


def test_series_export_json(upload, tmp_path):
    export = tmp_path / "series.json"
    r = _invoke(
        "series", upload, "--comparison", "custom",
        "--compare-start", "2025-01", "--compare-end", "2025-02", "--export", export,
    )
    assert r.exit_code == 0, r.output
    rows = json.loads(export.read_text())
    assert rows[-1]["comparison_revenue"] is None


def test_series_plot(upload, tmp_path, mocker):
    mocker.patch("matplotlib.pyplot.subplots", return_value=(mocker.MagicMock(), mocker.MagicMock()))
    mocker.patch("matplotlib.pyplot.close")
    r = _invoke("series", upload, "--metric", "profit", "--plot", tmp_path / "profit.png")
    assert r.exit_code == 0, r.output
    assert "Plot written to" in r.output


@pytest.mark.parametrize(
    "extra",
    [
        ["--comparison", "custom"],
        ["--compare-start", "2025-01", "--compare-end", "2025-02"],
        ["--export", "series.txt"],
    ],
)
def test_series_usage_errors(upload, extra):
    r = _invoke("series", upload, *extra)
    assert r.exit_code == 2


def test_series_empty_window(upload):
    r = _invoke("series", upload, "--start", "2020-01", "--end", "2020-03")
    assert r.exit_code == 1
    assert "No data points" in r.output


def test_timeseries(upload):
    r = _invoke("timeseries", upload)
    assert r.exit_code == 0, r.output
    payload = _json_from_output(r.output)
    analysis = payload["analysis"]
    revenues = [row["current"] for row in analysis["month_to_month"]]
    assert revenues == [3000, 3000, 3000, 2000, 2000, 2000]
    assert analysis["revenue_direction"] == "down"
    assert analysis["profit_direction"] == "down"
    assert analysis["efficiency_direction"] == "down"
    assert payload["forecast"]["month"] == "2025-07"
    assert payload["forecast"]["revenue"] == pytest.approx(2000)
    assert payload["forecast"]["confidence"] == "medium"
    assert payload["display"]["forecast_revenue"] == "$2,000.00"


def test_timeseries_unknown_product(upload):
    r = _invoke("timeseries", upload, "--product", "nope")
    assert r.exit_code == 2
    assert "Unknown product id" in r.output


def test_performance(upload):
    r = _invoke("performance", upload, "--product", "P2")
    assert r.exit_code == 0, r.output
    rows = _json_from_output(r.output)
    assert [row["month"] for row in rows] == [f"2025-0{month}" for month in range(1, 7)]
    assert rows[0]["trend"] == "stable"
    assert rows[3]["trend"] == "declining"


def test_performance_unknown_product(upload):
    r = _invoke("performance", upload, "--product", "nope")
    assert r.exit_code == 1


def test_unsupported_upload(tmp_path):
    path = tmp_path / "upload.txt"
    path.write_text("whatever")
    r = _invoke("dates", path)
    assert r.exit_code == 2
    assert "Unsupported upload format" in r.output


def test_empty_upload(tmp_path):
    path = tmp_path / "upload.csv"
    path.write_text(HEADER)
    r = _invoke("dates", path)
    assert r.exit_code == 1
    assert "No product rows" in r.output
