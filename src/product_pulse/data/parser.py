"""Parsers turning uploaded CSV/JSON exports into :class:`Dataset` objects."""

import csv
import io
import json
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog

from .models import Dataset, Record

logger = structlog.get_logger(__name__)

# Normalized header -> Record attribute.
COLUMN_ALIASES: dict[str, str] = {
    "id": "id",
    "product_id": "id",
    "productid": "id",
    "name": "name",
    "product_name": "name",
    "productname": "name",
    "category": "category",
    "product_category": "category",
    "brand": "brand",
    "product_brand": "brand",
    "month": "month",
    "date": "month",
    "period": "month",
    "revenue": "revenue",
    "sales": "revenue",
    "total_revenue": "revenue",
    "ad_spend": "ad_spend",
    "adspend": "ad_spend",
    "advertising_spend": "ad_spend",
    "ppc_spend": "ad_spend",
    "non_ad_costs": "non_ad_costs",
    "nonadcosts": "non_ad_costs",
    "other_costs": "non_ad_costs",
    "operating_costs": "non_ad_costs",
    "third_party_costs": "third_party_costs",
    "thirdpartycosts": "third_party_costs",
    "3rd_party_costs": "third_party_costs",
    "3rdpartycosts": "third_party_costs",
    "external_costs": "third_party_costs",
    "orders": "orders",
    "order_count": "orders",
    "total_orders": "orders",
    "cpa": "cpa",
    "average_sale": "average_sale",
    "averagesale": "average_sale",
    "avg_sale": "average_sale",
    "adjusted_cpa": "adjusted_cpa",
    "adjustedcpa": "adjusted_cpa",
}

NUMERIC_FIELDS = (
    "revenue",
    "ad_spend",
    "non_ad_costs",
    "third_party_costs",
    "orders",
    "cpa",
    "average_sale",
    "adjusted_cpa",
)

DEFAULT_CATEGORY = "General"
DEFAULT_BRAND = "Unknown Brand"


def _normalize_key(key: str) -> str:
    """Normalize header names for case, spacing, hyphen and camelCase differences."""
    key = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", key.strip())
    return re.sub(r"[\s\-]+", "_", key).lower()


def _to_number(value: object) -> float:
    """Coerce spreadsheet cells into floats; blanks and junk become zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip().replace(",", "").lstrip("$")
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        return 0.0


def _month_text(value: object) -> str:
    """Render a month cell as text, collapsing integral floats such as ``3.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _canonical_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Map raw header names onto Record attribute names, first match wins."""
    result: dict[str, Any] = {}
    for key, value in row.items():
        if key is None:
            continue
        target = COLUMN_ALIASES.get(_normalize_key(str(key)))
        if target is None or target in result:
            continue
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        result[target] = value
    return result


def build_records(rows: Iterable[Mapping[str, Any]]) -> list[Record]:
    """Validate and coerce raw rows into :class:`Record` objects.

    Rows without a product name are skipped. Missing ids fall back to
    ``PROD{index}``; missing category and brand get placeholder labels.
    """
    records: list[Record] = []
    skipped = 0
    for index, raw in enumerate(rows):
        if not isinstance(raw, Mapping):
            skipped += 1
            continue
        row = _canonical_row(raw)
        name = str(row.get("name", "")).strip()
        if not name:
            skipped += 1
            continue
        numbers = {field: _to_number(row.get(field)) for field in NUMERIC_FIELDS}
        records.append(
            Record(
                id=str(row.get("id", f"PROD{index}")),
                name=name,
                category=str(row.get("category", DEFAULT_CATEGORY)),
                brand=str(row.get("brand", DEFAULT_BRAND)),
                month=_month_text(row.get("month", "")),
                **numbers,
            )
        )
    if skipped:
        logger.warning("parser.rows_skipped", skipped=skipped, kept=len(records))
    logger.debug("parser.rows_parsed", count=len(records))
    return records


def parse_csv(text: str) -> Dataset:
    """Parse a comma-separated export into a dataset."""
    reader = csv.DictReader(io.StringIO(text))
    rows = (
        row
        for row in reader
        # Skip blank lines that some spreadsheet exports append.
        if row and not all(value is None or str(value).strip() == "" for value in row.values())
    )
    return Dataset(build_records(rows))


def parse_json(text: str) -> Dataset:
    """Parse a JSON array of rows (or ``{"records": [...]}``) into a dataset."""
    payload = json.loads(text)
    if isinstance(payload, Mapping):
        payload = payload.get("records", [])
    if not isinstance(payload, list):
        payload = []
    return Dataset(build_records(payload))


def load_dataset(path: str | Path) -> Dataset:
    """Read a ``.csv`` or ``.json`` upload from disk."""
    source = Path(path)
    suffix = source.suffix.lower()
    if suffix not in {".csv", ".json"}:
        raise ValueError(f"Unsupported upload format {suffix!r}; expected .csv or .json.")
    text = source.read_text(encoding="utf-8-sig")
    log = logger.bind(path=str(source), format=suffix.lstrip("."))
    dataset = parse_csv(text) if suffix == ".csv" else parse_json(text)
    log.info("parser.loaded", records=len(dataset), products=len(dataset.unique_products()))
    return dataset


__all__ = ["COLUMN_ALIASES", "build_records", "load_dataset", "parse_csv", "parse_json"]
