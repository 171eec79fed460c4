"""Domain models for uploaded product-performance rows."""

import hashlib
import math
from collections.abc import Iterable, Iterator
from typing import Any

import marshmallow as ma
from attrs import define, field


def _strip(value: object) -> str:
    """Trim surrounding whitespace from a text field."""
    if value is None:
        return ""
    return str(value).strip()


def _amount(value: object) -> float:
    """Coerce a numeric cell into a finite float, defaulting to zero."""
    if value is None or value == "":
        return 0.0
    number = float(value)  # type: ignore[arg-type]
    if not math.isfinite(number):
        return 0.0
    return number


@define(slots=True, frozen=True)
class ProductInfo:
    """Identity columns shared by every monthly row of a product."""

    id: str
    name: str
    category: str
    brand: str


@define(slots=True, frozen=True, kw_only=True)
class Record:
    """One month of performance for one product."""

    id: str = field(converter=_strip)
    name: str = field(converter=_strip, default="")
    category: str = field(converter=_strip, default="")
    brand: str = field(converter=_strip, default="")
    month: str = field(converter=_strip)
    revenue: float = field(converter=_amount, default=0.0)
    ad_spend: float = field(converter=_amount, default=0.0)
    non_ad_costs: float = field(converter=_amount, default=0.0)
    third_party_costs: float = field(converter=_amount, default=0.0)
    orders: float = field(converter=_amount, default=0.0)
    cpa: float = field(converter=_amount, default=0.0)
    average_sale: float = field(converter=_amount, default=0.0)
    adjusted_cpa: float = field(converter=_amount, default=0.0)

    @property
    def total_costs(self) -> float:
        """Ad spend plus non-ad and third-party costs."""
        return self.ad_spend + self.non_ad_costs + self.third_party_costs

    @property
    def profit(self) -> float:
        return self.revenue - self.total_costs

    def product(self) -> ProductInfo:
        """Return the identity columns of this row."""
        return ProductInfo(id=self.id, name=self.name, category=self.category, brand=self.brand)


class RecordSchema(ma.Schema):
    """Marshmallow schema mapping camelCase upload payloads onto :class:`Record`."""

    id = ma.fields.Str(required=True)
    name = ma.fields.Str(load_default="")
    category = ma.fields.Str(load_default="")
    brand = ma.fields.Str(load_default="")
    month = ma.fields.Str(required=True)
    revenue = ma.fields.Float(load_default=0.0, allow_none=True)
    ad_spend = ma.fields.Float(data_key="adSpend", load_default=0.0, allow_none=True)
    non_ad_costs = ma.fields.Float(data_key="nonAdCosts", load_default=0.0, allow_none=True)
    third_party_costs = ma.fields.Float(
        data_key="thirdPartyCosts", load_default=0.0, allow_none=True
    )
    orders = ma.fields.Float(load_default=0.0, allow_none=True)
    cpa = ma.fields.Float(load_default=0.0, allow_none=True)
    average_sale = ma.fields.Float(data_key="averageSale", load_default=0.0, allow_none=True)
    adjusted_cpa = ma.fields.Float(data_key="adjustedCpa", load_default=0.0, allow_none=True)

    class Meta:
        unknown = ma.EXCLUDE

    @ma.post_load
    def make_record(self, data: dict[str, Any], **kwargs: object) -> Record:
        """Instantiate :class:`Record` from a validated payload."""
        return Record(**data)


def _fingerprint(records: Iterable[Record]) -> str:
    """Hash the ordered (id, month) pairs identifying a dataset's timeline."""
    digest = hashlib.sha256()
    for record in records:
        digest.update(record.id.encode("utf-8"))
        digest.update(b"\x1f")
        digest.update(record.month.encode("utf-8"))
        digest.update(b"\x1e")
    return digest.hexdigest()


@define(slots=True, frozen=True)
class Dataset:
    """Immutable collection of uploaded rows.

    A dataset is never patched in place; a re-upload produces a new instance
    with a new :attr:`fingerprint`, which is what date-analysis caches key on.
    """

    records: tuple[Record, ...] = field(converter=tuple, factory=tuple)
    fingerprint: str = field(init=False, repr=False, eq=False)

    def __attrs_post_init__(self) -> None:
        """Compute the content fingerprint once per dataset."""
        object.__setattr__(self, "fingerprint", _fingerprint(self.records))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @property
    def is_loaded(self) -> bool:
        return bool(self.records)

    def unique_products(self) -> list[ProductInfo]:
        """Return one identity per product id, in first-seen order."""
        seen: dict[str, ProductInfo] = {}
        for record in self.records:
            if record.id not in seen:
                seen[record.id] = record.product()
        return list(seen.values())

    def product_records(self, product_id: str) -> tuple[Record, ...]:
        """Return every row belonging to ``product_id``."""
        return tuple(record for record in self.records if record.id == product_id)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation using upload column names."""
        return {"records": RecordSchema(many=True).dump(self.records)}

    @classmethod
    def from_dicts(cls, rows: Iterable[dict[str, Any]]) -> "Dataset":
        """Load camelCase row payloads through :class:`RecordSchema`."""
        return cls(RecordSchema(many=True).load(list(rows)))


__all__ = ["Dataset", "ProductInfo", "Record", "RecordSchema"]
