"""Unit tests for the data models."""

import math

import marshmallow as ma
import pytest

from product_pulse.data.models import Dataset, ProductInfo, Record, RecordSchema, _amount


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        ("", 0.0),
        (3, 3.0),
        ("12.5", 12.5),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
    ],
)
def test_amount(value, expected):
    """Test the _amount converter."""
    result = _amount(value)
    assert result == expected
    assert math.isfinite(result)


def test_record_costs_and_profit(make_record):
    record = make_record(revenue=1000, ad_spend=200, non_ad_costs=100, third_party_costs=50)
    assert record.total_costs == 350
    assert record.profit == 650
    assert record.product() == ProductInfo(id="P1", name="Widget", category="Gadgets", brand="Acme")


def test_record_strips_text():
    record = Record(id=" P9 ", month=" 3 ", name="  Thing ")
    assert (record.id, record.month, record.name) == ("P9", "3", "Thing")


def test_record_schema_loads_camel_case():
    record = RecordSchema().load(
        {
            "id": "P1",
            "name": "Widget",
            "month": "2025-01",
            "revenue": 100,
            "adSpend": 20,
            "nonAdCosts": 5,
            "thirdPartyCosts": 1,
            "averageSale": 10,
            "adjustedCpa": 2,
            "ignored": "value",
        }
    )
    assert isinstance(record, Record)
    assert record.ad_spend == 20
    assert record.third_party_costs == 1
    assert record.adjusted_cpa == 2

    with pytest.raises(ma.ValidationError):
        RecordSchema().load({"name": "No id"})


def test_dataset_products_and_lookup(portfolio_dataset):
    assert len(portfolio_dataset) == 22
    assert portfolio_dataset.is_loaded
    products = portfolio_dataset.unique_products()
    assert [product.id for product in products] == ["P1", "P2", "P3", "P4", "P5"]
    assert len(portfolio_dataset.product_records("P4")) == 3
    assert portfolio_dataset.product_records("missing") == ()
    assert not Dataset().is_loaded


def test_dataset_to_dict_uses_upload_names(make_record):
    dataset = Dataset([make_record(ad_spend=5)])
    payload = dataset.to_dict()
    row = payload["records"][0]
    assert row["adSpend"] == 5
    assert "ad_spend" not in row
    assert Dataset.from_dicts(payload["records"]).fingerprint == dataset.fingerprint


def test_dataset_iterates_records_in_order(make_record):
    first, second = make_record(id="A"), make_record(id="B")
    dataset = Dataset([first, second])
    assert list(dataset) == [first, second]
    assert all(isinstance(record, Record) for record in dataset)
