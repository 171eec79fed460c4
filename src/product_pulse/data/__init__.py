"""Uploaded product-performance rows and their ingestion boundary."""

from .models import Dataset, ProductInfo, Record, RecordSchema
from .parser import build_records, load_dataset, parse_csv, parse_json

__all__ = [
    "Dataset",
    "ProductInfo",
    "Record",
    "RecordSchema",
    "build_records",
    "load_dataset",
    "parse_csv",
    "parse_json",
]
