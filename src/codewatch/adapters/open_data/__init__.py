"""Public interface for the NYC Open Data adapter."""

from __future__ import annotations

from .client import OpenDataAPIError, SocrataSource, query_rows
from .datasets import (
    APPLICATION_DATASETS,
    VIOLATION_DATASETS,
    DatasetQuery,
    ParcelKey,
    parse_parcel_id,
)
from .fetcher import build_application_sources, build_open_data_client, build_violation_sources
from .translator import orders_from_text, translate_rows

__all__ = [
    "APPLICATION_DATASETS",
    "VIOLATION_DATASETS",
    "DatasetQuery",
    "OpenDataAPIError",
    "ParcelKey",
    "SocrataSource",
    "build_application_sources",
    "build_open_data_client",
    "build_violation_sources",
    "orders_from_text",
    "parse_parcel_id",
    "query_rows",
    "translate_rows",
]
