"""
SQLAlchemy table definition for normalized products.
Used by postgres_real when DATABASE_URL is set.

Column names keep the camelCase used by the pricing API that reads them back.
"""
from __future__ import annotations

from sqlalchemy import JSON, Column, Index, MetaData, String, Table, Text
from sqlalchemy.dialects.postgresql import JSONB

DEFAULT_TABLE_NAME = "products"

# Overwritten from the incoming row when a productHash already exists.
MUTABLE_COLUMNS = (
    "sku",
    "vendorName",
    "region",
    "service",
    "productFamily",
    "attributes",
    "prices",
)

_JSON = JSON().with_variant(JSONB(), "postgresql")


def products_table(metadata: MetaData, table_name: str = DEFAULT_TABLE_NAME) -> Table:
    return Table(
        table_name,
        metadata,
        Column("productHash", String(32), primary_key=True),
        Column("sku", Text, nullable=False),
        Column("vendorName", String(64), nullable=False),
        Column("region", String(128), nullable=False),
        Column("service", Text, nullable=False),
        Column("productFamily", String(64), nullable=False, default=""),
        Column("attributes", _JSON, nullable=False, default=dict),
        Column("prices", _JSON, nullable=False, default=dict),
        Index(f"ix_{table_name}_vendor_service_region", "vendorName", "service", "region"),
    )
