"""
Real Postgres-backed products store, used when DATABASE_URL is set.
Implements the same interface as catalog_pricing.database.postgres (in-memory stand-in).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import MetaData, Table, create_engine, func, select
from sqlalchemy.dialects.postgresql import Insert, insert as pg_insert
from sqlalchemy.engine import Engine

from catalog_pricing.database.models import DEFAULT_TABLE_NAME, MUTABLE_COLUMNS, products_table

logger = logging.getLogger(__name__)


def _normalize_connection_string(s: str) -> str:
    """Strip common mistakes: 'psql \'...\'', extra quotes, whitespace."""
    s = s.strip()
    if re.match(r"^psql\s+", s, re.IGNORECASE):
        s = re.sub(r"^psql\s+", "", s, flags=re.IGNORECASE).strip()
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()
    return s


def build_upsert_statement(table: Table, rows: Sequence[Dict[str, Any]]) -> Insert:
    """
    One multi-row INSERT ... ON CONFLICT ("productHash") DO UPDATE that sets
    every mutable column to the incoming (excluded) value.
    """
    stmt = pg_insert(table).values(list(rows))
    return stmt.on_conflict_do_update(
        index_elements=[table.c.productHash],
        set_={name: stmt.excluded[name] for name in MUTABLE_COLUMNS},
    )


class PostgresDB:
    """
    Products store using SQLAlchemy Core. Each write is a single statement in
    its own transaction, so batches already written survive a later failure.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        table_name: str = DEFAULT_TABLE_NAME,
        *,
        engine: Optional[Engine] = None,
        pool_size: int = 5,
        max_overflow: int = 10,
    ) -> None:
        if engine is None:
            if not connection_string:
                raise ValueError("connection_string or engine is required")
            connection_string = _normalize_connection_string(connection_string)
            engine = create_engine(
                connection_string, pool_pre_ping=True, pool_size=pool_size, max_overflow=max_overflow
            )
        self.engine = engine
        self.metadata = MetaData()
        self.table = products_table(self.metadata, table_name)

    def create_tables(self) -> None:
        self.metadata.create_all(bind=self.engine)

    def write_products(self, rows: Sequence[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        stmt = build_upsert_statement(self.table, rows)
        with self.engine.begin() as conn:
            conn.execute(stmt)
        logger.info("Upserted %d products into %s", len(rows), self.table.name)
        return len(rows)

    # ------------------------------------------------------------------ #
    # Read-back queries
    # ------------------------------------------------------------------ #
    def get_product(self, product_hash: str) -> Optional[Dict[str, Any]]:
        stmt = select(self.table).where(self.table.c.productHash == product_hash)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row else None

    def find_products(
        self,
        vendor_name: str,
        service: Optional[str] = None,
        region: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        stmt = select(self.table).where(self.table.c.vendorName == vendor_name)
        if service is not None:
            stmt = stmt.where(self.table.c.service == service)
        if region is not None:
            stmt = stmt.where(self.table.c.region == region)
        stmt = stmt.order_by(self.table.c.productHash).limit(limit)
        with self.engine.connect() as conn:
            return [dict(row) for row in conn.execute(stmt).mappings().all()]

    def count_products(self, vendor_name: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(self.table)
        if vendor_name is not None:
            stmt = stmt.where(self.table.c.vendorName == vendor_name)
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())
