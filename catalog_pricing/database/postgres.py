"""
Lightweight in-memory products store for local development.

Provides the same interface as postgres_real.PostgresDB so the pipeline can
run and be tested without a real database. It is NOT intended for production use.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence

from catalog_pricing.database.models import DEFAULT_TABLE_NAME, MUTABLE_COLUMNS

logger = logging.getLogger(__name__)


class PostgresDB:
    def __init__(self, table_name: str = DEFAULT_TABLE_NAME) -> None:
        self.table_name = table_name
        self._rows: Dict[str, Dict[str, Any]] = {}
        # Every successful write, in order; tests inspect batch boundaries.
        self.batches: List[List[str]] = []

    def create_tables(self) -> None:
        return None

    def write_products(self, rows: Sequence[Dict[str, Any]]) -> int:
        if not rows:
            return 0
        hashes = [row["productHash"] for row in rows]
        if len(set(hashes)) != len(hashes):
            # Postgres refuses the same conflict target twice in one statement.
            raise ValueError("ON CONFLICT DO UPDATE command cannot affect row a second time")
        for row in rows:
            existing = self._rows.get(row["productHash"])
            if existing is None:
                self._rows[row["productHash"]] = copy.deepcopy(dict(row))
            else:
                for column in MUTABLE_COLUMNS:
                    existing[column] = copy.deepcopy(row.get(column))
        self.batches.append(hashes)
        logger.debug("Stored %d products in memory", len(rows))
        return len(rows)

    def get_product(self, product_hash: str) -> Optional[Dict[str, Any]]:
        row = self._rows.get(product_hash)
        return copy.deepcopy(row) if row else None

    def find_products(
        self,
        vendor_name: str,
        service: Optional[str] = None,
        region: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        matches = [
            row
            for _, row in sorted(self._rows.items())
            if row["vendorName"] == vendor_name
            and (service is None or row["service"] == service)
            and (region is None or row["region"] == region)
        ]
        return [copy.deepcopy(r) for r in matches[:limit]]

    def count_products(self, vendor_name: Optional[str] = None) -> int:
        if vendor_name is None:
            return len(self._rows)
        return sum(1 for row in self._rows.values() if row["vendorName"] == vendor_name)
