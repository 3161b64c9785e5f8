"""
Batched product upserts.

Products accumulate in a pending batch keyed by productHash. The batch is
written before it would exceed the configured size, and also before a product
whose hash is already pending is added, since a single upsert statement may not
touch the same row twice. Duplicates therefore resolve as last-write-wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Protocol, Sequence

from catalog_pricing.error_handler import StoreWriteFailure
from catalog_pricing.integrations.contracts.products import Product

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000


class ProductStore(Protocol):
    def write_products(self, rows: Sequence[Dict[str, Any]]) -> int: ...


@dataclass
class UpsertStats:
    products_written: int = 0
    batches_flushed: int = 0


class BatchUpserter:
    def __init__(self, store: ProductStore, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.batch_size = batch_size
        self.stats = UpsertStats()
        self._pending: Dict[str, Dict[str, Any]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def add(self, product: Product) -> None:
        if not product.product_hash:
            raise ValueError(f"Product {product.sku!r} has no productHash")
        if product.product_hash in self._pending or len(self._pending) >= self.batch_size:
            self.flush()
        self._pending[product.product_hash] = product.to_row()

    def flush(self) -> int:
        if not self._pending:
            return 0
        rows: List[Dict[str, Any]] = list(self._pending.values())
        try:
            written = self.store.write_products(rows)
        except Exception as e:
            logger.error("Failed to write batch of %d products: %s", len(rows), e)
            raise StoreWriteFailure(len(rows), e) from e
        self._pending = {}
        self.stats.products_written += written
        self.stats.batches_flushed += 1
        return written

    def upsert(self, products: Iterable[Product]) -> UpsertStats:
        for product in products:
            self.add(product)
        self.flush()
        logger.info(
            "Upserted %d products in %d batches",
            self.stats.products_written, self.stats.batches_flushed,
        )
        return self.stats


def upsert_products(
    store: ProductStore, products: Iterable[Product], batch_size: int = DEFAULT_BATCH_SIZE
) -> UpsertStats:
    return BatchUpserter(store, batch_size=batch_size).upsert(products)
