"""
Scrape-and-store pipeline.

For each configured catalog query: list the root entries, walk every root into
a full tree, map the trees to hashed products, and upsert them in batches.
Per-node failures are collected and counted; a failed store write aborts the
run because batches are not transactional across one another.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set

from dotenv import load_dotenv

from catalog_pricing.database.upsert import BatchUpserter, ProductStore
from catalog_pricing.error_handler import ErrorHandler
from catalog_pricing.integrations.clients.real_http.global_catalog import (
    CatalogQuery,
    GlobalCatalogClient,
)
from catalog_pricing.integrations.clients.real_http.iam import IamTokenClient
from catalog_pricing.integrations.contracts.catalog import CatalogKind, CatalogNode, PricingLeaf
from catalog_pricing.integrations.contracts.products import Product
from catalog_pricing.processors.product_mapper import map_tree_to_products
from catalog_pricing.scrapers.tree_walker import TreeWalker
from catalog_pricing.utils.config_loader import (
    CatalogConfig,
    CatalogQueryConfig,
    ScraperConfig,
    StoreConfig,
    load_scraper_config,
)
from catalog_pricing.utils.rate_limiter import AsyncRateLimiter

logger = logging.getLogger(__name__)


class CatalogSource(Protocol):
    async def list_roots(self, query: CatalogQuery) -> List[CatalogNode]: ...

    async def get_children(self, node_id: str, kind: CatalogKind) -> List[CatalogNode]: ...

    async def get_pricing(self, node_id: str) -> Optional[PricingLeaf]: ...

    async def aclose(self) -> None: ...


@dataclass
class ScrapeSummary:
    product_count: int = 0
    error_count: int = 0
    batches_flushed: int = 0
    root_count: int = 0
    errors_by_type: Dict[str, int] = field(default_factory=dict)


def create_store(config: StoreConfig) -> ProductStore:
    """Real Postgres store when the database URL env var is set, in-memory otherwise."""
    database_url = config.database_url()
    if database_url:
        from catalog_pricing.database.postgres_real import PostgresDB

        logger.info("Using Postgres products store (table %s)", config.table_name)
        return PostgresDB(connection_string=database_url, table_name=config.table_name)

    from catalog_pricing.database.postgres import PostgresDB

    logger.info("%s not set; using in-memory products store", config.database_url_env)
    return PostgresDB(table_name=config.table_name)


async def create_catalog_client(config: CatalogConfig) -> GlobalCatalogClient:
    iam = IamTokenClient(iam_url=config.iam_url, api_key_env=config.api_key_env)
    token: Optional[str] = None
    if iam.configured:
        token = await asyncio.to_thread(iam.get_token)
    else:
        logger.warning("%s not set; calling the catalog without a bearer token", config.api_key_env)

    rate_limiter = None
    if config.rate_limit.enabled:
        rate_limiter = AsyncRateLimiter(config.rate_limit.requests_per_minute)

    return GlobalCatalogClient(
        base_url=config.base_url,
        token=token,
        page_limit=config.page_limit,
        timeout_seconds=config.timeout_seconds,
        max_attempts=config.max_attempts,
        retry_delay_seconds=config.retry_delay_seconds,
        rate_limiter=rate_limiter,
    )


def _to_query(query: CatalogQueryConfig) -> CatalogQuery:
    return CatalogQuery(q=query.q, include=query.include, account=query.account)


async def _list_roots(
    client: CatalogSource, query: CatalogQueryConfig, errors: ErrorHandler
) -> List[CatalogNode]:
    try:
        roots = await client.list_roots(_to_query(query))
    except Exception as e:
        errors.record(query.name, "list_roots", e)
        return []
    logger.info("Found %d root entries for %s", len(roots), query.name)
    return roots


def _write_json(path: Path, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def write_snapshots(
    output_dir: Path, name: str, trees: Sequence[CatalogNode], products: Sequence[Product]
) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    _write_json(output_dir / f"catalog-{name}.json", [tree.to_dict() for tree in trees])
    _write_json(output_dir / f"products-{name}.json", [p.to_row() for p in products])
    logger.info("Wrote %s snapshots to %s", name, output_dir)


async def list_catalog_roots(
    config: ScraperConfig, *, client: Optional[CatalogSource] = None
) -> Dict[str, List[CatalogNode]]:
    """List the root entries of every configured query without walking them."""
    errors = ErrorHandler()
    owns_client = client is None
    if client is None:
        client = await create_catalog_client(config.catalog)
    try:
        return {q.name: await _list_roots(client, q, errors) for q in config.catalog.queries}
    finally:
        if owns_client:
            await client.aclose()


async def scrape_and_store(
    config: ScraperConfig,
    *,
    client: Optional[CatalogSource] = None,
    store: Optional[ProductStore] = None,
) -> ScrapeSummary:
    """
    Scrape every configured query into ``store``.

    ``product_count`` is the number of distinct productHashes written, which
    can be lower than the number of mapped products when deployments collapse
    onto the same region.
    """
    errors = ErrorHandler()
    if store is None:
        store = create_store(config.store)
    owns_client = client is None
    if client is None:
        client = await create_catalog_client(config.catalog)

    summary = ScrapeSummary()
    upserter = BatchUpserter(store, batch_size=config.store.batch_size)
    walker = TreeWalker(
        client,
        chunk_size=config.catalog.chunk_size,
        max_depth=config.catalog.max_depth,
        error_handler=errors,
    )
    seen_hashes: Set[str] = set()

    try:
        for query in config.catalog.queries:
            roots = await _list_roots(client, query, errors)
            summary.root_count += len(roots)
            trees = await walker.walk_roots(roots)
            products = map_tree_to_products(
                trees,
                vendor_name=config.pricing.vendor_name,
                country=config.pricing.country,
                currency=config.pricing.currency,
                product_family=query.product_family,
            )
            logger.info("Mapped %d products for %s", len(products), query.name)
            if config.output_dir:
                write_snapshots(Path(config.output_dir), query.name, trees, products)
            for product in products:
                upserter.add(product)
                seen_hashes.add(product.product_hash)
        upserter.flush()
        summary.product_count = len(seen_hashes)
    finally:
        if owns_client:
            await client.aclose()

    summary.batches_flushed = upserter.stats.batches_flushed
    summary.error_count = errors.count
    summary.errors_by_type = errors.summary()["by_type"]
    logger.info(
        "Scrape finished: %d products, %d batches, %d errors",
        summary.product_count, summary.batches_flushed, summary.error_count,
    )
    return summary


def run_scrape(config_path: Optional[Path] = None) -> ScrapeSummary:
    """Synchronous entry point for schedulers."""
    load_dotenv()
    config = load_scraper_config(config_path)
    return asyncio.run(scrape_and_store(config))
