"""
Content-addressed identities for products and prices.

Only identity fields are hashed. Attributes, amounts and effective dates can
change between scrapes of the same logical entity and are left out, so a
re-scrape maps onto the same rows.

Fields are encoded as a compact JSON array before hashing. Regions and SKUs
contain "-" themselves, so a plain separator join would let
("us-south", "db-lite") and ("us", "south-db-lite") share a digest.
"""
import hashlib
import json
from typing import Iterable

from catalog_pricing.integrations.contracts.products import Price, Product


def _digest(fields: Iterable[str]) -> str:
    encoded = json.dumps(["" if f is None else str(f) for f in fields], separators=(",", ":"))
    return hashlib.md5(encoded.encode("utf-8")).hexdigest()


def product_hash(vendor_name: str, region: str, sku: str) -> str:
    return _digest((vendor_name, region, sku))


def price_hash(product: Product, price: Price) -> str:
    """Unique per (metric id, country, currency, tier boundary) within a product."""
    return _digest(
        (
            product.product_hash,
            price.metric_id,
            price.country,
            price.currency,
            price.end_usage_amount,
        )
    )


def stamp_hashes(product: Product) -> Product:
    """Set productHash and every priceHash on ``product`` in place."""
    product.product_hash = product_hash(product.vendor_name, product.region, product.sku)
    for price in product.prices:
        price.price_hash = price_hash(product, price)
    return product
