"""
Contracts (data models).

Shapes shared by the catalog clients, the walker, the normalizer and the store:
- Catalog hierarchy nodes and their kind-transition table
- Raw pricing leaves (metrics x country-currency amounts)
- Normalized products and prices

Mock and real catalog clients both return these contracts, so downstream code
never reads ad-hoc API dicts.
"""

from .catalog import (
    GROUP_NEXT_KIND,
    NEXT_KIND,
    Amount,
    CatalogKind,
    CatalogNode,
    Metric,
    PricingLeaf,
    TierPoint,
    next_kinds,
)
from .products import INFINITE_USAGE, Price, Product, TierModel

__all__ = [
    # catalog
    "Amount", "CatalogKind", "CatalogNode", "GROUP_NEXT_KIND", "Metric",
    "NEXT_KIND", "PricingLeaf", "TierPoint", "next_kinds",
    # products
    "INFINITE_USAGE", "Price", "Product", "TierModel",
]
