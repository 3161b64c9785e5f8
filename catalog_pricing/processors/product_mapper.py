"""
Map populated catalog trees onto normalized products.

    group (optional)
    |
     - - > service | iaas (iaas may chain further iaas levels)
           |
            - - > plan        -> priced here when pricing is not region specific
                  |
                   - - > deployment -> priced here when pricing is per region

Product mapping:
    productHash    md5(vendorName-region-sku)
    sku            <service name>-<plan name>
    vendorName     configured vendor ('ibm')
    region         pricing deployment_location, else the country
    service        owning service/iaas name
    productFamily  'service' or 'iaas'
    attributes     planName, planType, region (+ deploymentId)
    prices         extract_prices() for the configured country-currency
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from catalog_pricing.integrations.contracts.catalog import CatalogKind, CatalogNode, PricingLeaf
from catalog_pricing.integrations.contracts.products import Product
from catalog_pricing.processors.pricing_normalizer import extract_prices
from catalog_pricing.utils.hashing import stamp_hashes

logger = logging.getLogger(__name__)

_OWNER_KINDS = (CatalogKind.SERVICE, CatalogKind.IAAS)


def build_attributes(leaf: PricingLeaf, plan_name: str) -> Dict[str, str]:
    attributes = {
        "planName": plan_name,
        "planType": leaf.type,
        "region": leaf.region,
    }
    if leaf.deployment_id:
        attributes["deploymentId"] = str(leaf.deployment_id)
    return attributes


def _plan_leaves(plan: CatalogNode) -> List[PricingLeaf]:
    leaves = list(plan.pricing_leaves)
    for deployment in plan.children_of_kind(CatalogKind.DEPLOYMENT):
        leaves.extend(deployment.pricing_leaves)
    return leaves


def _iter_owned_plans(root: CatalogNode) -> Iterable[Tuple[CatalogNode, CatalogNode]]:
    """Yield (owner, plan) pairs in depth-first catalog order."""
    stack: List[Tuple[CatalogNode, Optional[CatalogNode]]] = [(root, None)]
    while stack:
        node, owner = stack.pop()
        if node.kind is CatalogKind.PLAN:
            if owner is not None:
                yield owner, node
            continue
        if node.kind in _OWNER_KINDS and not node.is_group:
            owner = node
        for child in reversed(node.children):
            stack.append((child, owner))


def map_tree_to_products(
    roots: Iterable[CatalogNode],
    *,
    vendor_name: str = "ibm",
    country: str = "USA",
    currency: str = "USD",
    effective_date_default: str = "",
    product_family: Optional[str] = None,
) -> List[Product]:
    """
    Convert populated trees into hashed products. Deprecated leaves and leaves
    with no prices for ``country``/``currency`` produce nothing.
    """
    products: List[Product] = []
    for root in roots:
        family = product_family or (
            CatalogKind.IAAS.value if root.kind is CatalogKind.IAAS else CatalogKind.SERVICE.value
        )
        for owner, plan in _iter_owned_plans(root):
            for leaf in _plan_leaves(plan):
                if leaf.deprecated:
                    logger.debug("Skipping deprecated pricing on %s/%s", owner.name, plan.name)
                    continue
                prices = extract_prices(
                    leaf, country, currency, effective_date_default=effective_date_default
                )
                if not prices:
                    continue
                product = Product(
                    sku=f"{owner.name}-{plan.name}",
                    vendor_name=vendor_name,
                    region=leaf.region or country,
                    service=owner.name,
                    product_family=family,
                    attributes=build_attributes(leaf, plan.name),
                    prices=prices,
                )
                products.append(stamp_hashes(product))
    return products
