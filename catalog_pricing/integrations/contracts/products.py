from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TierModel(str, Enum):
    """Pricing curve shapes, valued with the catalog's display names."""

    LINEAR = "Linear"
    PRORATION = "Proration"
    GRANULAR_TIER = "Granular Tier"
    STEP_TIER = "Step Tier"
    BLOCK_TIER = "Block Tier"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TierModel"]:
        """Accept either the display name ("Step Tier") or the compact one ("StepTier")."""
        if not value:
            return None
        compact = str(value).replace(" ", "").replace("_", "").lower()
        for member in cls:
            if member.value.replace(" ", "").lower() == compact:
                return member
        return None


# Sentinel for a tier boundary with no upper limit.
INFINITE_USAGE = "Inf"


@dataclass
class Price:
    unit: str
    purchase_option: str
    tier_model: TierModel
    usd_amount: str
    start_usage_amount: str
    end_usage_amount: str
    effective_date_start: str
    country: str
    currency: str
    part_number: str                     # catalog metric id
    effective_date_end: Optional[str] = None
    description: Optional[str] = None
    price_hash: str = ""

    @property
    def metric_id(self) -> str:
        return self.part_number

    def to_dict(self) -> Dict[str, Any]:
        return {
            "priceHash": self.price_hash,
            "unit": self.unit,
            "purchaseOption": self.purchase_option,
            "tierModel": self.tier_model.value,
            "USD": self.usd_amount,
            "startUsageAmount": self.start_usage_amount,
            "endUsageAmount": self.end_usage_amount,
            "effectiveDateStart": self.effective_date_start,
            "effectiveDateEnd": self.effective_date_end,
            "country": self.country,
            "currency": self.currency,
            "partNumber": self.part_number,
            "description": self.description,
        }


@dataclass
class Product:
    sku: str
    vendor_name: str
    region: str
    service: str
    product_family: str
    attributes: Dict[str, str] = field(default_factory=dict)
    prices: List[Price] = field(default_factory=list)
    product_hash: str = ""

    def prices_by_hash(self) -> Dict[str, List[Dict[str, Any]]]:
        """Group serialized prices under their hash; rows sharing a hash merge."""
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for price in self.prices:
            grouped.setdefault(price.price_hash, []).append(price.to_dict())
        return grouped

    def to_row(self) -> Dict[str, Any]:
        """Column values for the products table."""
        return {
            "productHash": self.product_hash,
            "sku": self.sku,
            "vendorName": self.vendor_name,
            "region": self.region,
            "service": self.service,
            "productFamily": self.product_family or "",
            "attributes": dict(self.attributes),
            "prices": self.prices_by_hash(),
        }
