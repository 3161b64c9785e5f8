from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CatalogKind(str, Enum):
    SERVICE = "service"
    PLAN = "plan"
    DEPLOYMENT = "deployment"
    IAAS = "iaas"
    GROUP = "group"


# Which child kinds are fetched below a node of a given kind.
NEXT_KIND: Dict[CatalogKind, Tuple[CatalogKind, ...]] = {
    CatalogKind.SERVICE: (CatalogKind.PLAN,),
    CatalogKind.PLAN: (CatalogKind.DEPLOYMENT,),
    CatalogKind.DEPLOYMENT: (),
    CatalogKind.IAAS: (CatalogKind.IAAS, CatalogKind.PLAN),
    CatalogKind.GROUP: (CatalogKind.SERVICE, CatalogKind.IAAS),
}

# Grouping nodes only contain entries of their own family.
GROUP_NEXT_KIND: Dict[CatalogKind, Tuple[CatalogKind, ...]] = {
    CatalogKind.SERVICE: (CatalogKind.SERVICE,),
    CatalogKind.IAAS: (CatalogKind.IAAS,),
    CatalogKind.GROUP: (CatalogKind.SERVICE, CatalogKind.IAAS),
}


def next_kinds(kind: CatalogKind, is_group: bool = False) -> Tuple[CatalogKind, ...]:
    if is_group or kind is CatalogKind.GROUP:
        return GROUP_NEXT_KIND.get(kind, ())
    return NEXT_KIND[kind]


# ---------------------------------------------------------------------------
# Pricing payload
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TierPoint:
    price: float
    quantity_tier: float


@dataclass(frozen=True)
class Amount:
    country: str
    currency: str
    prices: Tuple[TierPoint, ...]


@dataclass(frozen=True)
class Metric:
    metric_id: str                       # doubles as the part number
    tier_model: Optional[str] = None
    charge_unit: Optional[str] = None
    charge_unit_name: Optional[str] = None
    charge_unit_quantity: Optional[Any] = None
    effective_from: Optional[str] = None
    effective_until: Optional[str] = None
    amounts: Tuple[Amount, ...] = ()

    def amount_for(self, country: str, currency: str) -> Optional[Amount]:
        # Later buckets win, same as the catalog's own country-currency index.
        found: Optional[Amount] = None
        for amount in self.amounts:
            if amount.country == country and amount.currency == currency:
                found = amount
        return found


@dataclass(frozen=True)
class PricingLeaf:
    type: str
    region: str
    metrics: Tuple[Metric, ...] = ()
    deployment_id: Optional[str] = None
    deprecated: bool = False


# ---------------------------------------------------------------------------
# Catalog hierarchy
# ---------------------------------------------------------------------------

@dataclass
class CatalogNode:
    id: str
    name: str
    kind: CatalogKind
    is_group: bool = False
    children: List["CatalogNode"] = field(default_factory=list)
    pricing_leaves: List[PricingLeaf] = field(default_factory=list)
    geo_tags: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_resource(cls, resource: Dict[str, Any]) -> "CatalogNode":
        """Build a node from a Global Catalog resource.

        Raises ValueError when the resource has no id or an unknown kind.
        """
        node_id = resource.get("id")
        if not node_id:
            raise ValueError("catalog resource has no id")
        kind = CatalogKind(str(resource.get("kind") or ""))
        return cls(
            id=str(node_id),
            name=str(resource.get("name") or node_id),
            kind=kind,
            is_group=bool(resource.get("group")),
            geo_tags=[str(t) for t in resource.get("geo_tags") or []],
            tags=[str(t) for t in resource.get("tags") or []],
        )

    def children_of_kind(self, kind: CatalogKind) -> List["CatalogNode"]:
        return [child for child in self.children if child.kind is kind]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view used for raw catalog snapshots."""
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "group": self.is_group,
            "geo_tags": list(self.geo_tags),
            "tags": list(self.tags),
            "pricing": [
                {
                    "type": leaf.type,
                    "region": leaf.region,
                    "deployment_id": leaf.deployment_id,
                    "metrics": [metric.metric_id for metric in leaf.metrics],
                }
                for leaf in self.pricing_leaves
            ],
            "children": [child.to_dict() for child in self.children],
        }
