"""
Mock Global Catalog Client.

Purpose:
- Serves a catalog hierarchy from memory (or a local JSON fixture)
- Does NOT make any network calls
- Lets the walker and pipeline run end-to-end offline

Fixture shape:
    {
      "roots":    {"<query q>": [resource, ...]},
      "children": {"<node id>": [resource, ...]},
      "pricing":  {"<node id>": pricing payload}
    }

Swap:
Replace with clients/real_http/global_catalog.py for real scrapes.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from catalog_pricing.error_handler import NotFound
from catalog_pricing.integrations.clients.real_http.global_catalog import CatalogQuery
from catalog_pricing.integrations.contracts.catalog import CatalogKind, CatalogNode, PricingLeaf
from catalog_pricing.processors.pricing_normalizer import parse_pricing_leaf


class MockGlobalCatalogClient:
    def __init__(
        self,
        roots: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        children: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        pricing: Optional[Dict[str, Any]] = None,
        failures: Optional[Dict[Tuple[str, str], BaseException]] = None,
        latency_seconds: float = 0.0,
    ) -> None:
        self.roots = roots or {}
        self.children = children or {}
        self.pricing = pricing or {}
        # (operation, node id) -> exception raised instead of answering
        self.failures = failures or {}
        self.latency_seconds = latency_seconds
        self.calls: List[Tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @classmethod
    def from_file(cls, path: Path) -> "MockGlobalCatalogClient":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls(
            roots=data.get("roots"),
            children=data.get("children"),
            pricing=data.get("pricing"),
        )

    async def __aenter__(self) -> "MockGlobalCatalogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def aclose(self) -> None:
        return None

    async def _call(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency_seconds)
            failure = self.failures.get((operation, key))
            if failure is not None:
                raise failure
        finally:
            self.in_flight -= 1

    async def list_roots(self, query: CatalogQuery) -> List[CatalogNode]:
        await self._call("list_roots", query.q)
        return [CatalogNode.from_resource(r) for r in self.roots.get(query.q, [])]

    async def get_children(self, node_id: str, kind: CatalogKind) -> List[CatalogNode]:
        await self._call("get_children", node_id)
        nodes = [CatalogNode.from_resource(r) for r in self.children.get(node_id, [])]
        return [node for node in nodes if node.kind is kind]

    async def get_pricing(self, node_id: str) -> Optional[PricingLeaf]:
        try:
            await self._call("get_pricing", node_id)
        except NotFound:
            return None
        payload = self.pricing.get(node_id)
        if payload is None:
            return None
        return parse_pricing_leaf(payload, node_id)
