"""
Catalog tree walker.

Expands a root catalog entry into its full hierarchy using the kind-transition
table, and attaches pricing leaves to plans and their deployments. Pricing may
live at either level (satellite-located deployments, for example, are priced
on the plan), so both are always checked.

Requests are issued in fixed-size chunks: everything inside a chunk runs
concurrently, chunks run one after another. A failing fetch is recorded and
its subtree stays empty; siblings carry on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from catalog_pricing.error_handler import ErrorHandler
from catalog_pricing.integrations.contracts.catalog import (
    CatalogKind,
    CatalogNode,
    PricingLeaf,
    next_kinds,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8
DEFAULT_MAX_DEPTH = 32


class CatalogClient(Protocol):
    async def get_children(self, node_id: str, kind: CatalogKind) -> List[CatalogNode]: ...

    async def get_pricing(self, node_id: str) -> Optional[PricingLeaf]: ...


@dataclass
class _Fetch:
    node: CatalogNode
    operation: str
    run: Callable[[], Awaitable[Any]]


def _chunked(items: Sequence[_Fetch], size: int) -> Iterator[Sequence[_Fetch]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class TreeWalker:
    def __init__(
        self,
        client: CatalogClient,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_depth: int = DEFAULT_MAX_DEPTH,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.client = client
        self.chunk_size = chunk_size
        self.max_depth = max_depth
        self.errors = error_handler or ErrorHandler()

    async def _run_chunked(self, fetches: Sequence[_Fetch]) -> List[Tuple[_Fetch, Any]]:
        """Run fetches chunk by chunk; failed fetches are recorded and dropped."""
        completed: List[Tuple[_Fetch, Any]] = []
        for chunk in _chunked(fetches, self.chunk_size):
            outcomes = await asyncio.gather(*(f.run() for f in chunk), return_exceptions=True)
            for fetch, outcome in zip(chunk, outcomes):
                if isinstance(outcome, Exception):
                    self.errors.record(fetch.node.id, fetch.operation, outcome)
                    continue
                if isinstance(outcome, BaseException):
                    raise outcome
                completed.append((fetch, outcome))
        return completed

    def _children_fetch(self, node: CatalogNode, kind: CatalogKind) -> _Fetch:
        return _Fetch(
            node=node,
            operation=f"get_children:{kind.value}",
            run=lambda: self.client.get_children(node.id, kind),
        )

    def _pricing_fetch(self, node: CatalogNode) -> _Fetch:
        return _Fetch(node=node, operation="get_pricing", run=lambda: self.client.get_pricing(node.id))

    async def _expand(self, siblings: List[CatalogNode]) -> None:
        fetches = [
            self._children_fetch(node, kind)
            for node in siblings
            for kind in next_kinds(node.kind, node.is_group)
        ]
        for fetch, children in await self._run_chunked(fetches):
            fetch.node.children.extend(children)

    async def _price(self, siblings: List[CatalogNode]) -> None:
        targets: List[CatalogNode] = []
        for node in siblings:
            if node.kind is CatalogKind.PLAN and not node.is_group:
                targets.append(node)
                targets.extend(node.children_of_kind(CatalogKind.DEPLOYMENT))
        if not targets:
            return
        for fetch, leaf in await self._run_chunked([self._pricing_fetch(t) for t in targets]):
            if leaf is not None:
                fetch.node.pricing_leaves = [leaf]

    async def build_tree(self, root: CatalogNode) -> CatalogNode:
        """Populate ``root`` in place with its children and pricing, and return it."""
        stack: List[Tuple[List[CatalogNode], int]] = [([root], 0)]
        while stack:
            siblings, depth = stack.pop()
            expandable = [n for n in siblings if next_kinds(n.kind, n.is_group)]
            if expandable and depth >= self.max_depth:
                logger.warning(
                    "Not expanding %d catalog entries below depth %d (first: %s)",
                    len(expandable), depth, expandable[0].id,
                )
                await self._price(siblings)
                continue
            await self._expand(expandable)
            await self._price(siblings)
            for node in reversed(siblings):
                grandchildren = [c for c in node.children if next_kinds(c.kind, c.is_group)]
                if grandchildren:
                    stack.append((grandchildren, depth + 1))
        return root

    async def walk_roots(self, roots: Sequence[CatalogNode]) -> List[CatalogNode]:
        trees: List[CatalogNode] = []
        for root in roots:
            logger.info("Scraping pricing for %s", root.name)
            trees.append(await self.build_tree(root))
        return trees
