"""
Real Global Catalog HTTP Client.

Purpose:
- Lists root catalog entries (active services / infrastructure) page by page
- Fetches a node's children of one kind, and a node's pricing leaf
- Converts API payloads into CatalogNode / PricingLeaf contracts

Implementation notes:
- httpx.AsyncClient, so the walker can fan pricing fetches out per chunk
- HTTP 429 sleeps a fixed delay and retries, up to ``max_attempts`` in total
- 404 on a pricing fetch means "not priced here" and returns None

Important:
- Keep this client as the ONLY place where catalog HTTP calls are made.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from catalog_pricing.error_handler import (
    CatalogHTTPError,
    NotFound,
    RateLimited,
    TransientNetworkError,
)
from catalog_pricing.integrations.contracts.catalog import CatalogKind, CatalogNode, PricingLeaf
from catalog_pricing.processors.pricing_normalizer import parse_pricing_leaf
from catalog_pricing.utils.rate_limiter import AsyncRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://globalcatalog.cloud.ibm.com/api/v1"
RETRY_DELAY_SECONDS = 30.0
MAX_ATTEMPTS = 3
PAGE_LIMIT = 200


@dataclass(frozen=True)
class CatalogQuery:
    q: str
    include: str = "id:geo_tags:kind:name:pricing_tags:tags"
    account: str = "global"

    def to_params(self) -> Dict[str, str]:
        return {"q": self.q, "include": self.include, "account": self.account}


SERVICE_QUERY = CatalogQuery(q="kind:service active:true")
IAAS_QUERY = CatalogQuery(q="kind:iaas active:true")


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


class GlobalCatalogClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        page_limit: int = PAGE_LIMIT,
        timeout_seconds: float = 30.0,
        max_attempts: int = MAX_ATTEMPTS,
        retry_delay_seconds: float = RETRY_DELAY_SECONDS,
        rate_limiter: Optional[AsyncRateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.token = token
        self.page_limit = page_limit
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max(1, max_attempts)
        self.retry_delay_seconds = retry_delay_seconds
        self.rate_limiter = rate_limiter
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None
        self.request_count = 0

    async def __aenter__(self) -> "GlobalCatalogClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers: Dict[str, str] = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Low-level request helpers
    # ------------------------------------------------------------------ #
    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        client = self._ensure_client()
        url = f"{self.base_url}{path}"
        for attempt in range(1, self.max_attempts + 1):
            if self.rate_limiter:
                await self.rate_limiter.wait_if_needed()
            try:
                self.request_count += 1
                response = await client.get(path, params=params)
            except httpx.TransportError as e:
                raise TransientNetworkError(url, e) from e

            if response.status_code == 429:
                if attempt >= self.max_attempts:
                    raise RateLimited(url, attempt)
                logger.info(
                    "Too many requests on %s, sleeping for %ss and retrying (%d/%d)",
                    url, self.retry_delay_seconds, attempt, self.max_attempts,
                )
                await self._sleep(self.retry_delay_seconds)
                continue
            if response.status_code == 404:
                raise NotFound(url)
            if not response.is_success:
                raise CatalogHTTPError(url, response.status_code)

            try:
                return response.json()
            except ValueError as e:
                raise TransientNetworkError(url, e) from e
        raise RateLimited(url, self.max_attempts)

    async def _get_paginated(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Follow _limit/_offset pages until offset + page size reaches the reported count."""
        resources: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page_params = dict(params or {})
            page_params.update({"_limit": self.page_limit, "_offset": offset})
            data = await self._get_json(path, page_params)
            if not isinstance(data, dict):
                break
            page = [r for r in data.get("resources") or [] if isinstance(r, dict)]
            resources.extend(page)

            count = _as_int(data.get("count"))
            page_offset = _as_int(data.get("offset"))
            if page_offset is None:
                page_offset = offset
            if count is None or not page:
                break
            if page_offset + len(page) >= count:
                break
            offset = page_offset + len(page)
            logger.debug("%s: %d of %d", path, offset, count)
        return resources

    @staticmethod
    def _to_nodes(resources: List[Dict[str, Any]]) -> List[CatalogNode]:
        nodes: List[CatalogNode] = []
        for resource in resources:
            try:
                nodes.append(CatalogNode.from_resource(resource))
            except ValueError as e:
                logger.info("Skipping catalog entry %s: %s", resource.get("id"), e)
        return nodes

    # ------------------------------------------------------------------ #
    # Catalog operations
    # ------------------------------------------------------------------ #
    async def list_roots(self, query: CatalogQuery) -> List[CatalogNode]:
        resources = await self._get_paginated("/", query.to_params())
        return self._to_nodes(resources)

    async def get_children(self, node_id: str, kind: CatalogKind) -> List[CatalogNode]:
        resources = await self._get_paginated(f"/{node_id}/{kind.value}")
        return [node for node in self._to_nodes(resources) if node.kind is kind]

    async def get_pricing(self, node_id: str) -> Optional[PricingLeaf]:
        try:
            payload = await self._get_json(f"/{node_id}/pricing")
        except NotFound:
            return None
        if not payload:
            return None
        return parse_pricing_leaf(payload, node_id)
