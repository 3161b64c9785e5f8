"""Error taxonomy and per-node failure collection for catalog scraping."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class CatalogScrapeError(Exception):
    """Base class for every error raised by the scrape pipeline."""


class RateLimited(CatalogScrapeError):
    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"Rate limited on {url} after {attempts} attempts")
        self.url = url
        self.attempts = attempts


class NotFound(CatalogScrapeError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Not found: {url}")
        self.url = url


class TransientNetworkError(CatalogScrapeError):
    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Network error on {url}: {cause}")
        self.url = url
        self.cause = cause


class CatalogHTTPError(CatalogScrapeError):
    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Received status {status_code} from {url}")
        self.url = url
        self.status_code = status_code


class MalformedPricingLeaf(CatalogScrapeError):
    def __init__(self, node_id: str, reason: str) -> None:
        super().__init__(f"Malformed pricing for {node_id}: {reason}")
        self.node_id = node_id
        self.reason = reason


class StoreWriteFailure(CatalogScrapeError):
    def __init__(self, batch_size: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to write batch of {batch_size} products: {cause}")
        self.batch_size = batch_size
        self.cause = cause


# Failures that stay local to one node during a walk.
NODE_FAILURES = (
    RateLimited,
    NotFound,
    TransientNetworkError,
    CatalogHTTPError,
    MalformedPricingLeaf,
)


@dataclass
class NodeFailure:
    node_id: str
    operation: str
    error: str
    error_type: str


class ErrorHandler:
    """Collects isolated node failures so one bad node never aborts a crawl."""

    def __init__(self) -> None:
        self.failures: List[NodeFailure] = []

    def record(self, node_id: str, operation: str, exc: BaseException) -> NodeFailure:
        if isinstance(exc, NODE_FAILURES):
            logger.warning("Skipping %s for node %s: %s", operation, node_id, exc)
        else:
            logger.error(
                "Unexpected error during %s for node %s: %s", operation, node_id, exc, exc_info=exc
            )
        failure = NodeFailure(
            node_id=node_id,
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        self.failures.append(failure)
        return failure

    @property
    def count(self) -> int:
        return len(self.failures)

    def summary(self) -> Dict[str, Any]:
        by_type: Dict[str, int] = {}
        for failure in self.failures:
            by_type[failure.error_type] = by_type.get(failure.error_type, 0) + 1
        return {"error_count": self.count, "by_type": by_type}
