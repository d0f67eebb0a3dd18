"""Full catalogue scan with a time-to-live cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .cache import TTLCache
from .client import WedropClient
from .models import FetchStatus, Product
from .normalizer import normalize_products


LOGGER = logging.getLogger(__name__)

PageObserver = Callable[[List[Dict[str, Any]]], None]

STALE_SCAN_MESSAGE = "Conexão alterada durante a leitura do catálogo"


@dataclass
class ScanResult:
    products: List[Product] = field(default_factory=list)
    status: FetchStatus = FetchStatus.OK
    pages_fetched: int = 0
    reported_total: Optional[int] = None
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self.status in (FetchStatus.OK, FetchStatus.EMPTY)


class CatalogScanner:
    """Walks every catalogue page sequentially and caches the result.

    Pages are requested one at a time so the upstream sees them in order.
    The scan stops on a short page, once the reported total is reached, or
    after ``max_pages``.  A failure mid-scan returns what was accumulated;
    such partial scans are not cached.  Invalidating the cache while a scan
    runs abandons it: pages answered by the previous connection are dropped
    and never reach ``on_page``.
    """

    def __init__(
        self,
        client: WedropClient,
        *,
        page_size: int = 100,
        max_pages: int = 50,
        ttl_seconds: float = 300.0,
        on_page: Optional[PageObserver] = None,
        cache: Optional[TTLCache[ScanResult]] = None,
    ) -> None:
        self.client = client
        self.page_size = page_size
        self.max_pages = max_pages
        self.on_page = on_page
        self.cache: TTLCache[ScanResult] = cache or TTLCache(ttl_seconds)

    async def scan(self) -> ScanResult:
        result = ScanResult()
        client = self.client
        generation = self.cache.generation
        if not client.is_configured:
            result.status = FetchStatus.NOT_CONFIGURED
            return result

        page = 1
        while page <= self.max_pages:
            fetched = await client.fetch_catalog_page(page=page, limit=self.page_size)
            if self.cache.generation != generation:
                result.products = []
                result.status = FetchStatus.ERROR
                result.error = STALE_SCAN_MESSAGE
                LOGGER.info("Catalogue scan abandoned on page %s: cache invalidated", page)
                break
            if fetched.failed:
                result.status = fetched.status
                result.error = fetched.error
                LOGGER.warning(
                    "Catalogue scan aborted on page %s; keeping %s products", page, len(result.products)
                )
                break

            resolved = fetched.value
            result.pages_fetched += 1
            if fetched.status == FetchStatus.SHAPE_MISMATCH:
                result.status = FetchStatus.SHAPE_MISMATCH
            if resolved.reported_total is not None:
                result.reported_total = resolved.reported_total

            if self.on_page is not None and resolved.records:
                self.on_page(resolved.records)
            result.products.extend(normalize_products(resolved.records))

            if len(resolved.records) < self.page_size:
                break
            if result.reported_total is not None and len(result.products) >= result.reported_total:
                break
            page += 1
        else:
            LOGGER.warning("Catalogue scan stopped at the %s page cap", self.max_pages)

        if result.status == FetchStatus.OK and not result.products:
            result.status = FetchStatus.EMPTY
        LOGGER.info("Catalogue scan fetched %s products in %s pages", len(result.products), result.pages_fetched)
        return result

    async def scan_cached(self) -> ScanResult:
        return await self.cache.get_or_refresh(self.scan, should_store=lambda result: result.complete)

    async def get_all_products(self) -> List[Product]:
        result = await self.scan_cached()
        return list(result.products)

    def invalidate(self) -> None:
        self.cache.invalidate()


__all__ = ["CatalogScanner", "ScanResult"]
