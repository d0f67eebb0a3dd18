"""High level orchestration used by the dashboard surfaces."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence

import httpx

from ..config import ApiConfig, Settings
from .abc import classify, summarize
from .analytics import category_distribution, dashboard_stats, stock_trend, top_selling
from .client import CatalogFilters, ConnectionCheck, WedropClient
from .facets import FacetExtractor
from .models import (
    ABCClassifiedProduct,
    ABCSummary,
    CatalogPage,
    Category,
    DailySnapshot,
    DashboardStats,
    Product,
    StockMovement,
    Supplier,
)
from .movements import reconcile_movements
from .normalizer import normalize_product, normalize_products
from .scanner import CatalogScanner, ScanResult
from .snapshot import SnapshotStore, build_snapshot


LOGGER = logging.getLogger(__name__)

SEARCH_LIMIT = 50


@dataclass
class ProductActivity:
    product: Product
    last_movement: Optional[StockMovement] = None


@dataclass
class ABCCurve:
    products: List[ABCClassifiedProduct]
    summary: ABCSummary


def _updated_key(product: Product) -> str:
    return product.updated_at or ""


def _created_key(movement: StockMovement) -> str:
    return movement.created_at or ""


class InventoryService:
    """Coordinates the client, the catalogue scanner and the facet sets."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self._transport = transport
        self.facets = FacetExtractor()
        self.snapshots = SnapshotStore(settings.paths.snapshot_file)
        self.client = self._build_client(settings.api)
        self.scanner = CatalogScanner(
            self.client,
            page_size=settings.scan.page_size,
            max_pages=settings.scan.max_pages,
            ttl_seconds=settings.scan.cache_ttl_seconds,
            on_page=self.facets.extract,
        )
        self._fingerprint = settings.api.fingerprint()

    def _build_client(self, api: ApiConfig) -> WedropClient:
        return WedropClient(
            api,
            movement_endpoints=self.settings.movements.endpoints,
            transport=self._transport,
        )

    @property
    def is_configured(self) -> bool:
        return self.client.is_configured

    def configure(self, api: ApiConfig) -> None:
        """Swap the upstream connection.

        A different base URL or token drops the cached scan and the facets
        collected from the previous upstream.
        """

        self.settings.api = api
        self.client = self._build_client(api)
        self.scanner.client = self.client
        fingerprint = api.fingerprint()
        if fingerprint != self._fingerprint:
            LOGGER.info("API connection changed; clearing cached catalogue and facets")
            self.invalidate()
            self.facets.reset()
        self._fingerprint = fingerprint

    def invalidate(self) -> None:
        self.scanner.invalidate()

    async def get_products(
        self,
        page: int = 1,
        limit: int = 50,
        search: str = "",
        filters: Optional[CatalogFilters] = None,
    ) -> CatalogPage:
        generation = self.scanner.cache.generation
        result = await self.client.fetch_catalog_page(page=page, limit=limit, search=search, filters=filters)
        resolved = result.value
        # facets reset by a connection change must not see the old upstream
        if resolved.records and generation == self.scanner.cache.generation:
            self.facets.extract(resolved.records)
        total = resolved.total if result.ok else 0
        return CatalogPage(
            products=normalize_products(resolved.records),
            total=total,
            page=page,
            limit=limit,
            status=result.status.value,
        )

    async def search_products(self, query: str) -> List[Product]:
        page = await self.get_products(page=1, limit=SEARCH_LIMIT, search=query)
        return page.products

    async def get_product(self, product_id: str) -> Optional[Product]:
        result = await self.client.fetch_product(product_id)
        if result.value is None:
            return None
        return normalize_product(result.value)

    async def get_product_movements(self, product_id: str) -> List[StockMovement]:
        result = await self.client.fetch_movements(product_id)
        return reconcile_movements(result.value, product_id)

    async def get_movements_for_products(self, product_ids: Sequence[str]) -> Dict[str, List[StockMovement]]:
        """Fetch the movement history of several products concurrently."""

        histories = await asyncio.gather(*(self.get_product_movements(pid) for pid in product_ids))
        return dict(zip(product_ids, histories))

    async def scan(self) -> ScanResult:
        return await self.scanner.scan_cached()

    async def get_all_products(self) -> List[Product]:
        return await self.scanner.get_all_products()

    async def get_dashboard_stats(self) -> DashboardStats:
        return dashboard_stats(await self.get_all_products())

    async def get_abc_curve(self) -> ABCCurve:
        classified = classify(await self.get_all_products())
        return ABCCurve(products=classified, summary=summarize(classified))

    async def get_category_distribution(self) -> List[dict]:
        return category_distribution(await self.get_all_products())

    async def get_top_selling_products(self, limit: int = 5) -> List[dict]:
        return top_selling(await self.get_all_products(), limit=limit)

    async def get_recent_movement_products(self, limit: int = 5) -> List[ProductActivity]:
        """Most recently updated products paired with their latest movement."""

        products = await self.get_all_products()
        recent = sorted(products, key=_updated_key, reverse=True)[:limit]
        histories = await self.get_movements_for_products([product.id for product in recent])
        activity = []
        for product in recent:
            movements = histories.get(product.id) or []
            latest = max(movements, key=_created_key) if movements else None
            activity.append(ProductActivity(product=product, last_movement=latest))
        return activity

    async def _ensure_facets(self) -> None:
        if self.facets.is_empty and self.is_configured:
            await self.scanner.scan_cached()

    async def get_categories(self) -> List[Category]:
        await self._ensure_facets()
        return self.facets.categories

    async def get_suppliers(self) -> List[Supplier]:
        await self._ensure_facets()
        return self.facets.suppliers

    async def test_connection(self) -> ConnectionCheck:
        return await self.client.test_connection()

    async def take_snapshot(self, day: Optional[date] = None) -> Optional[DailySnapshot]:
        """Scan the catalogue and store today's aggregate row.

        Nothing is stored when the scan did not complete, so a failed run
        never overwrites a good snapshot with partial numbers.
        """

        result = await self.scanner.scan_cached()
        if not result.complete:
            LOGGER.warning("Snapshot skipped: catalogue scan ended with status %s", result.status.value)
            return None
        snapshot = build_snapshot(result.products, day)
        self.snapshots.upsert(snapshot)
        return snapshot

    def get_stock_trend(self, days: int = 30) -> List[dict]:
        return stock_trend(self.snapshots.list(), days=days)


__all__ = ["InventoryService", "ProductActivity", "ABCCurve"]
