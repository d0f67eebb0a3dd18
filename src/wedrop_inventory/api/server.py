"""FastAPI application exposing the inventory service as JSON."""

from dataclasses import asdict
from typing import List, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from ..config import ApiConfig, Settings
from ..core.client import ApiNotConfiguredError, CatalogFilters
from ..core.service import InventoryService


def create_app(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    app = FastAPI(title="Wedrop Inventory")
    service = InventoryService(settings, transport=transport)

    class ConnectionRequest(BaseModel):
        base_url: str
        token: str
        timeout: Optional[float] = None

    def get_service() -> InventoryService:
        return service

    @app.get("/health")
    async def health(inventory: InventoryService = Depends(get_service)) -> dict:
        return {"status": "ok", "configured": inventory.is_configured}

    @app.get("/products")
    async def list_products(
        page: int = 1,
        limit: int = 50,
        search: str = "",
        category_id: Optional[str] = None,
        supplier_id: Optional[str] = None,
        brand: Optional[str] = None,
        inventory: InventoryService = Depends(get_service),
    ) -> dict:
        filters = CatalogFilters(category_id=category_id, supplier_id=supplier_id, brand=brand)
        result = await inventory.get_products(page=page, limit=limit, search=search, filters=filters)
        payload = asdict(result)
        payload["total_pages"] = result.total_pages
        return payload

    @app.get("/products/top-selling")
    async def top_selling(limit: int = 5, inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return await inventory.get_top_selling_products(limit=limit)

    @app.get("/products/recent-movements")
    async def recent_movements(limit: int = 5, inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return [asdict(item) for item in await inventory.get_recent_movement_products(limit=limit)]

    @app.get("/products/{product_id}")
    async def get_product(product_id: str, inventory: InventoryService = Depends(get_service)) -> dict:
        product = await inventory.get_product(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail="Produto não encontrado")
        return asdict(product)

    @app.get("/products/{product_id}/movements")
    async def get_movements(product_id: str, inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return [asdict(movement) for movement in await inventory.get_product_movements(product_id)]

    @app.get("/stats")
    async def stats(inventory: InventoryService = Depends(get_service)) -> dict:
        return asdict(await inventory.get_dashboard_stats())

    @app.get("/stats/categories")
    async def categories_distribution(inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return await inventory.get_category_distribution()

    @app.get("/stats/trend")
    async def stock_trend(days: int = 30, inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return inventory.get_stock_trend(days=days)

    @app.get("/abc")
    async def abc_curve(inventory: InventoryService = Depends(get_service)) -> dict:
        curve = await inventory.get_abc_curve()
        return asdict(curve)

    @app.get("/categories")
    async def categories(inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return [asdict(category) for category in await inventory.get_categories()]

    @app.get("/suppliers")
    async def suppliers(inventory: InventoryService = Depends(get_service)) -> List[dict]:
        return [asdict(supplier) for supplier in await inventory.get_suppliers()]

    @app.put("/connection")
    async def configure(request: ConnectionRequest, inventory: InventoryService = Depends(get_service)) -> dict:
        timeout = request.timeout or inventory.settings.api.timeout
        inventory.configure(ApiConfig(base_url=request.base_url, token=request.token, timeout=timeout))
        return {"status": "configured", "configured": inventory.is_configured}

    @app.post("/connection/test")
    async def test_connection(inventory: InventoryService = Depends(get_service)) -> dict:
        try:
            check = await inventory.test_connection()
        except ApiNotConfiguredError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return asdict(check)

    @app.post("/cache/invalidate")
    async def invalidate_cache(inventory: InventoryService = Depends(get_service)) -> dict:
        inventory.invalidate()
        return {"status": "invalidated"}

    @app.post("/snapshots")
    async def take_snapshot(inventory: InventoryService = Depends(get_service)) -> dict:
        snapshot = await inventory.take_snapshot()
        if snapshot is None:
            raise HTTPException(status_code=502, detail="Não foi possível ler o catálogo completo")
        return asdict(snapshot)

    return app


__all__ = ["create_app"]
