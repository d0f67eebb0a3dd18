"""Dataclasses describing the canonical domain objects produced by the adapter."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, List, Optional, TypeVar


T = TypeVar("T")


@dataclass
class ProductImage:
    xl: Optional[str] = None
    lg: Optional[str] = None
    md: Optional[str] = None
    sm: Optional[str] = None
    xs: Optional[str] = None
    is_cover: bool = False
    key: Optional[str] = None


@dataclass
class Product:
    """Canonical product, independent of the upstream field naming."""

    id: str
    sku: str
    name: str
    description: str
    category: str
    price: float
    cost_price: float
    cost_price_with_taxes: float
    stock: float
    reserved_quantity: float
    min_stock: float
    unit: str
    units_by_box: float
    status: str
    supplier: str
    sku_supplier: str = ""
    fiscal_name: str = ""
    brand: str = ""
    category_id: Optional[str] = None
    max_stock: Optional[float] = None
    supplier_id: Optional[str] = None
    supplier_state: str = ""
    barcode: str = ""
    ncm: str = ""
    cest: str = ""
    origin: str = ""
    weight: Optional[float] = None
    box_weight: Optional[float] = None
    height: Optional[float] = None
    width: Optional[float] = None
    length: Optional[float] = None
    dimensions: Optional[str] = None
    image_url: Optional[str] = None
    images: List[ProductImage] = field(default_factory=list)
    video_link: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_selling: bool = True
    avg_sells_quantity_past_7_days: Optional[float] = None
    avg_sells_quantity_past_15_days: Optional[float] = None
    avg_sells_quantity_past_30_days: Optional[float] = None
    sold_quantity: Optional[float] = None


@dataclass
class StockMovement:
    id: str
    product_id: str
    type: str
    quantity: float
    previous_stock: float
    new_stock: float
    reason: str
    user_id: str
    user_name: str
    reference: Optional[str] = None
    created_at: Optional[str] = None
    # "observed", "derived_previous", "derived_new" or "defaulted"
    reconciliation: str = "observed"
    type_inferred: bool = False


@dataclass
class CatalogPage:
    products: List[Product]
    total: int
    page: int
    limit: int
    # FetchStatus value of the underlying request
    status: str = "ok"

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass
class Category:
    id: str
    name: str


@dataclass
class Supplier:
    id: str
    name: str


@dataclass
class DashboardStats:
    total_products: int = 0
    total_stock: float = 0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    total_value: float = 0.0


@dataclass
class ABCClassifiedProduct:
    product: Product
    classification: str
    sales_score: float
    accumulated_percentage: float


@dataclass
class ABCSummary:
    total_a: int = 0
    total_b: int = 0
    total_c: int = 0
    percent_a: int = 0
    percent_b: int = 0
    percent_c: int = 0
    total_score: float = 0.0


@dataclass
class DailySnapshot:
    date: str
    total_products: int
    total_stock: float
    total_value: float
    low_stock_products: int
    out_of_stock_products: int


class FetchStatus(str, Enum):
    """Outcome of an upstream call, kept distinct so callers can tell
    "confirmed empty" from "upstream failed"."""

    OK = "ok"
    EMPTY = "empty"
    SHAPE_MISMATCH = "shape_mismatch"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


@dataclass
class FetchResult(Generic[T]):
    status: FetchStatus
    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (FetchStatus.OK, FetchStatus.EMPTY)

    @property
    def failed(self) -> bool:
        return self.status in (FetchStatus.ERROR, FetchStatus.NOT_CONFIGURED)


__all__ = [
    "ProductImage",
    "Product",
    "StockMovement",
    "CatalogPage",
    "Category",
    "Supplier",
    "DashboardStats",
    "ABCClassifiedProduct",
    "ABCSummary",
    "DailySnapshot",
    "FetchStatus",
    "FetchResult",
]
