"""Mapping of raw Wedrop catalogue records into canonical :class:`Product` objects."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from .fields import FieldPolicy, is_present, number_policy, text_policy
from .models import Product, ProductImage
from .utils import format_measure, to_number


LOGGER = logging.getLogger(__name__)


DEFAULT_MIN_STOCK = 10
PRODUCT_NAME_PLACEHOLDER = "Produto sem nome"
CATEGORY_PLACEHOLDER = "Sem categoria"
SUPPLIER_PLACEHOLDER = "N/A"
DEFAULT_UNIT = "un"

IMAGE_SIZES = ("xl", "lg", "md", "sm", "xs")


def _fallback_sku(raw: Mapping[str, Any]) -> Optional[str]:
    if raw.get("id") is None:
        return None
    return f"SKU-{raw['id']}"


# Stock related policies use "??" semantics: an explicit 0 is a real value.
STOCK = number_policy("stock", "availableQuantity", "stock", "quantity", default=0)
MIN_STOCK = number_policy("min_stock", "minQuantityToSend", "minStock", "min_stock", default=DEFAULT_MIN_STOCK)
RESERVED = number_policy("reserved_quantity", "reservedQuantity", default=0)
MAX_STOCK = number_policy("max_stock", "maxQuantityToSend", "maxStock")
UNITS_BY_BOX = number_policy("units_by_box", "unitsByBox", default=1)

# Price like fields fall through zero values and default to 0.
PRICE = number_policy("price", "price", "sale_price", default=0, nonzero=True)
COST_PRICE = number_policy("cost_price", "cost", "cost_price", "costPrice", default=0, nonzero=True)
COST_WITH_TAXES = number_policy("cost_price_with_taxes", "priceCostWithTaxes", default=0, nonzero=True)

# Descriptive measurements stay undefined when missing, never "0 cm".
WEIGHT = number_policy("weight", "weight", nonzero=True)
BOX_WEIGHT = number_policy("box_weight", "boxWeight", nonzero=True)
HEIGHT = number_policy("height", "height", nonzero=True)
WIDTH = number_policy("width", "width", nonzero=True)
LENGTH = number_policy("length", "length", nonzero=True)

AVG_SELLS_7 = number_policy("avg_sells_quantity_past_7_days", "avgSellsQuantityPast7Days")
AVG_SELLS_15 = number_policy("avg_sells_quantity_past_15_days", "avgSellsQuantityPast15Days")
AVG_SELLS_30 = number_policy("avg_sells_quantity_past_30_days", "avgSellsQuantityPast30Days")
SOLD_QUANTITY = number_policy("sold_quantity", "soldQuantity", "sold_quantity")

SKU = text_policy("sku", "sku", "code", _fallback_sku)
SKU_SUPPLIER = text_policy("sku_supplier", "skuSuplier", "skuSupplier")
NAME = text_policy("name", "name", "title", default=PRODUCT_NAME_PLACEHOLDER)
FISCAL_NAME = text_policy("fiscal_name", "fiscalName")
DESCRIPTION = text_policy("description", "description", "short_description")
CATEGORY = text_policy("category", "category.name", "categoryName", default=CATEGORY_PLACEHOLDER)
CATEGORY_ID = FieldPolicy("category_id", ("categoryId", "category.id"))
UNIT = text_policy("unit", "unit", default=DEFAULT_UNIT)
SUPPLIER = text_policy("supplier", "suplier.name", "supplier.name", "supplierName", default=SUPPLIER_PLACEHOLDER)
SUPPLIER_ID = FieldPolicy("supplier_id", ("suplierId", "supplierId", "suplier.id", "supplier.id"))
SUPPLIER_STATE = text_policy("supplier_state", "suplierCorporate.state", "suplierCorporateState")
BRAND = text_policy("brand", "brand")
BARCODE = text_policy("barcode", "ean", "barcode", "gtin")
NCM = text_policy("ncm", "ncm")
CEST = text_policy("cest", "cest")
ORIGIN = text_policy("origin", "origin")
VIDEO_LINK = text_policy("video_link", "videoLink", "ytVideo")
CREATED_AT = text_policy("created_at", "created_at", "createdAt", default=None)
UPDATED_AT = text_policy("updated_at", "updated_at", "updatedAt", default=None)
IS_SELLING = FieldPolicy("is_selling", ("isSelling",), default=True, accept=is_present)


def _is_url_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


# Flat image fields used when the record carries no usable image list.
IMAGE_URL = FieldPolicy("image_url", ("image", "imageUrl"), accept=_is_url_text)


def _number(policy: FieldPolicy, raw: Mapping[str, Any]) -> Optional[float]:
    return to_number(policy.resolve(raw))


def _text(policy: FieldPolicy, raw: Mapping[str, Any]) -> Any:
    value = policy.resolve(raw)
    if isinstance(value, str):
        return value.strip()
    return value if value is None else str(value)


def _identifier(policy: FieldPolicy, raw: Mapping[str, Any]) -> Optional[str]:
    value = policy.resolve(raw)
    return None if value is None else str(value)


def derive_status(stock: float, min_stock: float, *, inactive: bool = False) -> str:
    """Status is a pure function of stock, threshold and the inactive flag.

    Zero stock always wins over an explicit inactive flag.
    """

    if stock == 0:
        return "out_of_stock"
    if stock <= min_stock:
        return "low_stock"
    if inactive:
        return "inactive"
    return "active"


def is_flagged_inactive(raw: Mapping[str, Any]) -> bool:
    return raw.get("status") == "inactive" or raw.get("active") is False


def parse_images(raw: Mapping[str, Any]) -> List[ProductImage]:
    images = raw.get("images")
    if not isinstance(images, list):
        return []
    parsed: List[ProductImage] = []
    for entry in images:
        if isinstance(entry, str):
            parsed.append(ProductImage(lg=entry))
            continue
        if not isinstance(entry, dict):
            continue
        parsed.append(
            ProductImage(
                xl=entry.get("xl"),
                lg=entry.get("lg"),
                md=entry.get("md"),
                sm=entry.get("sm"),
                xs=entry.get("xs"),
                is_cover=bool(entry.get("isCover")),
                key=entry.get("key"),
            )
        )
    return parsed


def select_cover(images: List[ProductImage]) -> Optional[ProductImage]:
    for image in images:
        if image.is_cover:
            return image
    return images[0] if images else None


def largest_url(image: Optional[ProductImage]) -> Optional[str]:
    if image is None:
        return None
    for size in IMAGE_SIZES:
        url = getattr(image, size)
        if _is_url_text(url):
            return url
    return None


def build_dimensions(width: Optional[float], height: Optional[float], length: Optional[float]) -> Optional[str]:
    if width is None or height is None or length is None:
        return None
    return f"{format_measure(width)} x {format_measure(height)} x {format_measure(length)} cm"


def normalize_product(raw: Mapping[str, Any]) -> Product:
    """Map one upstream record into a canonical :class:`Product`.

    Pure and total: the same record always yields the same product and no
    field combination makes it raise.
    """

    if not isinstance(raw, Mapping):
        raw = {}

    stock = _number(STOCK, raw) or 0
    min_stock = _number(MIN_STOCK, raw)
    if min_stock is None:
        min_stock = DEFAULT_MIN_STOCK

    images = parse_images(raw)
    cover = select_cover(images)
    image_url = largest_url(cover) or _text(IMAGE_URL, raw)

    width = _number(WIDTH, raw)
    height = _number(HEIGHT, raw)
    length = _number(LENGTH, raw)

    raw_id = raw.get("id")

    return Product(
        id="" if raw_id is None else str(raw_id),
        sku=_text(SKU, raw) or "",
        sku_supplier=_text(SKU_SUPPLIER, raw),
        name=_text(NAME, raw),
        fiscal_name=_text(FISCAL_NAME, raw),
        description=_text(DESCRIPTION, raw),
        category=_text(CATEGORY, raw),
        category_id=_identifier(CATEGORY_ID, raw),
        brand=_text(BRAND, raw),
        price=_number(PRICE, raw) or 0.0,
        cost_price=_number(COST_PRICE, raw) or 0.0,
        cost_price_with_taxes=_number(COST_WITH_TAXES, raw) or 0.0,
        stock=stock,
        reserved_quantity=_number(RESERVED, raw) or 0,
        min_stock=min_stock,
        max_stock=_number(MAX_STOCK, raw),
        unit=_text(UNIT, raw),
        units_by_box=_number(UNITS_BY_BOX, raw) or 1,
        status=derive_status(stock, min_stock, inactive=is_flagged_inactive(raw)),
        supplier=_text(SUPPLIER, raw),
        supplier_id=_identifier(SUPPLIER_ID, raw),
        supplier_state=_text(SUPPLIER_STATE, raw),
        barcode=_text(BARCODE, raw),
        ncm=_text(NCM, raw),
        cest=_text(CEST, raw),
        origin=_text(ORIGIN, raw),
        weight=_number(WEIGHT, raw),
        box_weight=_number(BOX_WEIGHT, raw),
        height=height,
        width=width,
        length=length,
        dimensions=build_dimensions(width, height, length),
        image_url=image_url,
        images=images,
        video_link=_text(VIDEO_LINK, raw),
        created_at=_text(CREATED_AT, raw),
        updated_at=_text(UPDATED_AT, raw),
        is_selling=bool(IS_SELLING.resolve(raw)),
        avg_sells_quantity_past_7_days=_number(AVG_SELLS_7, raw),
        avg_sells_quantity_past_15_days=_number(AVG_SELLS_15, raw),
        avg_sells_quantity_past_30_days=_number(AVG_SELLS_30, raw),
        sold_quantity=_number(SOLD_QUANTITY, raw),
    )


def normalize_products(records) -> List[Product]:
    return [normalize_product(record) for record in records]


__all__ = [
    "normalize_product",
    "normalize_products",
    "derive_status",
    "select_cover",
    "largest_url",
    "build_dimensions",
    "DEFAULT_MIN_STOCK",
    "PRODUCT_NAME_PLACEHOLDER",
    "CATEGORY_PLACEHOLDER",
    "SUPPLIER_PLACEHOLDER",
]
