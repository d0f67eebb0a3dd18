"""Reconciliation of raw stock movement records.

Upstream movement records rarely carry both sides of the stock trail.  The
reconciler normalises the movement type and derives whichever of
``previous_stock``/``new_stock`` is missing from the other side, the movement
quantity and its direction.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .fields import FieldPolicy, number_policy, text_policy
from .models import StockMovement
from .utils import fold_text, to_number


LOGGER = logging.getLogger(__name__)


# Keys are accent-free and lowercase; lookups go through ``fold_text``.
MOVEMENT_TYPE_CODES = {
    "e": "entry",
    "entrada": "entry",
    "entry": "entry",
    "in": "entry",
    "s": "exit",
    "saida": "exit",
    "exit": "exit",
    "out": "exit",
    "venda": "exit",
    "a": "adjustment",
    "ajuste": "adjustment",
    "adjustment": "adjustment",
    "d": "return",
    "r": "return",
    "devolucao": "return",
    "estorno": "return",
    "return": "return",
}

DEFAULT_REASON = "Movimentação"
DEFAULT_USER_ID = "system"
DEFAULT_USER_NAME = "Sistema"

# "avaiableQuantity" is a typo shipped by the upstream API and must stay literal.
NEW_STOCK = number_policy(
    "new_stock",
    "balance",
    "avaiableQuantity",
    "availableQuantity",
    "new_stock",
    "newStock",
    "current_stock",
    "currentStock",
)
PREVIOUS_STOCK = number_policy("previous_stock", "previous_stock", "previousStock", "previousQuantity")
QUANTITY = number_policy("quantity", "quantity", "qty", default=0)
MOVEMENT_TYPE = FieldPolicy("type", ("type", "movementType", "operation"))
REASON = text_policy("reason", "reason", "description", "note", default=DEFAULT_REASON)
REFERENCE = text_policy("reference", "reference", "order_id", "document", default=None)
PRODUCT_ID = text_policy("product_id", "product_id", "productId", default=None)
USER_ID = text_policy("user_id", "user_id", "userId", default=DEFAULT_USER_ID)
USER_NAME = text_policy("user_name", "user_name", "userName", "user.name", default=DEFAULT_USER_NAME)
CREATED_AT = text_policy("created_at", "created_at", "createdAt", "date", default=None)


def lookup_movement_type(value: Any) -> Optional[str]:
    """Primary path: map a known code or word to a canonical type."""

    if value is None:
        return None
    return MOVEMENT_TYPE_CODES.get(fold_text(value))


def infer_type_from_quantity(signed_quantity: float) -> str:
    """Fallback path: best-effort guess used only when the type is unknown."""

    return "entry" if signed_quantity > 0 else "exit"


def reconcile_stock(
    movement_type: str,
    quantity: float,
    previous_stock: Optional[float],
    new_stock: Optional[float],
):
    """Return ``(previous, new, how)`` with the missing side derived.

    ``quantity`` is the non-negative magnitude.  Exits consumed stock, so the
    previous level was higher; every other type added stock.  Both values are
    clamped at zero.
    """

    sign = -1 if movement_type == "exit" else 1

    if previous_stock is not None and new_stock is not None:
        how = "observed"
    elif new_stock is not None:
        previous_stock = new_stock - sign * quantity
        how = "derived_previous"
    elif previous_stock is not None:
        new_stock = previous_stock + sign * quantity
        how = "derived_new"
    else:
        previous_stock = new_stock = 0
        how = "defaulted"

    return max(previous_stock, 0), max(new_stock, 0), how


def _text(policy: FieldPolicy, raw: Mapping[str, Any]) -> Optional[str]:
    value = policy.resolve(raw)
    if value is None:
        return None
    return str(value).strip()


def reconcile_movement(raw: Mapping[str, Any], product_id: str) -> StockMovement:
    if not isinstance(raw, Mapping):
        raw = {}

    signed_quantity = to_number(QUANTITY.resolve(raw)) or 0
    quantity = abs(signed_quantity)

    raw_type = MOVEMENT_TYPE.resolve(raw)
    movement_type = lookup_movement_type(raw_type)
    type_inferred = movement_type is None
    if type_inferred:
        movement_type = infer_type_from_quantity(signed_quantity)
        LOGGER.info(
            "Movement %s of product %s has %s type %r; inferred %s from quantity %s",
            raw.get("id"),
            product_id,
            "no" if raw_type is None else "unknown",
            raw_type,
            movement_type,
            signed_quantity,
        )

    previous_stock, new_stock, how = reconcile_stock(
        movement_type,
        quantity,
        to_number(PREVIOUS_STOCK.resolve(raw)),
        to_number(NEW_STOCK.resolve(raw)),
    )
    if how == "defaulted":
        LOGGER.info("Movement %s of product %s carries no stock levels; defaulting to 0", raw.get("id"), product_id)

    raw_id = raw.get("id")
    return StockMovement(
        id="" if raw_id is None else str(raw_id),
        product_id=_text(PRODUCT_ID, raw) or str(product_id),
        type=movement_type,
        quantity=quantity,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=_text(REASON, raw) or DEFAULT_REASON,
        reference=_text(REFERENCE, raw),
        user_id=_text(USER_ID, raw) or DEFAULT_USER_ID,
        user_name=_text(USER_NAME, raw) or DEFAULT_USER_NAME,
        created_at=_text(CREATED_AT, raw),
        reconciliation=how,
        type_inferred=type_inferred,
    )


def reconcile_movements(records, product_id: str):
    return [reconcile_movement(record, product_id) for record in records]


__all__ = [
    "MOVEMENT_TYPE_CODES",
    "lookup_movement_type",
    "infer_type_from_quantity",
    "reconcile_stock",
    "reconcile_movement",
    "reconcile_movements",
]
