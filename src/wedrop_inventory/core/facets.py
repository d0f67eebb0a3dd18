"""Accumulation of the category and supplier filter options."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .fields import FieldPolicy, text_policy
from .models import Category, Supplier
from .utils import fold_text


LOGGER = logging.getLogger(__name__)


CATEGORY_ID = FieldPolicy("category_id", ("categoryId", "category.id"))
CATEGORY_NAME = text_policy("category_name", "category.name", "categoryName", default=None)
SUPPLIER_ID = FieldPolicy("supplier_id", ("suplierId", "supplierId", "suplier.id", "supplier.id"))
SUPPLIER_NAME = text_policy("supplier_name", "suplier.name", "supplier.name", "supplierName", default=None)


def _pair(raw: Mapping[str, Any], id_policy: FieldPolicy, name_policy: FieldPolicy) -> Optional[Tuple[str, str]]:
    identifier = id_policy.resolve(raw)
    name = name_policy.resolve(raw)
    if identifier is None or name is None:
        return None
    identifier = str(identifier).strip()
    name = str(name).strip()
    if not identifier or not name:
        return None
    return identifier, name


def _sort_key(entry) -> Tuple[str, str]:
    return fold_text(entry.name), entry.id


class FacetExtractor:
    """Builds deduplicated, alphabetically sorted categories and suppliers.

    The sets only grow: the first name seen for an id is kept and later
    duplicates are ignored.  Call :meth:`reset` when the upstream connection
    changes.
    """

    def __init__(self) -> None:
        self._categories: Dict[str, Category] = {}
        self._suppliers: Dict[str, Supplier] = {}
        self._sorted_categories: List[Category] = []
        self._sorted_suppliers: List[Supplier] = []

    @property
    def categories(self) -> List[Category]:
        return list(self._sorted_categories)

    @property
    def suppliers(self) -> List[Supplier]:
        return list(self._sorted_suppliers)

    @property
    def is_empty(self) -> bool:
        return not self._categories and not self._suppliers

    def extract(self, records: Iterable[Mapping[str, Any]]) -> None:
        added = 0
        for raw in records:
            if not isinstance(raw, Mapping):
                continue
            category = _pair(raw, CATEGORY_ID, CATEGORY_NAME)
            if category and category[0] not in self._categories:
                self._categories[category[0]] = Category(id=category[0], name=category[1])
                added += 1
            supplier = _pair(raw, SUPPLIER_ID, SUPPLIER_NAME)
            if supplier and supplier[0] not in self._suppliers:
                self._suppliers[supplier[0]] = Supplier(id=supplier[0], name=supplier[1])
                added += 1

        self._sorted_categories = sorted(self._categories.values(), key=_sort_key)
        self._sorted_suppliers = sorted(self._suppliers.values(), key=_sort_key)
        if added:
            LOGGER.debug(
                "Facets now hold %s categories and %s suppliers",
                len(self._categories),
                len(self._suppliers),
            )

    def reset(self) -> None:
        self._categories.clear()
        self._suppliers.clear()
        self._sorted_categories = []
        self._sorted_suppliers = []


__all__ = ["FacetExtractor"]
