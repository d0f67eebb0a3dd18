"""Locate the record array inside the heterogeneous upstream payloads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .utils import to_number


LOGGER = logging.getLogger(__name__)

# Probed in this order; the first non-empty list wins.
CATALOG_CONTAINER_KEYS = ("results", "data", "products", "items")
MOVEMENT_CONTAINER_KEYS = ("data", "movements", "results", "items")
DETAIL_CONTAINER_KEYS = ("data", "product")
TOTAL_KEYS = ("total", "count", "totalCount", "total_count")

ARRAY_CONTAINER = "<array>"


@dataclass
class ResolvedPayload:
    records: List[Dict[str, Any]] = field(default_factory=list)
    reported_total: Optional[int] = None
    container: Optional[str] = None
    recognized: bool = False

    @property
    def total(self) -> int:
        if self.reported_total:
            return self.reported_total
        return len(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


def _records(values: List[Any]) -> List[Dict[str, Any]]:
    return [value for value in values if isinstance(value, dict)]


def _reported_total(payload: Dict[str, Any]) -> Optional[int]:
    for key in TOTAL_KEYS:
        number = to_number(payload.get(key))
        if number is not None and number > 0:
            return int(number)
    return None


def resolve(payload: Any, container_keys: Sequence[str] = CATALOG_CONTAINER_KEYS) -> ResolvedPayload:
    """Return the records and total carried by ``payload``.

    Never raises.  ``recognized`` is ``False`` when no known container shape
    was found, which lets callers tell a shape mismatch apart from a
    legitimately empty page.
    """

    if isinstance(payload, list):
        records = _records(payload)
        return ResolvedPayload(records=records, container=ARRAY_CONTAINER, recognized=True)

    if not isinstance(payload, dict):
        LOGGER.info("Unrecognized payload type %s", type(payload).__name__)
        return ResolvedPayload()

    recognized = False
    for key in container_keys:
        value = payload.get(key)
        if not isinstance(value, list):
            continue
        recognized = True
        if value:
            return ResolvedPayload(
                records=_records(value),
                reported_total=_reported_total(payload),
                container=key,
                recognized=True,
            )

    if not recognized:
        LOGGER.info("No known container key in payload (keys: %s)", sorted(payload)[:10])
    return ResolvedPayload(recognized=recognized)


def resolve_one(payload: Any) -> Optional[Dict[str, Any]]:
    """Unwrap a detail endpoint payload into a single raw record."""

    if not isinstance(payload, dict):
        return None
    for key in DETAIL_CONTAINER_KEYS:
        value = payload.get(key)
        if isinstance(value, dict) and value:
            return value
    return payload or None


__all__ = [
    "ResolvedPayload",
    "resolve",
    "resolve_one",
    "CATALOG_CONTAINER_KEYS",
    "MOVEMENT_CONTAINER_KEYS",
    "TOTAL_KEYS",
]
