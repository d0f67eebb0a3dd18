"""Utility helpers used across the project."""

from __future__ import annotations

import json
import math
import unicodedata
from pathlib import Path
from typing import Any, Optional


def ensure_directory(path: Path) -> None:
    """Create ``path`` when it does not exist."""

    path.mkdir(parents=True, exist_ok=True)


def strip_accents(text: str) -> str:
    """Remove diacritics from ``text``."""

    normalized = unicodedata.normalize("NFD", text)
    return "".join(char for char in normalized if unicodedata.category(char) != "Mn")


def fold_text(value: Any) -> str:
    """Lowercase, accent-free and trimmed representation used for lookups."""

    if value is None:
        return ""
    return strip_accents(str(value)).strip().lower()


def to_number(value: Any) -> Optional[float]:
    """Coerce ``value`` to a finite float, returning ``None`` when impossible.

    Strings using a decimal comma (``"12,50"``) are accepted.  Booleans are
    rejected so that flags never leak into numeric fields.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(",", ".")
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def format_measure(value: float) -> str:
    """Render ``10.0`` as ``"10"`` and ``10.5`` as ``"10.5"``."""

    return f"{value:g}"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def dump_json(path: Path, data) -> None:
    ensure_directory(path.parent)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)


def load_json(path: Path) -> Optional[dict]:
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


__all__ = [
    "ensure_directory",
    "strip_accents",
    "fold_text",
    "to_number",
    "format_measure",
    "round_half_up",
    "dump_json",
    "load_json",
]
