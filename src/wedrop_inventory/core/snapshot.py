"""Daily stock snapshots persisted as a JSON document keyed by date."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from .analytics import dashboard_stats
from .models import DailySnapshot, Product
from .utils import dump_json, load_json


LOGGER = logging.getLogger(__name__)


def build_snapshot(products: Iterable[Product], day: Optional[date] = None) -> DailySnapshot:
    """Aggregate a full scan into the row stored for ``day`` (today by default).

    Status counts come from the derived product status so the stored history
    matches the live dashboard.
    """

    day = day or date.today()
    stats = dashboard_stats(products)
    return DailySnapshot(
        date=day.isoformat(),
        total_products=stats.total_products,
        total_stock=stats.total_stock,
        total_value=round(stats.total_value, 2),
        low_stock_products=stats.low_stock_products,
        out_of_stock_products=stats.out_of_stock_products,
    )


class SnapshotStore:
    """One snapshot per date; saving the same date again replaces it."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict:
        data = load_json(self.path) or {}
        snapshots = data.get("snapshots", {})
        if not isinstance(snapshots, dict):
            raise ValueError(f"Malformed snapshot file: {self.path}")
        return snapshots

    def upsert(self, snapshot: DailySnapshot) -> None:
        snapshots = self._read()
        replaced = snapshot.date in snapshots
        snapshots[snapshot.date] = asdict(snapshot)
        dump_json(self.path, {"snapshots": dict(sorted(snapshots.items()))})
        LOGGER.info("%s snapshot for %s in %s", "Updated" if replaced else "Saved", snapshot.date, self.path)

    def get(self, day: str) -> Optional[DailySnapshot]:
        row = self._read().get(day)
        return DailySnapshot(**row) if row else None

    def list(self) -> List[DailySnapshot]:
        return [DailySnapshot(**row) for _, row in sorted(self._read().items())]


__all__ = ["build_snapshot", "SnapshotStore"]
