"""Dashboard aggregates computed over a catalogue scan."""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, Iterable, List

import pandas as pd

from .abc import sales_score
from .models import DailySnapshot, DashboardStats, Product


FRAME_COLUMNS = ["id", "name", "category", "supplier", "status", "stock", "price", "sales_score"]


def products_frame(products: Iterable[Product]) -> pd.DataFrame:
    """Tabular view of the products with the columns used by the aggregates."""

    rows = [
        {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "supplier": product.supplier,
            "status": product.status,
            "stock": float(product.stock),
            "price": float(product.price),
            "sales_score": sales_score(product),
        }
        for product in products
    ]
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def dashboard_stats(products: Iterable[Product]) -> DashboardStats:
    """Headline numbers, counted from the derived product status."""

    df = products_frame(products)
    if df.empty:
        return DashboardStats()

    status_counts = df["status"].value_counts()
    return DashboardStats(
        total_products=int(len(df)),
        total_stock=float(df["stock"].sum()),
        low_stock_products=int(status_counts.get("low_stock", 0)),
        out_of_stock_products=int(status_counts.get("out_of_stock", 0)),
        total_value=float((df["price"] * df["stock"]).sum()),
    )


def category_distribution(products: Iterable[Product]) -> List[Dict[str, object]]:
    """Product count and stock per category, largest categories first."""

    df = products_frame(products)
    if df.empty:
        return []

    grouped = (
        df.groupby("category", sort=False)
        .agg(value=("id", "size"), stock=("stock", "sum"))
        .reset_index()
        .sort_values(["value", "category"], ascending=[False, True], kind="mergesort")
    )
    return [
        {"name": row.category, "value": int(row.value), "stock": float(row.stock)}
        for row in grouped.itertuples(index=False)
    ]


def top_selling(products: Iterable[Product], limit: int = 5) -> List[Dict[str, object]]:
    """Best sellers by sales score, skipping products without any sales."""

    df = products_frame(products)
    if df.empty:
        return []

    ranked = df[df["sales_score"] > 0].sort_values("sales_score", ascending=False, kind="mergesort")
    return [
        {"name": row.name, "sales": float(row.sales_score), "stock": float(row.stock)}
        for row in ranked.head(limit).itertuples(index=False)
    ]


def stock_trend(snapshots: Iterable[DailySnapshot], days: int = 30) -> List[Dict[str, object]]:
    """Daily stock and value series for the most recent ``days`` snapshots."""

    rows = [asdict(snapshot) for snapshot in snapshots]
    if not rows:
        return []

    df = pd.DataFrame(rows).drop_duplicates("date", keep="last").sort_values("date").tail(days)
    return [
        {"date": row.date, "stock": float(row.total_stock), "value": float(row.total_value)}
        for row in df.itertuples(index=False)
    ]


__all__ = [
    "products_frame",
    "dashboard_stats",
    "category_distribution",
    "top_selling",
    "stock_trend",
]
