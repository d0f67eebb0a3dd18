"""ABC curve classification of products by sales velocity."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .models import ABCClassifiedProduct, ABCSummary, Product
from .utils import round_half_up


THRESHOLD_A = 80.0
THRESHOLD_B = 95.0

# Longer rolling windows weigh more.
WINDOW_WEIGHTS = (
    ("avg_sells_quantity_past_30_days", 30),
    ("avg_sells_quantity_past_15_days", 15),
    ("avg_sells_quantity_past_7_days", 7),
)


def _value(number: Optional[float]) -> float:
    return number or 0.0


def sales_score(product: Product) -> float:
    """Weighted sum of the rolling sales averages plus lifetime sold quantity.

    Missing aggregates count as zero.
    """

    score = sum(_value(getattr(product, name)) * weight for name, weight in WINDOW_WEIGHTS)
    return score + _value(product.sold_quantity)


def tier_for(accumulated_percentage: float) -> str:
    if accumulated_percentage <= THRESHOLD_A:
        return "A"
    if accumulated_percentage <= THRESHOLD_B:
        return "B"
    return "C"


def classify(products: Iterable[Product]) -> List[ABCClassifiedProduct]:
    """Rank products by score and assign tiers on the cumulative score share.

    The sort is stable, so tied products keep their input order.  When every
    score is zero the cumulative share stays at 0% and every product is ``A``.
    """

    scored = [(product, sales_score(product)) for product in products]
    scored.sort(key=lambda item: item[1], reverse=True)
    total = sum(score for _, score in scored)

    classified: List[ABCClassifiedProduct] = []
    accumulated = 0.0
    for product, score in scored:
        accumulated += score
        percentage = accumulated * 100 / total if total > 0 else 0.0
        classified.append(
            ABCClassifiedProduct(
                product=product,
                classification=tier_for(percentage),
                sales_score=score,
                accumulated_percentage=percentage,
            )
        )
    return classified


def summarize(classified: Iterable[ABCClassifiedProduct]) -> ABCSummary:
    """Count products per tier and the share of the total score each holds."""

    classified = list(classified)
    counts = {"A": 0, "B": 0, "C": 0}
    scores = {"A": 0.0, "B": 0.0, "C": 0.0}
    for item in classified:
        counts[item.classification] += 1
        scores[item.classification] += item.sales_score
    total = sum(scores.values())

    def share(tier: str) -> int:
        if total <= 0:
            return 0
        return round_half_up(scores[tier] * 100 / total)

    return ABCSummary(
        total_a=counts["A"],
        total_b=counts["B"],
        total_c=counts["C"],
        percent_a=share("A"),
        percent_b=share("B"),
        percent_c=share("C"),
        total_score=total,
    )


__all__ = ["classify", "summarize", "sales_score", "tier_for", "THRESHOLD_A", "THRESHOLD_B"]
