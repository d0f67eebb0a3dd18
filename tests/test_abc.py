import pytest

from wedrop_inventory.core.abc import classify, sales_score, summarize
from wedrop_inventory.core.normalizer import normalize_product


def make_product(index: int, sold: float = None, **averages):
    record = {"id": index, "name": f"Produto {index}", "stock": 50}
    if sold is not None:
        record["soldQuantity"] = sold
    record.update(averages)
    return normalize_product(record)


def test_sales_score_weights_longer_windows_more():
    product = make_product(
        1,
        sold=4,
        avgSellsQuantityPast30Days=2,
        avgSellsQuantityPast15Days=1,
        avgSellsQuantityPast7Days=0.5,
    )

    assert sales_score(product) == pytest.approx(2 * 30 + 1 * 15 + 0.5 * 7 + 4)


def test_missing_aggregates_count_as_zero():
    assert sales_score(make_product(1)) == 0
    assert sales_score(make_product(2, avgSellsQuantityPast7Days=1)) == 7


def test_equal_scores_cross_the_b_boundary():
    products = [make_product(index, sold=100) for index in (1, 2, 3)]

    classified = classify(products)

    assert [item.classification for item in classified] == ["A", "A", "C"]
    assert [round(item.accumulated_percentage, 1) for item in classified] == [33.3, 66.7, 100.0]
    # stable ordering keeps ties in input order
    assert [item.product.id for item in classified] == ["1", "2", "3"]


def test_all_zero_scores_classify_as_a():
    classified = classify([make_product(index) for index in range(4)])

    assert {item.classification for item in classified} == {"A"}
    assert all(item.accumulated_percentage == 0 for item in classified)


def test_dominant_product_alone_fills_a():
    products = [make_product(1, sold=5), make_product(2, sold=790), make_product(3, sold=150), make_product(4, sold=55)]

    classified = classify(products)

    assert [item.product.id for item in classified] == ["2", "3", "4", "1"]
    assert [item.classification for item in classified] == ["A", "B", "C", "C"]
    shares = [item.accumulated_percentage for item in classified]
    assert shares == sorted(shares)
    for item in classified:
        if item.accumulated_percentage <= 80:
            assert item.classification == "A"
        elif item.accumulated_percentage <= 95:
            assert item.classification == "B"
        else:
            assert item.classification == "C"


def test_summary_counts_and_shares():
    products = [make_product(1, sold=80), make_product(2, sold=15), make_product(3, sold=5)]

    summary = summarize(classify(products))

    assert (summary.total_a, summary.total_b, summary.total_c) == (1, 1, 1)
    assert (summary.percent_a, summary.percent_b, summary.percent_c) == (80, 15, 5)
    assert summary.total_score == 100


def test_summary_of_empty_list():
    summary = summarize(classify([]))

    assert summary.total_a == summary.total_b == summary.total_c == 0
    assert summary.percent_a == 0
