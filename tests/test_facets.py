from wedrop_inventory.core.facets import FacetExtractor


def test_first_seen_name_wins_and_sets_are_sorted():
    facets = FacetExtractor()

    facets.extract(
        [
            {"category": {"id": 2, "name": "Utilidades"}, "suplier": {"id": 10, "name": "Zeta"}},
            {"category": {"id": 1, "name": "Ácidos"}, "suplier": {"id": 11, "name": "alfa"}},
            {"category": {"id": 2, "name": "Renomeada"}},
        ]
    )

    assert [(c.id, c.name) for c in facets.categories] == [("1", "Ácidos"), ("2", "Utilidades")]
    assert [(s.id, s.name) for s in facets.suppliers] == [("11", "alfa"), ("10", "Zeta")]


def test_sets_accumulate_across_batches():
    facets = FacetExtractor()

    facets.extract([{"categoryId": 5, "categoryName": "Banho"}])
    facets.extract([{"categoryId": 3, "categoryName": "Area externa"}, {"supplierId": 4, "supplierName": "Beta"}])

    assert [c.name for c in facets.categories] == ["Area externa", "Banho"]
    assert [s.name for s in facets.suppliers] == ["Beta"]


def test_incomplete_pairs_are_ignored():
    facets = FacetExtractor()

    facets.extract([{"category": {"id": 1}}, {"category": {"name": "Sem id"}}, "junk", {"suplier": {"id": 2, "name": " "}}])

    assert facets.is_empty


def test_reset_clears_everything():
    facets = FacetExtractor()
    facets.extract([{"category": {"id": 1, "name": "Casa"}}])

    facets.reset()

    assert facets.categories == []
    assert facets.is_empty
