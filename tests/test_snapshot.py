from datetime import date

from wedrop_inventory.core.snapshot import SnapshotStore, build_snapshot

from tests.test_analytics import make_catalog


def test_build_snapshot_matches_dashboard_counts():
    snapshot = build_snapshot(make_catalog(), date(2026, 1, 5))

    assert snapshot.date == "2026-01-05"
    assert snapshot.total_products == 4
    assert snapshot.low_stock_products == 1
    assert snapshot.out_of_stock_products == 1
    assert snapshot.total_value == 460


def test_store_upserts_by_date(tmp_path):
    store = SnapshotStore(tmp_path / "data" / "snapshots.json")
    catalog = make_catalog()

    store.upsert(build_snapshot(catalog, date(2026, 1, 2)))
    store.upsert(build_snapshot(catalog[:1], date(2026, 1, 1)))
    store.upsert(build_snapshot(catalog[:2], date(2026, 1, 2)))

    snapshots = store.list()
    assert [snapshot.date for snapshot in snapshots] == ["2026-01-01", "2026-01-02"]
    assert snapshots[1].total_products == 2
    assert store.get("2026-01-01").total_products == 1
    assert store.get("2026-02-01") is None


def test_missing_file_lists_nothing(tmp_path):
    assert SnapshotStore(tmp_path / "missing.json").list() == []
