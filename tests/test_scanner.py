import httpx
import pytest

from wedrop_inventory.core.cache import TTLCache
from wedrop_inventory.core.models import FetchStatus
from wedrop_inventory.core.scanner import CatalogScanner

from tests.test_cache import FakeClock
from tests.test_client import build_client, make_raw_product


def catalog_handler(total: int, *, report_total: bool = True, fail_on_page: int = None, calls: list = None):
    """Serve ``total`` products, honouring the ``page``/``limit`` query parameters."""

    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        limit = int(request.url.params["limit"])
        if calls is not None:
            calls.append(page)
        if fail_on_page == page:
            return httpx.Response(503)
        start = (page - 1) * limit
        items = [make_raw_product(index) for index in range(start + 1, min(start + limit, total) + 1)]
        body = {"results": items}
        if report_total:
            body["total"] = total
        return httpx.Response(200, json=body)

    return handler


def build_scanner(handler, **kwargs) -> CatalogScanner:
    kwargs.setdefault("page_size", 10)
    return CatalogScanner(build_client(handler), **kwargs)


@pytest.mark.asyncio
async def test_scan_stops_on_short_page():
    calls = []
    scanner = build_scanner(catalog_handler(25, report_total=False, calls=calls))

    result = await scanner.scan()

    assert result.status == FetchStatus.OK
    assert len(result.products) == 25
    assert calls == [1, 2, 3]
    assert result.pages_fetched == 3


@pytest.mark.asyncio
async def test_scan_stops_when_reported_total_reached():
    calls = []
    scanner = build_scanner(catalog_handler(20, calls=calls))

    result = await scanner.scan()

    assert len(result.products) == 20
    # a full second page would otherwise trigger a third request
    assert calls == [1, 2]


@pytest.mark.asyncio
async def test_scan_respects_page_cap():
    calls = []
    scanner = build_scanner(catalog_handler(1000, calls=calls), max_pages=3)

    result = await scanner.scan()

    assert calls == [1, 2, 3]
    assert len(result.products) == 30


@pytest.mark.asyncio
async def test_failure_mid_scan_returns_partial_products():
    scanner = build_scanner(catalog_handler(50, fail_on_page=3))

    result = await scanner.scan()

    assert result.status == FetchStatus.ERROR
    assert len(result.products) == 20
    assert not result.complete


@pytest.mark.asyncio
async def test_partial_scan_is_not_cached():
    calls = []
    handler = catalog_handler(50, fail_on_page=2, calls=calls)
    scanner = build_scanner(handler)

    first = await scanner.get_all_products()
    second = await scanner.get_all_products()

    assert len(first) == len(second) == 10
    assert calls == [1, 2, 1, 2]


@pytest.mark.asyncio
async def test_second_scan_within_ttl_issues_no_requests():
    calls = []
    clock = FakeClock()
    scanner = build_scanner(catalog_handler(15, calls=calls), cache=TTLCache(300, clock=clock))

    first = await scanner.get_all_products()
    requests_after_first = len(calls)
    second = await scanner.get_all_products()

    assert len(calls) == requests_after_first
    assert first == second

    clock.advance(301)
    await scanner.get_all_products()
    assert len(calls) == requests_after_first * 2


@pytest.mark.asyncio
async def test_invalidate_forces_rescan():
    calls = []
    scanner = build_scanner(catalog_handler(5, calls=calls))

    await scanner.get_all_products()
    scanner.invalidate()
    await scanner.get_all_products()

    assert calls == [1, 1]


@pytest.mark.asyncio
async def test_on_page_receives_raw_records():
    pages = []
    scanner = build_scanner(catalog_handler(12), on_page=pages.append)

    await scanner.scan()

    assert [len(records) for records in pages] == [10, 2]
    assert pages[0][0]["sku"] == "SKU001"


@pytest.mark.asyncio
async def test_unrecognized_payload_is_reported_and_not_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"unexpected": {"rows": []}})

    scanner = build_scanner(handler)

    result = await scanner.scan_cached()
    await scanner.scan_cached()

    assert result.status == FetchStatus.SHAPE_MISMATCH
    assert result.products == []
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_empty_catalogue_is_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"results": [], "total": 0})

    scanner = build_scanner(handler)

    assert (await scanner.scan_cached()).status == FetchStatus.EMPTY
    await scanner.scan_cached()
    assert len(calls) == 1
