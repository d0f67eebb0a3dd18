import httpx
import pytest

from wedrop_inventory.config import ApiConfig
from wedrop_inventory.core.client import ApiNotConfiguredError, CatalogFilters, WedropClient
from wedrop_inventory.core.models import FetchStatus


BASE_URL = "https://api.test/v1"


def make_api_config(**overrides) -> ApiConfig:
    data = dict(base_url=BASE_URL, token="secret", timeout=5)
    data.update(overrides)
    return ApiConfig(**data)


def build_client(handler, config: ApiConfig = None, **kwargs) -> WedropClient:
    return WedropClient(config or make_api_config(), transport=httpx.MockTransport(handler), **kwargs)


def make_raw_product(index: int, **overrides) -> dict:
    data = dict(
        id=index,
        sku=f"SKU{index:03d}",
        name=f"Produto {index}",
        availableQuantity=20,
        price=10,
        category={"id": index % 3, "name": f"Categoria {index % 3}"},
        suplier={"id": 100 + index % 2, "name": f"Fornecedor {index % 2}"},
    )
    data.update(overrides)
    return data


def failing(status_code: int = 404):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"message": "not here"})

    return handler


@pytest.mark.asyncio
async def test_catalog_page_sends_auth_and_pagination():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"results": [make_raw_product(1)], "total": 1})

    client = build_client(handler)
    result = await client.fetch_catalog_page(page=3, limit=20, search="caneca", filters=CatalogFilters(supplier_id="7"))

    assert result.status == FetchStatus.OK
    assert result.value.total == 1
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.path == "/v1/catalog"
    assert request.url.params["offset"] == "40"
    assert request.url.params["page"] == "3"
    assert request.url.params["search"] == "caneca"
    assert request.url.params["suplierId"] == "7"
    assert request.url.params["orderBy"] == "id|desc"


@pytest.mark.asyncio
async def test_catalog_page_distinguishes_empty_mismatch_and_error():
    empty = build_client(lambda request: httpx.Response(200, json={"results": [], "total": 0}))
    mismatch = build_client(lambda request: httpx.Response(200, json={"foo": []}))
    broken = build_client(failing(500))

    assert (await empty.fetch_catalog_page()).status == FetchStatus.EMPTY
    assert (await mismatch.fetch_catalog_page()).status == FetchStatus.SHAPE_MISMATCH
    error = await broken.fetch_catalog_page()
    assert error.status == FetchStatus.ERROR
    assert error.value.records == []
    assert error.error == "not here"


@pytest.mark.asyncio
async def test_network_failure_becomes_error_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    result = await build_client(handler).fetch_catalog_page()

    assert result.status == FetchStatus.ERROR
    assert result.failed


@pytest.mark.asyncio
async def test_not_configured_short_circuits_without_requests():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    client = build_client(handler, config=make_api_config(token="  "))

    assert (await client.fetch_catalog_page()).status == FetchStatus.NOT_CONFIGURED
    assert (await client.fetch_movements("1")).value == []
    assert (await client.fetch_product("1")).value is None
    assert calls == []


@pytest.mark.asyncio
async def test_movement_chain_stops_at_first_success():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path.endswith("/stock-movements"):
            return httpx.Response(200, json={"data": [{"id": "m1", "type": "E", "quantity": 2}]})
        return httpx.Response(404)

    result = await build_client(handler).fetch_movements("42")

    assert result.status == FetchStatus.OK
    assert result.value == [{"id": "m1", "type": "E", "quantity": 2}]
    assert calls == ["/v1/catalog/products/42/movements", "/v1/products/42/stock-movements"]


@pytest.mark.asyncio
async def test_movement_chain_accepts_empty_success():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={"movements": []})

    result = await build_client(handler).fetch_movements("42")

    assert result.status == FetchStatus.EMPTY
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_movement_chain_exhausted_returns_error_and_empty_list():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(500)

    result = await build_client(handler).fetch_movements("42")

    assert result.status == FetchStatus.ERROR
    assert result.value == []
    assert len(calls) == 3
    assert calls[-1] == f"{BASE_URL}/stock/movements?product_id=42"


@pytest.mark.asyncio
async def test_fetch_product_unwraps_detail():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/catalog/products/9"
        return httpx.Response(200, json={"data": make_raw_product(9)})

    result = await build_client(handler).fetch_product("9")

    assert result.status == FetchStatus.OK
    assert result.value["sku"] == "SKU009"


@pytest.mark.asyncio
async def test_connection_check_reports_total():
    client = build_client(lambda request: httpx.Response(200, json={"items": [make_raw_product(1)], "count": 321}))

    check = await client.test_connection()

    assert check.success
    assert check.total == 321
    assert check.message == "Conexão bem sucedida! 321 produtos encontrados."


@pytest.mark.asyncio
async def test_connection_check_failure_message():
    check = await build_client(failing(401)).test_connection()

    assert not check.success
    assert check.message == "not here"


@pytest.mark.asyncio
async def test_connection_check_requires_configuration():
    client = build_client(failing(), config=ApiConfig())

    with pytest.raises(ApiNotConfiguredError):
        await client.test_connection()


@pytest.mark.asyncio
async def test_malformed_base_url_becomes_error_result():
    client = build_client(failing(), config=make_api_config(base_url="http://[::1"))

    page = await client.fetch_catalog_page()
    movements = await client.fetch_movements("1")
    check = await client.test_connection()

    assert page.status == FetchStatus.ERROR
    assert movements.status == FetchStatus.ERROR
    assert movements.value == []
    assert not check.success
