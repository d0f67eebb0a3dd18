"""Asynchronous client for the Wedrop REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import DEFAULT_MOVEMENT_ENDPOINTS, ApiConfig
from .models import FetchResult, FetchStatus
from .shapes import MOVEMENT_CONTAINER_KEYS, ResolvedPayload, resolve, resolve_one


LOGGER = logging.getLogger(__name__)

CATALOG_ENDPOINT = "/catalog"
PRODUCT_ENDPOINT = "/catalog/products/{product_id}"
DEFAULT_ORDER_BY = "id|desc"


class ApiNotConfiguredError(RuntimeError):
    """Raised when the base URL or token is missing."""

    def __init__(self, message: str = "API não configurada") -> None:
        super().__init__(message)


class UpstreamError(RuntimeError):
    """Network failure or non-success status from the upstream API."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CatalogFilters:
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None
    brand: Optional[str] = None
    order_by: str = DEFAULT_ORDER_BY


@dataclass
class ConnectionCheck:
    success: bool
    message: str
    total: Optional[int] = None


class WedropClient:
    """Thin wrapper around :class:`httpx.AsyncClient`.

    Every public ``fetch_*`` coroutine returns a :class:`FetchResult` and never
    raises: transport failures become ``FetchStatus.ERROR``, unknown payload
    shapes become ``FetchStatus.SHAPE_MISMATCH`` and a missing configuration
    short-circuits to ``FetchStatus.NOT_CONFIGURED`` before any request.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        movement_endpoints: Sequence[str] = DEFAULT_MOVEMENT_ENDPOINTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self.movement_endpoints = list(movement_endpoints)
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
        }

    async def request_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform an authenticated GET and return the decoded JSON body.

        Raises :class:`ApiNotConfiguredError` or :class:`UpstreamError`.
        """

        if not self.is_configured:
            raise ApiNotConfiguredError()

        url = f"{self.config.base_url.rstrip('/')}{endpoint}"
        LOGGER.debug("Fetching %s params=%s", url, params)
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=self._headers())
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UpstreamError(f"Falha de rede ao acessar {endpoint}: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            raise UpstreamError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(f"Resposta inválida de {endpoint}") from exc

    async def fetch_catalog_page(
        self,
        page: int = 1,
        limit: int = 50,
        search: str = "",
        filters: Optional[CatalogFilters] = None,
    ) -> FetchResult[ResolvedPayload]:
        if not self.is_configured:
            return FetchResult(FetchStatus.NOT_CONFIGURED, ResolvedPayload())

        filters = filters or CatalogFilters()
        params = {
            "limit": limit,
            "offset": (page - 1) * limit,
            "page": page,
            "search": search or "",
            "categoryId": filters.category_id or 0,
            # upstream spells it "suplier"
            "suplierId": filters.supplier_id or "",
            "brand": filters.brand or "",
            "orderBy": filters.order_by,
        }
        try:
            payload = await self.request_json(CATALOG_ENDPOINT, params=params)
        except UpstreamError as exc:
            LOGGER.warning("Error fetching catalogue page %s: %s", page, exc)
            return FetchResult(FetchStatus.ERROR, ResolvedPayload(), error=str(exc))

        resolved = resolve(payload)
        if not resolved.recognized:
            return FetchResult(FetchStatus.SHAPE_MISMATCH, resolved)
        if resolved.is_empty:
            return FetchResult(FetchStatus.EMPTY, resolved)
        return FetchResult(FetchStatus.OK, resolved)

    async def fetch_product(self, product_id: str) -> FetchResult[Optional[Dict[str, Any]]]:
        if not self.is_configured:
            return FetchResult(FetchStatus.NOT_CONFIGURED, None)
        try:
            payload = await self.request_json(PRODUCT_ENDPOINT.format(product_id=product_id))
        except UpstreamError as exc:
            LOGGER.warning("Error fetching product %s: %s", product_id, exc)
            return FetchResult(FetchStatus.ERROR, None, error=str(exc))

        record = resolve_one(payload)
        if record is None:
            return FetchResult(FetchStatus.SHAPE_MISMATCH, None)
        return FetchResult(FetchStatus.OK, record)

    async def fetch_movements(self, product_id: str) -> FetchResult[List[Dict[str, Any]]]:
        """Try each candidate movement endpoint until one answers successfully.

        A successful answer wins even when it carries no movements.
        """

        if not self.is_configured:
            return FetchResult(FetchStatus.NOT_CONFIGURED, [])

        errors: List[str] = []
        for template in self.movement_endpoints:
            endpoint = template.format(product_id=product_id)
            try:
                payload = await self.request_json(endpoint)
            except UpstreamError as exc:
                LOGGER.debug("Movement endpoint %s failed: %s", endpoint, exc)
                errors.append(f"{endpoint}: {exc}")
                continue

            resolved = resolve(payload, MOVEMENT_CONTAINER_KEYS)
            if not resolved.recognized:
                return FetchResult(FetchStatus.SHAPE_MISMATCH, [])
            if resolved.is_empty:
                return FetchResult(FetchStatus.EMPTY, [])
            return FetchResult(FetchStatus.OK, resolved.records)

        LOGGER.warning("No movement endpoint answered for product %s", product_id)
        return FetchResult(FetchStatus.ERROR, [], error="; ".join(errors))

    async def test_connection(self) -> ConnectionCheck:
        """Probe the catalogue with a one-record page.

        Unlike the ``fetch_*`` helpers this raises when the API is not
        configured, since the caller explicitly asked for connectivity.
        """

        if not self.is_configured:
            raise ApiNotConfiguredError()
        try:
            payload = await self.request_json(
                CATALOG_ENDPOINT,
                params={"limit": 1, "offset": 0, "page": 1, "search": "", "orderBy": DEFAULT_ORDER_BY},
            )
        except UpstreamError as exc:
            return ConnectionCheck(success=False, message=str(exc) or "Erro ao conectar com a API")

        total = resolve(payload).total
        return ConnectionCheck(
            success=True,
            message=f"Conexão bem sucedida! {total} produtos encontrados.",
            total=total,
        )


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"API Error: {response.status_code}"


__all__ = [
    "WedropClient",
    "CatalogFilters",
    "ConnectionCheck",
    "ApiNotConfiguredError",
    "UpstreamError",
]
