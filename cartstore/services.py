"""
Stock and product lookups over HTTP.

Both services talk to the same REST API:

    GET /stock/{id}     -> {"id": 7, "amount": 3}
    GET /products/{id}  -> {"id": 7, "title": "Shoe", "price": 100, "image": "..."}
"""
from typing import Optional, Protocol, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings
from .errors import NotFoundError, ServiceError
from .logging import get_logger, sanitize_id_for_logging
from .models import ProductInfo, StockInfo

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class StockService(Protocol):
    async def get(self, product_id: int) -> StockInfo:
        ...


class ProductCatalog(Protocol):
    async def get(self, product_id: int) -> ProductInfo:
        ...


class CatalogApiClient:
    """Shared HTTP client for the stock and product endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CatalogApiClient":
        return cls(settings.api_url, timeout=settings.http_timeout)

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def fetch(self, path: str, model: Type[ModelT]) -> ModelT:
        """
        GET path and validate the JSON body into model.

        Raises:
            NotFoundError: on HTTP 404
            ServiceError: on other HTTP errors, transport failures or a payload
                that does not match model
        """
        client = self._get_http_client()
        try:
            response = await client.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(f"{path} not found", raw_error=e) from e
            logger.error(f"API error {status} for {path}: {e.response.text[:200]}")
            raise ServiceError(f"API returned {status} for {path}", status_code=status, raw_error=e) from e
        except httpx.HTTPError as e:
            logger.error(f"API request to {path} failed: {type(e).__name__}: {e}")
            raise ServiceError(f"API request failed: {e}", raw_error=e) from e

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ServiceError(f"Invalid payload from {path}: {e}", raw_error=e) from e

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


class HttpStockService:
    """StockService backed by GET /stock/{id}."""

    def __init__(self, client: CatalogApiClient):
        self.client = client

    async def get(self, product_id: int) -> StockInfo:
        logger.debug(f"Fetching stock for product {sanitize_id_for_logging(product_id)}")
        return await self.client.fetch(f"/stock/{product_id}", StockInfo)

    async def aclose(self) -> None:
        await self.client.aclose()


class HttpProductCatalog:
    """ProductCatalog backed by GET /products/{id}."""

    def __init__(self, client: CatalogApiClient):
        self.client = client

    async def get(self, product_id: int) -> ProductInfo:
        logger.debug(f"Fetching product {sanitize_id_for_logging(product_id)}")
        return await self.client.fetch(f"/products/{product_id}", ProductInfo)

    async def aclose(self) -> None:
        await self.client.aclose()
