"""HTTP client for the remote store API (catalog and orders).

The checkout flow only depends on the ``OrderGateway`` protocol; this module
provides the httpx implementation of it.
"""

from typing import Any, Protocol

import httpx
import pydantic
import structlog

from storefront.api.schemas import OrderRequest, OrderResponse, ProductListResponse, ProductRecord
from storefront.config import StoreConfig
from storefront.exceptions import ApiError

logger = structlog.get_logger(__name__)


class OrderGateway(Protocol):
    """What the storefront needs from the remote service."""

    def get_products(self) -> list[ProductRecord]: ...

    def create_order(self, order: OrderRequest) -> OrderResponse: ...


class StoreApiClient:
    def __init__(self, config: StoreConfig | None = None, client: httpx.Client | None = None) -> None:
        self.config = config or StoreConfig.from_env()
        self._client = client or httpx.Client(
            base_url=self.config.api_base,
            timeout=self.config.timeout,
            headers={"Content-Type": "application/json"},
        )

    def __enter__(self) -> "StoreApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------
    def get_products(self) -> list[ProductRecord]:
        data = self._request("GET", "/product")
        try:
            payload = ProductListResponse.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ApiError(f"Unexpected product list payload: {exc.error_count()} errors") from exc
        logger.debug("Fetched catalog", product_count=len(payload.items))
        return [self._with_cdn(item) for item in payload.items]

    def get_product(self, product_id: str) -> ProductRecord:
        data = self._request("GET", f"/product/{product_id}")
        try:
            return self._with_cdn(ProductRecord.model_validate(data))
        except pydantic.ValidationError as exc:
            raise ApiError(f"Unexpected product payload: {exc.error_count()} errors") from exc

    def create_order(self, order: OrderRequest) -> OrderResponse:
        data = self._request("POST", "/order", json=order.to_wire())
        try:
            response = OrderResponse.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ApiError(f"Unexpected order payload: {exc.error_count()} errors") from exc
        logger.info("Order accepted", order_id=response.id, total=response.total)
        return response

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Store API unreachable", method=method, path=path, error=str(exc))
            raise ApiError(f"Store API unreachable: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            raise ApiError("Store API returned a non-JSON body", status_code=response.status_code) from None

        if response.is_success:
            return data

        message = data.get("error") if isinstance(data, dict) else None
        logger.warning("Store API error", method=method, path=path, status_code=response.status_code, error=message)
        raise ApiError(message or response.reason_phrase, status_code=response.status_code)

    def _with_cdn(self, record: ProductRecord) -> ProductRecord:
        if not record.image or record.image.startswith(("http://", "https://")):
            return record
        return record.model_copy(update={"image": f"{self.config.cdn_base}/{record.image.lstrip('/')}"})
