"""Store API package."""

from storefront.api.client import OrderGateway, StoreApiClient

__all__ = ["OrderGateway", "StoreApiClient"]
