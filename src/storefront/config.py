"""Runtime configuration for the storefront, read from environment variables."""

import os

from pydantic import BaseModel, Field, HttpUrl

DEFAULT_API_URL = "https://larek-api.nomoreparties.co/api/weblarek"
DEFAULT_CDN_URL = "https://larek-api.nomoreparties.co/content/weblarek"


class StoreConfig(BaseModel):
    api_url: HttpUrl = Field(default=DEFAULT_API_URL, validate_default=True)
    cdn_url: HttpUrl = Field(default=DEFAULT_CDN_URL, validate_default=True)
    timeout: float = Field(default=10.0, gt=0)
    environment: str = "development"

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Build a config from ``STOREFRONT_*`` variables, falling back to defaults."""
        return cls(
            api_url=os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL),
            cdn_url=os.getenv("STOREFRONT_CDN_URL", DEFAULT_CDN_URL),
            timeout=os.getenv("STOREFRONT_TIMEOUT", "10"),
            environment=os.getenv("ENVIRONMENT", "development").lower(),
        )

    @property
    def api_base(self) -> str:
        return str(self.api_url).rstrip("/")

    @property
    def cdn_base(self) -> str:
        return str(self.cdn_url).rstrip("/")
