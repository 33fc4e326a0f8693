"""Product records as the storefront holds them."""

from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, field_validator

logger = structlog.get_logger(__name__)


class Category(Enum):
    SOFT_SKILL = "софт-скил"
    HARD_SKILL = "хард-скил"
    BUTTON = "кнопка"
    ADDITIONAL = "дополнительное"
    OTHER = "другое"


class Product(BaseModel):
    """One catalog entry.

    ``price`` is ``None`` for priceless products. ``selected`` marks cart
    membership and is only flipped by ``CatalogState``.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str
    title: str
    description: str = ""
    image: str = ""
    category: Category = Category.OTHER
    price: float | None = None
    selected: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value):
        if isinstance(value, Category):
            return value
        try:
            return Category(value)
        except ValueError:
            logger.warning("Unknown product category", category=value)
            return Category.OTHER

    @property
    def is_priceless(self) -> bool:
        return self.price is None
