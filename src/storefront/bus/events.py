"""Payload contracts for every bus topic.

Each model is the payload of one topic in ``storefront.bus.topics``. Intent
payloads coming from views may also arrive as plain dicts; handlers run them
through ``model_validate`` so both forms are accepted.
"""

from pydantic import BaseModel, ConfigDict, Field

from storefront.catalog.product import Product
from storefront.checkout.draft import CheckoutStage, FormErrors, OrderDraft

__all__ = [
    "BasketChanged",
    "BasketLine",
    "BasketView",
    "CatalogChanged",
    "CatalogFailed",
    "DraftReset",
    "FieldEdited",
    "FieldRejected",
    "FormErrors",
    "OrderFailed",
    "OrderSubmitted",
    "PreviewChanged",
    "ProductIntent",
    "StageReady",
]


# ---------------------------------------------------------------------------
# Catalog and basket
# ---------------------------------------------------------------------------
class CatalogChanged(BaseModel):
    """The catalog was replaced wholesale."""

    items: list[Product]


class CatalogFailed(BaseModel):
    reason: str


class PreviewChanged(BaseModel):
    """A product was opened for inspection."""

    product: Product
    in_basket: bool


class BasketChanged(BaseModel):
    """Cart membership changed; carries the numbers the header counter needs."""

    count: int
    total: float
    items: list[str] = Field(default_factory=list)


class BasketLine(BaseModel):
    index: int
    product_id: str
    title: str
    price: float | None


class BasketView(BaseModel):
    """Rendered basket contents, published when the basket is opened."""

    lines: list[BasketLine]
    total: float

    @property
    def can_checkout(self) -> bool:
        return bool(self.lines)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class StageReady(BaseModel):
    """Every field of ``stage`` is now valid."""

    stage: CheckoutStage
    draft: OrderDraft


class FieldRejected(BaseModel):
    field: str
    value: str | None
    messages: dict[str, list[str]]


class DraftReset(BaseModel):
    draft: OrderDraft


class OrderSubmitted(BaseModel):
    """The store API accepted the order."""

    order_id: str | None = None
    total: float


class OrderFailed(BaseModel):
    reason: str
    status_code: int | None = None


# ---------------------------------------------------------------------------
# View intents
# ---------------------------------------------------------------------------
class ProductIntent(BaseModel):
    """A view asked to act on one product (select, add, remove)."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")


class FieldEdited(BaseModel):
    """A checkout form field changed."""

    field: str
    value: str | None = None
