"""Pydantic request/response schemas for the store API.

These are the wire contracts of the remote service, kept separate from the
state layer's own models.
"""

from pydantic import BaseModel, Field

from storefront.checkout.draft import PaymentMethod


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class ProductRecord(BaseModel):
    id: str
    title: str
    description: str = ""
    image: str = ""
    category: str = ""
    price: float | None = None


class ProductListResponse(BaseModel):
    total: int = 0
    items: list[ProductRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderRequest(BaseModel):
    payment_method: PaymentMethod = Field(alias="payment")
    address: str
    email: str
    phone: str
    line_item_ids: list[str] = Field(alias="items")
    total: float

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "payment": "card",
                    "address": "Spb Vosstania 1",
                    "email": "test@test.ru",
                    "phone": "+71234567890",
                    "items": ["854cef69-976d-4c2a-a18c-2aa45046c390"],
                    "total": 2200,
                }
            ]
        },
    }

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class OrderResponse(BaseModel):
    id: str | None = None
    total: float


class ErrorResponse(BaseModel):
    error: str
