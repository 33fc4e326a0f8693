"""Order draft: the mutable, not-yet-submitted order and its form errors."""

from enum import Enum

from pydantic import BaseModel, Field


class PaymentMethod(Enum):
    CARD = "card"
    CASH = "cash"


# Method the payment form highlights before the customer picks one
DEFAULT_PAYMENT_METHOD = PaymentMethod.CARD


class CheckoutStage(Enum):
    SHIPPING = "Shipping"
    CONTACTS = "Contacts"
    SUBMITTED = "Submitted"


class OrderDraft(BaseModel):
    """The customer's checkout form, kept across both stages.

    A fresh or reset draft has no payment method. ``DEFAULT_PAYMENT_METHOD``
    is only the option views pre-highlight; it is never stored here, so an
    untouched draft fails shipping validation on both fields.
    """

    payment_method: PaymentMethod | None = None
    address: str = ""
    email: str = ""
    phone: str = ""
    items: list[str] = Field(default_factory=list)
    total: float | None = None


# Which stage validates each editable field
FIELD_STAGES = {
    "payment_method": CheckoutStage.SHIPPING,
    "address": CheckoutStage.SHIPPING,
    "email": CheckoutStage.CONTACTS,
    "phone": CheckoutStage.CONTACTS,
}

# Names the forms use for the same fields
FIELD_ALIASES = {
    "payment": "payment_method",
    "paymentMethod": "payment_method",
}


class FormErrors(BaseModel):
    """Error set of one stage; fields absent from ``errors`` are valid."""

    stage: CheckoutStage
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        return "; ".join(self.errors.values())
