"""Order draft and the two-stage checkout validation state machine.

State Machine:
    SHIPPING → CONTACTS → SUBMITTED
    any stage → SHIPPING via ``reset_draft`` (dismissed modal or completed order)

Each stage owns an independent presence-only validator: shipping checks
address and payment method, contacts checks email and phone. Editing a field
re-runs only its own stage's validator. A stage's ready topic fires when the
stage turns valid, not on every valid edit.
"""

from typing import Any, Iterable, Mapping

import structlog

from storefront.api.schemas import OrderRequest
from storefront.bus import topics
from storefront.bus.event_bus import EventBus
from storefront.bus.events import DraftReset, StageReady
from storefront.checkout.draft import (
    FIELD_ALIASES,
    FIELD_STAGES,
    CheckoutStage,
    FormErrors,
    OrderDraft,
    PaymentMethod,
)
from storefront.exceptions import (
    InvalidPaymentMethodError,
    InvalidTransitionError,
    UnknownFieldError,
    ValidationError,
)
from storefront.model.observable import ObservableModel

logger = structlog.get_logger(__name__)

_VALID_TRANSITIONS = {
    CheckoutStage.SHIPPING: {CheckoutStage.CONTACTS},
    CheckoutStage.CONTACTS: {CheckoutStage.SUBMITTED},
    CheckoutStage.SUBMITTED: set(),  # Terminal until reset
}

_ERROR_TOPICS = {
    CheckoutStage.SHIPPING: topics.SHIPPING_ERRORS_CHANGED,
    CheckoutStage.CONTACTS: topics.CONTACTS_ERRORS_CHANGED,
}

_READY_TOPICS = {
    CheckoutStage.SHIPPING: topics.SHIPPING_READY,
    CheckoutStage.CONTACTS: topics.CONTACTS_READY,
}


class CheckoutState(ObservableModel):
    def __init__(self, bus: EventBus):
        self.draft = OrderDraft()
        self.stage = CheckoutStage.SHIPPING
        self.shipping_errors = FormErrors(stage=CheckoutStage.SHIPPING)
        self.contacts_errors = FormErrors(stage=CheckoutStage.CONTACTS)
        self._ready = {CheckoutStage.SHIPPING: False, CheckoutStage.CONTACTS: False}
        super().__init__(bus)

    # -------------------------------------------------------------------
    # Field edits
    # -------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> bool:
        """Store one form field and re-validate its stage.

        Raises ``InvalidPaymentMethodError`` for a payment method outside
        card/cash and ``UnknownFieldError`` for a field no form owns; in both
        cases the draft is left untouched. Returns the stage's validity.
        """
        field, value = self._clean(name, value)
        setattr(self.draft, field, value)
        return self.refresh_stage(FIELD_STAGES[field])

    def update(self, data: Mapping[str, Any]) -> None:
        """Apply several field edits at once; nothing is stored if any is rejected."""
        cleaned = dict(self._clean(name, value) for name, value in data.items())
        for field, value in cleaned.items():
            setattr(self.draft, field, value)
        for stage in CheckoutStage:
            if any(FIELD_STAGES[field] == stage for field in cleaned):
                self.refresh_stage(stage)

    def _clean(self, name: str, value: Any) -> tuple[str, Any]:
        field = FIELD_ALIASES.get(name, name)
        if field not in FIELD_STAGES:
            raise UnknownFieldError(name)

        if field == "payment_method":
            if isinstance(value, PaymentMethod):
                return field, value
            try:
                return field, PaymentMethod(value)
            except ValueError:
                raise InvalidPaymentMethodError(value) from None

        return field, "" if value is None else str(value)

    def refresh_stage(self, stage: CheckoutStage) -> bool:
        """Re-validate ``stage`` and publish its ready topic if it just turned valid."""
        was_ready = self._ready[stage]
        valid = self.validate_shipping() if stage == CheckoutStage.SHIPPING else self.validate_contacts()

        self._ready[stage] = valid
        if valid and not was_ready:
            logger.debug("Checkout stage ready", stage=stage.value)
            self.notify(_READY_TOPICS[stage], StageReady(stage=stage, draft=self.draft.model_copy(deep=True)))
        return valid

    # -------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------
    def validate_shipping(self) -> bool:
        errors = {}
        if not self.draft.address:
            errors["address"] = "Address is required"
        if self.draft.payment_method is None:
            errors["payment_method"] = "Payment method is required"

        self.shipping_errors = FormErrors(stage=CheckoutStage.SHIPPING, errors=errors)
        if errors:
            self._ready[CheckoutStage.SHIPPING] = False
        self.notify(_ERROR_TOPICS[CheckoutStage.SHIPPING], self.shipping_errors)
        return self.shipping_errors.is_valid

    def validate_contacts(self) -> bool:
        errors = {}
        if not self.draft.email:
            errors["email"] = "Email is required"
        if not self.draft.phone:
            errors["phone"] = "Phone is required"

        self.contacts_errors = FormErrors(stage=CheckoutStage.CONTACTS, errors=errors)
        if errors:
            self._ready[CheckoutStage.CONTACTS] = False
        self.notify(_ERROR_TOPICS[CheckoutStage.CONTACTS], self.contacts_errors)
        return self.contacts_errors.is_valid

    def is_ready(self, stage: CheckoutStage) -> bool:
        return self._ready.get(stage, False)

    # -------------------------------------------------------------------
    # Stage transitions
    # -------------------------------------------------------------------
    def _transition_to(self, target: CheckoutStage) -> None:
        if target not in _VALID_TRANSITIONS[self.stage]:
            raise InvalidTransitionError(self.stage, target)
        logger.info("Checkout stage changed", from_stage=self.stage.value, to_stage=target.value)
        self.stage = target

    def advance_to_contacts(self) -> bool:
        """Leave the shipping stage if its fields are valid."""
        if CheckoutStage.CONTACTS not in _VALID_TRANSITIONS[self.stage]:
            raise InvalidTransitionError(self.stage, CheckoutStage.CONTACTS)
        if not self.refresh_stage(CheckoutStage.SHIPPING):
            return False
        self._transition_to(CheckoutStage.CONTACTS)
        return True

    def mark_submitted(self) -> bool:
        """Record that the store accepted the order; contacts must be valid."""
        if CheckoutStage.SUBMITTED not in _VALID_TRANSITIONS[self.stage]:
            raise InvalidTransitionError(self.stage, CheckoutStage.SUBMITTED)
        if not self.refresh_stage(CheckoutStage.CONTACTS):
            return False
        self._transition_to(CheckoutStage.SUBMITTED)
        return True

    # -------------------------------------------------------------------
    # Submission support
    # -------------------------------------------------------------------
    def freeze_line_items(self, product_ids: Iterable[str], total: float) -> None:
        """Snapshot the cart into the draft right before submission."""
        self.draft.items = list(product_ids)
        self.draft.total = total

    def build_order(self) -> OrderRequest:
        if self.draft.payment_method is None:
            raise ValidationError({"payment_method": ["Payment method is required"]})
        return OrderRequest(
            payment_method=self.draft.payment_method,
            address=self.draft.address,
            email=self.draft.email,
            phone=self.draft.phone,
            line_item_ids=list(self.draft.items),
            total=self.draft.total or 0,
        )

    def reset_draft(self) -> None:
        """Restore the empty draft and the shipping stage without signalling readiness."""
        self.draft = OrderDraft()
        self.stage = CheckoutStage.SHIPPING
        self.shipping_errors = FormErrors(stage=CheckoutStage.SHIPPING)
        self.contacts_errors = FormErrors(stage=CheckoutStage.CONTACTS)
        self._ready = {CheckoutStage.SHIPPING: False, CheckoutStage.CONTACTS: False}
        self.notify(topics.DRAFT_RESET, DraftReset(draft=self.draft.model_copy(deep=True)))
