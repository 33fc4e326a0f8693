"""Checkout flow: turns view intents on the bus into state changes.

Views never call the state objects directly. They publish intent topics and
this flow, subscribed to each of them, drives ``CatalogState`` and
``CheckoutState`` and talks to the store API.

Flow:
    1. card:select / basket:add / basket:remove / basket:open → catalog & cart
    2. form:input → CheckoutState.set_field (rejected values → form:rejected)
    3. order:submit → shipping stage done, contacts stage opens
    4. contacts:submit → line items frozen, order sent to the store API
    5a. success → order:success, basket cleared, selection reset, draft reset
    5b. failure → order:failed, draft kept for a retry
    modal:close → draft reset (unless an order is being sent)
"""

from typing import Any

import structlog

from storefront.api.client import OrderGateway
from storefront.bus import topics
from storefront.bus.event_bus import EventBus
from storefront.bus.events import CatalogFailed, FieldEdited, FieldRejected, OrderFailed, OrderSubmitted, ProductIntent
from storefront.catalog.state import CatalogState
from storefront.checkout.draft import CheckoutStage
from storefront.checkout.state import CheckoutState
from storefront.exceptions import InvalidTransitionError, StorefrontError, ValidationError

logger = structlog.get_logger(__name__)


class CheckoutFlow:
    def __init__(self, bus: EventBus, catalog: CatalogState, checkout: CheckoutState, gateway: OrderGateway):
        self.bus = bus
        self.catalog = catalog
        self.checkout = checkout
        self.gateway = gateway
        self.submitting = False

    def _subscriptions(self):
        return [
            (topics.CARD_SELECT, self.on_card_select),
            (topics.BASKET_ADD, self.on_basket_add),
            (topics.BASKET_REMOVE, self.on_basket_remove),
            (topics.BASKET_OPEN, self.on_basket_open),
            (topics.FIELD_EDITED, self.on_field_edited),
            (topics.SUBMIT_SHIPPING, self.on_submit_shipping),
            (topics.SUBMIT_CONTACTS, self.on_submit_contacts),
            (topics.MODAL_CLOSE, self.on_modal_close),
        ]

    def bind(self) -> None:
        for topic, handler in self._subscriptions():
            self.bus.subscribe(topic, handler)

    def unbind(self) -> None:
        for topic, handler in self._subscriptions():
            self.bus.unsubscribe(topic, handler)

    # -------------------------------------------------------------------
    # Catalog loading
    # -------------------------------------------------------------------
    def load_catalog(self) -> bool:
        """Fetch products and install them as the catalog.

        A failed fetch leaves the current catalog in place.
        """
        try:
            records = self.gateway.get_products()
        except StorefrontError as exc:
            logger.error("Catalog load failed", error=str(exc))
            self.bus.publish(topics.CATALOG_FAILED, CatalogFailed(reason=str(exc)))
            return False

        self.catalog.set_catalog(record.model_dump() for record in records)
        return True

    # -------------------------------------------------------------------
    # Catalog and basket intents
    # -------------------------------------------------------------------
    def on_card_select(self, payload: Any) -> None:
        intent = ProductIntent.model_validate(payload)
        self.catalog.set_preview(intent.product_id)

    def on_basket_add(self, payload: Any) -> None:
        intent = ProductIntent.model_validate(payload)
        self.catalog.add_to_basket(intent.product_id)

    def on_basket_remove(self, payload: Any) -> None:
        intent = ProductIntent.model_validate(payload)
        self.catalog.delete_from_basket(intent.product_id)

    def on_basket_open(self, payload: Any = None) -> None:
        self.bus.publish(topics.BASKET_VIEW, self.catalog.basket_view())

    # -------------------------------------------------------------------
    # Form intents
    # -------------------------------------------------------------------
    def on_field_edited(self, payload: Any) -> None:
        edit = FieldEdited.model_validate(payload)
        try:
            self.checkout.set_field(edit.field, edit.value)
        except ValidationError as exc:
            logger.info("Field edit rejected", field=edit.field, value=edit.value)
            self.bus.publish(
                topics.FIELD_REJECTED,
                FieldRejected(field=edit.field, value=edit.value, messages=exc.messages),
            )

    def on_submit_shipping(self, payload: Any = None) -> None:
        try:
            self.checkout.advance_to_contacts()
        except InvalidTransitionError as exc:
            logger.warning("Shipping submitted out of order", stage=self.checkout.stage.value, error=str(exc))

    def on_submit_contacts(self, payload: Any = None) -> None:
        self.submit_order()

    def on_modal_close(self, payload: Any = None) -> None:
        if self.submitting:
            logger.debug("Modal closed during submission, keeping draft")
            return
        self.checkout.reset_draft()

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def submit_order(self) -> bool:
        """Send the draft to the store API. Returns whether the order was accepted.

        Only one submission may be in flight. On failure the draft is kept as
        is so the customer can retry; nothing is retried automatically.
        """
        if self.submitting:
            logger.warning("Order submission already in flight")
            return False
        if self.checkout.stage != CheckoutStage.CONTACTS:
            logger.warning("Order submitted out of order", stage=self.checkout.stage.value)
            return False
        if not self.checkout.refresh_stage(CheckoutStage.CONTACTS):
            return False
        if not self.catalog.basket:
            logger.warning("Order submitted with an empty basket")
            self.bus.publish(topics.ORDER_FAILED, OrderFailed(reason="Basket is empty"))
            return False

        self.checkout.freeze_line_items(self.catalog.basket, self.catalog.get_basket_total())
        order = self.checkout.build_order()

        self.submitting = True
        try:
            acknowledgment = self.gateway.create_order(order)
        except StorefrontError as exc:
            logger.warning("Order submission failed", error=str(exc), total=order.total)
            self.bus.publish(
                topics.ORDER_FAILED,
                OrderFailed(reason=str(exc), status_code=getattr(exc, "status_code", None)),
            )
            return False
        finally:
            self.submitting = False

        self.checkout.mark_submitted()
        logger.info("Order submitted", order_id=acknowledgment.id, total=acknowledgment.total)
        self.bus.publish(topics.ORDER_SUBMITTED, OrderSubmitted(order_id=acknowledgment.id, total=acknowledgment.total))

        self.catalog.clear_basket()
        self.catalog.reset_selected()
        self.checkout.reset_draft()
        return True
