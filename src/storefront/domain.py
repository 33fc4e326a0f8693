"""Storefront bounded context: catalog, basket and two-step checkout.

Every component receives the same ``EventBus`` at construction; nothing in
the context reaches another component except through it or through the
references handed over here.
"""

import structlog

from storefront.api.client import OrderGateway, StoreApiClient
from storefront.bus.event_bus import EventBus
from storefront.catalog.state import CatalogState
from storefront.checkout.flow import CheckoutFlow
from storefront.checkout.state import CheckoutState
from storefront.config import StoreConfig
from storefront.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(self, bus: EventBus, catalog: CatalogState, checkout: CheckoutState, flow: CheckoutFlow):
        self.bus = bus
        self.catalog = catalog
        self.checkout = checkout
        self.flow = flow


def create_storefront(
    config: StoreConfig | None = None,
    gateway: OrderGateway | None = None,
    bus: EventBus | None = None,
    configure_logs: bool = False,
) -> Storefront:
    """Build the state layer and subscribe the checkout flow to view intents.

    Applications pass ``configure_logs=True`` once at startup to install the
    logging setup for the configured environment.
    """
    config = config or StoreConfig.from_env()
    if configure_logs:
        configure_logging(config.environment)

    bus = bus or EventBus()
    gateway = gateway or StoreApiClient(config)

    catalog = CatalogState(bus)
    checkout = CheckoutState(bus)
    flow = CheckoutFlow(bus, catalog, checkout, gateway)
    flow.bind()

    logger.debug("Storefront created", subscriptions=bus.subscriber_count())
    return Storefront(bus, catalog, checkout, flow)
