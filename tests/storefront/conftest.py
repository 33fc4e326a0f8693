import functools

import pytest
from storefront.api.schemas import OrderResponse, ProductRecord
from storefront.bus import topics
from storefront.bus.event_bus import EventBus
from storefront.catalog.state import CatalogState
from storefront.checkout.state import CheckoutState
from storefront.domain import create_storefront
from storefront.exceptions import ApiError

CATALOG = [
    {
        "id": "854cef69-976d-4c2a-a18c-2aa45046c390",
        "title": "+1 час в сутках",
        "description": "Если планируете решать задачи в тренажёре, берите два.",
        "image": "/5_Dots.svg",
        "category": "софт-скил",
        "price": 750,
    },
    {
        "id": "c101ab44-ed99-4a54-990d-47aa2bb4e7d9",
        "title": "HEX-леденец",
        "description": "Лизните этот леденец, чтобы мгновенно запоминать и узнавать любой цветовой код CSS.",
        "image": "/Shell.svg",
        "category": "другое",
        "price": 1450,
    },
    {
        "id": "b06cde61-912f-4663-9751-09956c0eed67",
        "title": "Мамка-таймер",
        "description": "Будет стоять над душой и не давать прокрастинировать.",
        "image": "/Asterisk_2.svg",
        "category": "софт-скил",
        "price": None,
    },
]

PUBLISHED_TOPICS = [value for name, value in vars(topics).items() if name.isupper() and value != topics.ALL]


class EventRecorder:
    """Records every (topic, payload) published on a bus."""

    def __init__(self, bus):
        self.events = []
        for topic in PUBLISHED_TOPICS:
            bus.subscribe(topic, functools.partial(self._record, topic))

    def _record(self, topic, payload):
        self.events.append((topic, payload))

    def topics(self):
        return [topic for topic, _ in self.events]

    def payloads(self, topic):
        return [payload for name, payload in self.events if name == topic]

    def count(self, topic):
        return len(self.payloads(topic))

    def last(self, topic):
        return self.payloads(topic)[-1]

    def clear(self):
        self.events.clear()


class FakeGateway:
    """In-memory stand-in for the store API."""

    def __init__(self, products=None):
        self.products = CATALOG if products is None else products
        self.orders = []
        self.catalog_error = None
        self.order_error = None
        self.on_create_order = None

    def get_products(self):
        if self.catalog_error is not None:
            raise self.catalog_error
        return [ProductRecord.model_validate(record) for record in self.products]

    def create_order(self, order):
        self.orders.append(order)
        if self.on_create_order is not None:
            self.on_create_order()
        if self.order_error is not None:
            raise self.order_error
        return OrderResponse(id=f"ord-{len(self.orders):03d}", total=order.total)


@pytest.fixture
def catalog_records():
    return [dict(record) for record in CATALOG]


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture
def catalog(bus):
    return CatalogState(bus)


@pytest.fixture
def checkout(bus):
    return CheckoutState(bus)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def storefront(bus, gateway):
    return create_storefront(gateway=gateway, bus=bus)


@pytest.fixture
def api_error():
    return ApiError("Неверная сумма заказа", status_code=400)
