"""Storefront exceptions.

Form validation problems are not exceptions: they travel over the bus as
``FormErrors`` payloads. Exceptions are reserved for values the state layer
refuses outright (illegal values, unknown products, illegal stage changes),
for remote failures and for misuse of the event bus.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""


class ValidationError(StorefrontError):
    """A value was rejected without mutating state.

    ``messages`` maps a field name to a list of human-readable messages.
    """

    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        super().__init__(messages)


class InvalidPaymentMethodError(ValidationError):
    def __init__(self, value):
        self.value = value
        super().__init__({"payment_method": [f"Invalid payment method: {value!r}"]})


class UnknownFieldError(ValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__({field: [f"Unknown field: {field!r}"]})


class InvalidTransitionError(ValidationError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__({"stage": [f"Cannot move checkout from {current.value} to {target.value}"]})


class ProductNotFoundError(StorefrontError):
    """Raised when a product id is not part of the current catalog."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ApiError(StorefrontError):
    """The store API answered with an error or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class EventBusError(StorefrontError):
    pass


class ReentrantPublishError(EventBusError):
    """Handlers kept re-publishing busy topics past the deferral limit."""

    def __init__(self, topic: str, limit: int):
        self.topic = topic
        self.limit = limit
        super().__init__(f"Topic {topic!r} still deferred after {limit} nested publishes")
