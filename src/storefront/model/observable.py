"""Base for state objects that announce their own mutations on the bus."""

from typing import Any, Mapping

from storefront.bus.event_bus import EventBus
from storefront.exceptions import UnknownFieldError


class ObservableModel:
    """Gives a state object the "mutate, then announce" idiom.

    Subclasses list the attributes ``assign`` may touch in ``assignable``.
    """

    assignable: tuple[str, ...] = ()

    def __init__(self, bus: EventBus, data: Mapping[str, Any] | None = None):
        self.bus = bus
        if data:
            self.assign(data)

    def notify(self, topic: str, payload: Any = None) -> None:
        self.bus.publish(topic, payload)

    def assign(self, data: Mapping[str, Any], topic: str | None = None) -> None:
        """Copy ``data`` onto this object, then publish ``topic`` with ``self``.

        Unknown keys are rejected before anything is written.
        """
        for key in data:
            if key not in self.assignable:
                raise UnknownFieldError(key)
        for key, value in data.items():
            setattr(self, key, value)
        if topic is not None:
            self.notify(topic, self)
