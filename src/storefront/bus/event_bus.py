"""In-process publish/subscribe bus that mediates between views and state.

No view holds a reference to another view or to the state objects: views
publish intent topics, state objects publish change topics, and everyone else
subscribes. One bus is created per storefront and handed to every component.

Dispatch is synchronous and runs handlers in registration order. A handler
registration is keyed by topic, which may be:

* an exact topic name (``"basket:changed"``),
* a glob (``"order:*"``, or ``"*"`` for every topic),
* a compiled regular expression, matched with ``search``.
"""

import re
from collections import deque
from fnmatch import fnmatchcase
from typing import Any, Callable

import structlog

from storefront.exceptions import ReentrantPublishError

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], Any]
Topic = str | re.Pattern


class Subscription:
    __slots__ = ("topic", "handler")

    def __init__(self, topic: Topic, handler: Handler):
        self.topic = topic
        self.handler = handler

    def matches(self, topic: str) -> bool:
        if isinstance(self.topic, re.Pattern):
            return self.topic.search(topic) is not None
        if "*" in self.topic or "?" in self.topic:
            return fnmatchcase(topic, self.topic)
        return self.topic == topic

    def __eq__(self, other):
        if not isinstance(other, Subscription):
            return NotImplemented
        return self.topic == other.topic and self.handler == other.handler

    def __repr__(self):
        return f"Subscription({self.topic!r}, {_handler_name(self.handler)})"


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class EventBus:
    def __init__(self, max_deferred: int = 100) -> None:
        self.max_deferred = max_deferred
        self._subscriptions: list[Subscription] = []
        self._dispatching: set[str] = set()
        self._deferred: deque[tuple[str, Any]] = deque()

    # -------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------
    def subscribe(self, topic: Topic, handler: Handler) -> None:
        """Register ``handler`` for ``topic``.

        Registering the same handler for the same topic again is a no-op, so a
        handler runs at most once per registration key on each publish.
        """
        subscription = Subscription(topic, handler)
        if subscription in self._subscriptions:
            logger.debug("Handler already subscribed", topic=str(topic), handler=_handler_name(handler))
            return
        self._subscriptions.append(subscription)

    def unsubscribe(self, topic: Topic, handler: Handler) -> None:
        """Remove a registration; unknown pairings are ignored."""
        subscription = Subscription(topic, handler)
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def subscribe_all(self, handler: Handler) -> None:
        self.subscribe("*", handler)

    def unsubscribe_all(self) -> None:
        """Drop every registration."""
        self._subscriptions = []

    def subscriber_count(self, topic: str | None = None) -> int:
        if topic is None:
            return len(self._subscriptions)
        return sum(1 for s in self._subscriptions if s.matches(topic))

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def publish(self, topic: str, payload: Any = None) -> None:
        """Invoke every handler matching ``topic`` with ``payload``.

        A failing handler is logged and skipped; the remaining handlers still
        run. A handler may publish any topic. Publishing a topic that is
        already being dispatched defers it until the outermost dispatch
        returns, so every handler sees that topic's events in publish order.
        A chain that keeps deferring past ``max_deferred`` events raises
        ``ReentrantPublishError``.
        """
        if topic in self._dispatching:
            logger.debug("Publish deferred until dispatch completes", topic=topic)
            self._deferred.append((topic, payload))
            return

        outermost = not self._dispatching
        self._dispatch(topic, payload)
        if outermost:
            self._drain_deferred()

    def _dispatch(self, topic: str, payload: Any) -> None:
        # Snapshot: (un)subscribing from a handler takes effect on the next publish
        handlers = [s.handler for s in self._subscriptions if s.matches(topic)]
        if not handlers:
            logger.debug("No subscribers for topic", topic=topic)
            return

        self._dispatching.add(topic)
        try:
            for handler in handlers:
                try:
                    handler(payload)
                except Exception:
                    logger.exception(
                        "Event handler failed",
                        topic=topic,
                        handler=_handler_name(handler),
                    )
        finally:
            self._dispatching.discard(topic)

    def _drain_deferred(self) -> None:
        drained = 0
        while self._deferred:
            topic, payload = self._deferred.popleft()
            if drained >= self.max_deferred:
                self._deferred.clear()
                logger.error("Deferred publish limit reached", topic=topic, limit=self.max_deferred)
                raise ReentrantPublishError(topic, self.max_deferred)
            drained += 1
            self._dispatch(topic, payload)

    def trigger(self, topic: str, context: dict | None = None) -> Callable[..., None]:
        """Return a callback that publishes ``topic`` when invoked.

        Dict payloads passed to the callback are merged over ``context``; any
        other payload replaces it.
        """

        def _publish(payload: Any = None) -> None:
            if payload is None:
                data = dict(context) if context is not None else None
            elif isinstance(payload, dict) and context is not None:
                data = {**context, **payload}
            else:
                data = payload
            self.publish(topic, data)

        return _publish
