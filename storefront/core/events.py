"""
Typed publish/subscribe bus for client-side signals.

Independent fragments (header badge, cart page, notifications) each keep
their own copy of cart-derived state. Any mutation publishes a StoreEvent and
every subscriber re-reads what it needs.
"""

import inspect
import logging
from collections import defaultdict
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Union

logger = logging.getLogger(__name__)


class StoreEvent(str, Enum):
    CART_UPDATED = "cartUpdated"
    CART_CLEARED = "cartCleared"
    ORDER_PLACED = "orderPlaced"


Handler = Callable[[StoreEvent], Union[None, Awaitable[None]]]


class EventBus:
    """Process-wide signal bus, payload is the event itself"""

    def __init__(self):
        self._handlers: Dict[StoreEvent, List[Handler]] = defaultdict(list)

    def subscribe(self, event: StoreEvent, handler: Handler) -> Callable[[], None]:
        """Register handler; returns a callable that unsubscribes it"""
        self._handlers[event].append(handler)

        def _unsubscribe():
            self.unsubscribe(event, handler)

        return _unsubscribe

    def unsubscribe(self, event: StoreEvent, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: StoreEvent) -> int:
        return len(self._handlers.get(event, []))

    async def publish(self, event: StoreEvent) -> None:
        # Snapshot so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event, [])):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Handler {handler!r} failed for {event.value}")

    def clear(self) -> None:
        self._handlers.clear()


# Global event bus instance
event_bus = EventBus()
