import logging
from typing import Callable, List

from storefront.core.events import EventBus, StoreEvent
from storefront.core.order_math import get_cart_items_count
from storefront.services.cart_service import CartClient

logger = logging.getLogger(__name__)


class CartBadge:
    """Header cart counter kept in sync through cart signals"""

    def __init__(self, cart: CartClient, events: EventBus):
        self.cart = cart
        self.events = events
        self.count = 0
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def mounted(self) -> bool:
        return bool(self._unsubscribers)

    async def mount(self) -> None:
        if self.mounted:
            return
        self._unsubscribers = [
            self.events.subscribe(StoreEvent.CART_UPDATED, self._on_cart_updated),
            self.events.subscribe(StoreEvent.CART_CLEARED, self._on_cart_cleared),
        ]
        await self.refresh()

    def unmount(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def refresh(self) -> int:
        if not self.cart.session.is_authenticated():
            self.count = 0
            return self.count
        items = await self.cart.get_cart()
        self.count = get_cart_items_count(items)
        return self.count

    async def _on_cart_updated(self, event: StoreEvent) -> None:
        await self.refresh()

    def _on_cart_cleared(self, event: StoreEvent) -> None:
        self.count = 0
