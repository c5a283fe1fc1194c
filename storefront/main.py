import logging
from typing import Optional

import httpx

from storefront.core.config import Settings, settings as default_settings
from storefront.core.events import EventBus
from storefront.core.logging_config import setup_logging
from storefront.core.storage import create_storage
from storefront.services.api_client import ApiClient
from storefront.services.auth_service import AuthClient
from storefront.services.cart_badge import CartBadge
from storefront.services.cart_service import CartClient
from storefront.services.checkout_service import CheckoutFlow
from storefront.services.order_service import OrderClient
from storefront.services.product_service import ProductClient
from storefront.services.search_history import SearchHistory
from storefront.services.session_service import SessionStore

logger = logging.getLogger(__name__)


class Storefront:
    """Wires every client service around one session, storage and event bus"""

    def __init__(
        self,
        config: Optional[Settings] = None,
        storage=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        events: Optional[EventBus] = None,
    ):
        self.settings = config or default_settings
        self.storage = storage or create_storage(self.settings.STORAGE_BACKEND)
        self.events = events or EventBus()

        self.session = SessionStore(self.storage, key=self.settings.SESSION_STORAGE_KEY)
        self.api = ApiClient(
            base_url=self.settings.API_BASE_URL,
            transport=transport,
            timeout=self.settings.REQUEST_TIMEOUT_SECONDS,
        )

        self.auth = AuthClient(self.api, self.session)
        self.cart = CartClient(
            self.api,
            self.session,
            events=self.events,
            max_clear_attempts=self.settings.CART_CLEAR_MAX_ATTEMPTS,
            clear_retry_delay=self.settings.CART_CLEAR_RETRY_DELAY_SECONDS,
        )
        self.orders = OrderClient(self.api, self.session)
        self.products = ProductClient(self.api, self.session)
        self.search_history = SearchHistory(
            self.storage,
            key=self.settings.RECENT_SEARCHES_KEY,
            limit=self.settings.RECENT_SEARCHES_LIMIT,
        )
        self.cart_badge = CartBadge(self.cart, self.events)

    def checkout(self) -> CheckoutFlow:
        """Fresh checkout state machine for one checkout page visit"""
        return CheckoutFlow(self.cart, self.orders, events=self.events)

    async def start(self) -> "Storefront":
        self.session.hydrate()
        await self.cart_badge.mount()
        return self

    async def close(self) -> None:
        self.cart_badge.unmount()
        await self.api.close()

    async def __aenter__(self):
        return await self.start()

    async def __aexit__(self, *exc_info):
        await self.close()


def create_storefront(config: Optional[Settings] = None, **kwargs) -> Storefront:
    config = config or default_settings
    setup_logging(config.LOG_LEVEL, config.LOG_FORMAT)
    return Storefront(config=config, **kwargs)
