import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Union

from pydantic import ValidationError

from storefront.core.config import settings
from storefront.core.events import EventBus, StoreEvent, event_bus
from storefront.core.exceptions import ApiError, AuthenticationRequired, StorefrontException
from storefront.core.logging_config import mask_token
from storefront.core.order_math import (  # noqa: F401
    get_cart_items_count,
    get_cart_subtotal,
    get_cart_summary,
    get_cart_total,
)
from storefront.schemas.cart import CartItem, CartItemCreate, CartQuantityUpdate
from storefront.schemas.result import Result
from storefront.services.api_client import ApiClient
from storefront.services.session_service import SessionStore

logger = logging.getLogger(__name__)

ItemId = Union[int, str]


def _as_number(value: Any) -> float:
    # Laravel serialises decimals as strings
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def normalize_cart_item(raw: dict) -> CartItem:
    """Fill `total` and nested product fields from whatever the server sent"""
    product = raw.get("product") if isinstance(raw.get("product"), dict) else {}
    price = _as_number(raw.get("price"))
    quantity = _as_number(raw.get("quantity"))
    image_url = raw.get("image_url")

    item = dict(raw)
    item["price"] = price
    item["total"] = _as_number(raw.get("total")) or price * quantity
    item["product"] = {
        "name": product.get("name") or raw.get("name"),
        "price": _as_number(product.get("price")) or price,
        "image_url": product.get("image_url") or image_url,
        "images": product.get("images") or [image_url],
        "model": product.get("model") or "Standard Model",
        "category": product.get("category") or "Electric Vehicle",
        "description": product.get("description"),
    }
    return CartItem.model_validate(item)


class CartClient:
    """CRUD over the server-side cart plus the cartUpdated/cartCleared signals"""

    def __init__(
        self,
        api: ApiClient,
        session: SessionStore,
        events: Optional[EventBus] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        max_clear_attempts: Optional[int] = None,
        clear_retry_delay: Optional[float] = None,
    ):
        self.api = api
        self.session = session
        self.events = events or event_bus
        self.sleep = sleep
        self.max_clear_attempts = (
            settings.CART_CLEAR_MAX_ATTEMPTS if max_clear_attempts is None else max_clear_attempts
        )
        self.clear_retry_delay = (
            settings.CART_CLEAR_RETRY_DELAY_SECONDS if clear_retry_delay is None else clear_retry_delay
        )

    def _require_token(self) -> str:
        token = self.session.get_auth_token()
        if not token:
            raise AuthenticationRequired()
        return token

    async def fetch_cart(self) -> Result[List[CartItem]]:
        """Read the cart; never raises"""
        token = self.session.get_auth_token()
        if not token:
            return Result.empty([])

        try:
            response = await self.api.request("GET", "/cart", token=token)
        except ApiError as e:
            logger.error(f"Get cart error: {e.message}")
            return Result.failed([], e.message)

        envelope = self.api.parse_envelope(response)
        if not envelope.success:
            message = envelope.message or f"HTTP {response.status_code}"
            logger.error(f"Get cart error: {message}")
            return Result.failed([], message)
        if not envelope.data:
            return Result.empty([])
        if not isinstance(envelope.data, list):
            logger.error("Get cart error: expected a list of cart items")
            return Result.failed([], "Malformed cart response")

        items = []
        for raw in envelope.data:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping malformed cart entry: {raw!r}")
                continue
            try:
                items.append(normalize_cart_item(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed cart entry {raw.get('id')}: {e}")
        return Result.ok(items)

    async def get_cart(self) -> List[CartItem]:
        result = await self.fetch_cart()
        return result.value

    async def add_to_cart(self, product_id: int, quantity: int = 1, color: Optional[str] = None) -> CartItem:
        token = self._require_token()
        body = CartItemCreate(product_id=product_id, quantity=quantity, color=color)

        try:
            response = await self.api.request("POST", "/cart", token=token, json_body=body.model_dump())
        except ApiError as e:
            logger.error(f"Add to cart error: {e.message}")
            raise

        envelope = self.api.parse_envelope(response)
        if not (envelope.success and isinstance(envelope.data, dict)):
            message = envelope.message or "Failed to add to cart"
            logger.error(f"Add to cart error: {message}")
            raise ApiError(message, response.status_code)

        try:
            item = normalize_cart_item(envelope.data)
        except ValidationError as e:
            raise ApiError(f"Malformed cart item in response: {e}", response.status_code) from e

        await self.events.publish(StoreEvent.CART_UPDATED)
        return item

    async def update_cart_quantity(self, item_id: ItemId, quantity: int) -> bool:
        try:
            token = self._require_token()
            response = await self.api.request(
                "PUT",
                f"/cart/{item_id}",
                token=token,
                json_body=CartQuantityUpdate(quantity=quantity).model_dump(),
            )
        except StorefrontException as e:
            logger.error(f"Update cart quantity error: {e.message}")
            return False

        envelope = self.api.parse_envelope(response)
        if envelope.success:
            await self.events.publish(StoreEvent.CART_UPDATED)
        else:
            logger.error(f"Update cart quantity failed: {envelope.message}")
        return envelope.success

    async def remove_from_cart(self, item_id: ItemId) -> bool:
        try:
            token = self._require_token()
            response = await self.api.request("DELETE", f"/cart/{item_id}", token=token)
        except StorefrontException as e:
            logger.error(f"Remove from cart error: {e.message}")
            return False

        envelope = self.api.parse_envelope(response)
        if envelope.success:
            await self.events.publish(StoreEvent.CART_UPDATED)
        else:
            logger.error(f"Remove from cart failed: {envelope.message}")
        return envelope.success

    async def clear_cart(self) -> bool:
        """Empty the cart; raises on any failure"""
        token = self.session.get_auth_token()
        if not token:
            logger.error("No authentication token found")
            raise AuthenticationRequired()

        logger.info(f"Attempting to clear cart with token: {mask_token(token)}")
        response = await self.api.request("DELETE", "/cart/clear", token=token)

        if not response.is_success:
            message = self.api.error_message(response)
            logger.error(f"Clear cart HTTP error: {response.status_code} {message}")
            raise ApiError(message, response.status_code)

        envelope = self.api.parse_envelope(response)
        if not envelope.success:
            logger.error(f"Failed to clear cart: {envelope.message}")
            raise ApiError(envelope.message or "Failed to clear cart", response.status_code)

        # Badge listens for cartCleared to zero out without a refetch
        await self.events.publish(StoreEvent.CART_UPDATED)
        await self.events.publish(StoreEvent.CART_CLEARED)
        logger.info(f"Cart cleared successfully, deleted items: {envelope.deleted_items or 0}")
        return True

    async def clear_cart_after_checkout(self) -> bool:
        """
        Clear the cart once an order went through.

        The order already exists server side, so a failure here must not be
        fatal: retry with a fixed delay and report False when every attempt
        failed.
        """
        last_error: Optional[str] = None

        for attempt in range(1, self.max_clear_attempts + 1):
            try:
                if await self.clear_cart():
                    logger.info("Cart cleared after successful checkout")
                    return True
            except StorefrontException as e:
                last_error = e.message
                logger.warning(f"Cart clear attempt {attempt} failed: {e.message}")

            if attempt < self.max_clear_attempts:
                logger.info(f"Waiting before retry attempt {attempt + 1}...")
                await self.sleep(self.clear_retry_delay)

        logger.error(f"Failed to clear cart after {self.max_clear_attempts} attempts. Last error: {last_error}")
        return False
