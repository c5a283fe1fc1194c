r"""
Checkout: validate the shipping form, submit the order, then clear the cart.

    idle -> validating -> submitting -> success -> clearing_cart -> done
                      \-> idle       \-> failure -> idle

Only the cart clearing is retried. The order submission is not, so a second
submit is a second order.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import urlencode

from storefront.core.events import EventBus, StoreEvent, event_bus
from storefront.core.exceptions import StorefrontException, ValidationException
from storefront.core.order_math import calc_order_total, calc_shipping_fee, get_cart_subtotal
from storefront.schemas.cart import CartItem
from storefront.schemas.order import OrderCreate, OrderItemCreate, OrderOut, PaymentMethod, ShippingInfo
from storefront.schemas.session import User
from storefront.services.cart_service import CartClient
from storefront.services.order_service import OrderClient
from storefront.utils.formatters import field_label, split_full_name

logger = logging.getLogger(__name__)

REQUIRED_SHIPPING_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "city",
    "province",
    "zip_code",
)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PHONE_LENGTH = 10
CART_NOT_CLEARED_WARNING = "Order successful but cart may need manual refresh"


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    CLEARING_CART = "clearing_cart"
    DONE = "done"
    FAILURE = "failure"


@dataclass
class CheckoutOutcome:
    success: bool
    order: Optional[OrderOut] = None
    cart_cleared: bool = False
    error: Optional[str] = None
    warning: Optional[str] = None
    redirect_to: Optional[str] = None


def validate_shipping_info(info: ShippingInfo) -> None:
    """Raise ValidationException for the first rule that fails"""
    for field in REQUIRED_SHIPPING_FIELDS:
        if not getattr(info, field).strip():
            raise ValidationException(field, f"Please fill in {field_label(field)}")

    if not EMAIL_PATTERN.match(info.email):
        raise ValidationException("email", "Please enter a valid email address")

    if len(info.phone) < MIN_PHONE_LENGTH:
        raise ValidationException("phone", "Please enter a valid phone number")


def validate_payment_method(method: Union[PaymentMethod, str]) -> PaymentMethod:
    try:
        method = PaymentMethod(method)
    except ValueError:
        raise ValidationException("payment_method", f"Unknown payment method: {method}")
    if method is PaymentMethod.card:
        raise ValidationException("payment_method", "Card payments are not available yet")
    return method


def build_order(
    cart_items: List[CartItem],
    shipping_info: ShippingInfo,
    payment_method: PaymentMethod = PaymentMethod.cod,
) -> OrderCreate:
    subtotal = get_cart_subtotal(cart_items)
    shipping_fee = calc_shipping_fee(subtotal)
    return OrderCreate(
        items=[
            OrderItemCreate(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
                color=item.color,
            )
            for item in cart_items
        ],
        shipping_info=shipping_info,
        payment_method=payment_method,
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        total=calc_order_total(subtotal, shipping_fee),
    )


def confirmation_path(order: OrderOut) -> str:
    query = {}
    if order.id is not None:
        query["orderId"] = order.id
    if order.order_number:
        query["orderNumber"] = order.order_number
    if not query:
        return "/order-success"
    return f"/order-success?{urlencode(query)}"


class CheckoutFlow:
    def __init__(self, cart: CartClient, orders: OrderClient, events: Optional[EventBus] = None):
        self.cart = cart
        self.orders = orders
        self.events = events or event_bus
        self.state = CheckoutState.IDLE
        self.history: List[CheckoutState] = [CheckoutState.IDLE]
        self.cart_items: List[CartItem] = []

    def _transition(self, state: CheckoutState) -> None:
        logger.debug(f"Checkout {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    async def load_cart(self) -> List[CartItem]:
        """An empty result means the caller should send the user back to the cart"""
        self.cart_items = await self.cart.get_cart()
        return self.cart_items

    @staticmethod
    def prefill(user: Optional[User]) -> ShippingInfo:
        if user is None:
            return ShippingInfo()
        first_name, last_name = split_full_name(user.name)
        return ShippingInfo(first_name=first_name, last_name=last_name, email=user.email)

    def validate_form(
        self,
        shipping_info: ShippingInfo,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.cod,
    ) -> PaymentMethod:
        validate_shipping_info(shipping_info)
        method = validate_payment_method(payment_method)
        if not self.cart_items:
            raise ValidationException("cart", "Your cart is empty")
        return method

    async def place_order(
        self,
        shipping_info: ShippingInfo,
        payment_method: Union[PaymentMethod, str] = PaymentMethod.cod,
    ) -> CheckoutOutcome:
        self._transition(CheckoutState.VALIDATING)
        try:
            method = self.validate_form(shipping_info, payment_method)
        except ValidationException as e:
            logger.info(f"Checkout validation failed on {e.field}: {e.message}")
            self._transition(CheckoutState.IDLE)
            return CheckoutOutcome(success=False, error=e.message)

        order_data = build_order(self.cart_items, shipping_info, method)

        self._transition(CheckoutState.SUBMITTING)
        try:
            order = await self.orders.create_order(order_data)
        except StorefrontException as e:
            logger.error(f"Error placing order: {e.message}")
            self._transition(CheckoutState.FAILURE)
            outcome = CheckoutOutcome(success=False, error=e.message or "Unknown error occurred")
            self._transition(CheckoutState.IDLE)
            return outcome

        self._transition(CheckoutState.SUCCESS)
        self._transition(CheckoutState.CLEARING_CART)
        cart_cleared = await self.cart.clear_cart_after_checkout()
        if cart_cleared:
            self.cart_items = []

        await self.events.publish(StoreEvent.ORDER_PLACED)
        self._transition(CheckoutState.DONE)

        return CheckoutOutcome(
            success=True,
            order=order,
            cart_cleared=cart_cleared,
            warning=None if cart_cleared else CART_NOT_CLEARED_WARNING,
            redirect_to=confirmation_path(order),
        )
