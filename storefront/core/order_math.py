"""Shared helpers for cart and order totals."""
from typing import Iterable, Optional

from storefront.core.config import settings
from storefront.schemas.cart import CartItem, CartSummary


def get_cart_items_count(cart_items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in cart_items)


def get_cart_total(cart_items: Iterable[CartItem]) -> float:
    return sum(item.total for item in cart_items)


def get_cart_subtotal(cart_items: Iterable[CartItem]) -> float:
    """Subtotal before shipping"""
    return get_cart_total(cart_items)


def calc_shipping_fee(
    subtotal: float,
    *,
    free_threshold: Optional[float] = None,
    flat_fee: Optional[float] = None,
) -> float:
    """Flat fee unless the subtotal is strictly above the free-shipping threshold"""
    threshold = settings.FREE_SHIPPING_THRESHOLD if free_threshold is None else free_threshold
    fee = settings.FLAT_SHIPPING_FEE if flat_fee is None else flat_fee
    return 0 if subtotal > threshold else fee


def calc_order_total(subtotal: float, shipping_fee: float) -> float:
    return subtotal + shipping_fee


def get_cart_summary(cart_items: Iterable[CartItem]) -> CartSummary:
    items = list(cart_items)
    subtotal = get_cart_subtotal(items)
    shipping = calc_shipping_fee(subtotal)
    return CartSummary(
        item_count=get_cart_items_count(items),
        subtotal=subtotal,
        shipping=shipping,
        total=calc_order_total(subtotal, shipping),
    )
