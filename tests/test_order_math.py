from __future__ import annotations

import pytest

from conftest import cart_item

from storefront.core.order_math import calc_order_total, calc_shipping_fee, get_cart_summary
from storefront.services.cart_service import normalize_cart_item
from storefront.utils.formatters import field_label, format_price, split_full_name


@pytest.mark.parametrize(
    ("subtotal", "fee"),
    [(0, 500), (49_999, 500), (50_000, 500), (50_001, 0), (250_000, 0)],
)
def test_shipping_fee_threshold_is_strictly_greater(subtotal, fee) -> None:
    assert calc_shipping_fee(subtotal) == fee


def test_shipping_fee_overrides() -> None:
    assert calc_shipping_fee(150, free_threshold=100, flat_fee=10) == 0
    assert calc_shipping_fee(100, free_threshold=100, flat_fee=10) == 10


def test_two_item_cart_summary() -> None:
    items = [normalize_cart_item(cart_item(1, 10, 2, 1000)), normalize_cart_item(cart_item(2, 11, 1, 500))]

    summary = get_cart_summary(items)

    assert summary.item_count == 3
    assert summary.subtotal == 2500
    assert summary.shipping == 500
    assert summary.total == 3000


def test_order_total_adds_shipping() -> None:
    assert calc_order_total(60_000, 0) == 60_000


def test_format_price() -> None:
    assert format_price(1234.5) == "₱1,234.50"
    assert format_price(0) == "₱0.00"
    assert format_price(-20, symbol="$") == "-$20.00"


def test_field_label_and_name_split() -> None:
    assert field_label("zip_code") == "zip code"
    assert split_full_name("Ana Reyes Cruz") == ("Ana", "Reyes Cruz")
    assert split_full_name("Ana") == ("Ana", "")
