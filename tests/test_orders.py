from __future__ import annotations

import json

import httpx
import pytest

from storefront.core.exceptions import ApiError, AuthenticationRequired, AuthorizationException, ValidationException
from storefront.schemas.order import OrderCreate, OrderStatus, ShippingInfo

ORDER = {
    "id": 42,
    "order_number": "ORD-0042",
    "status": "shipped",
    "total": 3000,
    "created_at": "2026-05-01T10:00:00Z",
    "items": [{"id": 1, "quantity": 2, "price": 1000, "product": {"name": "E-Trike"}}],
    "tracking_number": "LBC123",
}


async def test_list_orders(orders, logged_in, backend) -> None:
    backend.add("GET", "/orders", (200, {"success": True, "data": [ORDER, {"bad": True}]}))

    result = await orders.list_orders()

    assert [o.order_number for o in result] == ["ORD-0042"]
    assert result[0].items[0].quantity == 2


async def test_list_orders_degrades_to_empty(orders, logged_in, backend) -> None:
    backend.add("GET", "/orders", httpx.ConnectError("offline"))

    assert await orders.list_orders() == []


async def test_reads_without_token_skip_network(orders, backend) -> None:
    assert await orders.list_orders() == []
    assert await orders.get_order(42) is None
    assert await orders.get_tracking(42) == []
    assert backend.requests == []


async def test_get_order(orders, logged_in, backend) -> None:
    backend.add("GET", "/orders/42", (200, {"success": True, "data": ORDER}))

    order = await orders.get_order(42)

    assert order.status == "shipped"
    assert order.tracking_number == "LBC123"


async def test_get_missing_order_is_none(orders, logged_in, backend) -> None:
    assert await orders.get_order(99) is None


async def test_get_tracking(orders, logged_in, backend) -> None:
    events = [
        {"id": 1, "status": "confirmed", "description": "Order confirmed", "location": "Manila", "timestamp": "2026-05-01T10:00:00Z"},
        {"id": 2, "status": "shipped", "description": "Left warehouse", "location": "Pasig", "timestamp": "2026-05-02T08:00:00Z"},
    ]
    backend.add("GET", "/orders/42/tracking", (200, {"success": True, "data": events}))

    tracking = await orders.get_tracking(42)

    assert [e.status for e in tracking] == ["confirmed", "shipped"]


async def test_update_status_requires_admin(orders, logged_in, backend) -> None:
    with pytest.raises(AuthorizationException):
        await orders.update_order_status(42, OrderStatus.shipped)
    assert backend.requests == []


async def test_update_status_requires_login(orders, backend) -> None:
    with pytest.raises(AuthenticationRequired):
        await orders.update_order_status(42, "shipped")


async def test_update_status_as_admin(orders, admin_session, backend) -> None:
    backend.add("PUT", "/orders/42/status", (200, {"success": True, "data": ORDER}))

    assert await orders.update_order_status(42, "delivered") is True
    body = json.loads(backend.calls("PUT", "/orders/42/status")[0].content)
    assert body == {"status": "delivered"}


async def test_update_status_unknown_value(orders, admin_session, backend) -> None:
    with pytest.raises(ValidationException):
        await orders.update_order_status(42, "lost")
    assert backend.requests == []


async def test_update_status_failure_raises(orders, admin_session, backend) -> None:
    backend.add("PUT", "/orders/42/status", (409, {"success": False, "message": "Order already delivered"}))

    with pytest.raises(ApiError, match="already delivered"):
        await orders.update_order_status(42, OrderStatus.cancelled)


async def test_create_order_requires_login(orders, backend) -> None:
    draft = OrderCreate(items=[], shipping_info=ShippingInfo(), subtotal=0, shipping_fee=500, total=500)
    with pytest.raises(AuthenticationRequired):
        await orders.create_order(draft)
    assert backend.requests == []


async def test_create_order_keeps_accepted_order_with_bad_fields(orders, logged_in, backend) -> None:
    backend.add("POST", "/orders", (201, {"success": True, "data": {"id": 7, "order_number": "ORD-7", "total": "n/a"}}))
    draft = OrderCreate(items=[], shipping_info=ShippingInfo(), subtotal=0, shipping_fee=500, total=500)

    placed = await orders.create_order(draft)

    assert placed.id == 7
    assert placed.order_number == "ORD-7"
    assert placed.items == []


async def test_create_order_rejected_by_server(orders, logged_in, backend) -> None:
    backend.add("POST", "/orders", (400, {"success": False}))
    draft = OrderCreate(items=[], shipping_info=ShippingInfo(), subtotal=0, shipping_fee=500, total=500)

    with pytest.raises(ApiError, match="Order failed"):
        await orders.create_order(draft)
