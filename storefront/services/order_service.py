import logging
from typing import Any, List, Optional, Union

from pydantic import ValidationError

from storefront.core.exceptions import (
    ApiError,
    AuthenticationRequired,
    AuthorizationException,
    ValidationException,
)
from storefront.schemas.order import OrderCreate, OrderOut, OrderStatus, OrderStatusUpdate, TrackingEvent
from storefront.services.api_client import ApiClient
from storefront.services.session_service import SessionStore

logger = logging.getLogger(__name__)

OrderId = Union[int, str]


def placed_order(data: Any) -> OrderOut:
    """Build the order the server accepted, keeping only what parses."""
    if not isinstance(data, dict):
        logger.warning(f"Order accepted without order details: {data!r}")
        return OrderOut.model_construct(id=None)
    try:
        return OrderOut.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Order accepted but response was malformed: {e}")
        order_id = data.get("id")
        order_number = data.get("order_number")
        return OrderOut.model_construct(
            id=order_id if isinstance(order_id, (int, str)) else None,
            order_number=order_number if isinstance(order_number, str) else None,
        )


class OrderClient:
    """Order lifecycle calls: place, list, detail, tracking, admin status"""

    def __init__(self, api: ApiClient, session: SessionStore):
        self.api = api
        self.session = session

    async def create_order(self, order: OrderCreate) -> OrderOut:
        """Submit an order; raises on any failure (never retried here)"""
        token = self.session.get_auth_token()
        if not token:
            raise AuthenticationRequired()

        body = order.model_dump(mode="json", by_alias=True)
        response = await self.api.request("POST", "/orders", token=token, json_body=body)
        envelope = self.api.parse_envelope(response)

        if not envelope.success:
            message = envelope.message or "Order failed"
            logger.error(f"Order submission failed: {message}")
            raise ApiError(message, response.status_code)

        placed = placed_order(envelope.data)

        logger.info(f"Order {placed.order_number or placed.id} placed")
        return placed

    async def list_orders(self) -> List[OrderOut]:
        token = self.session.get_auth_token()
        if not token:
            return []
        try:
            response = await self.api.request("GET", "/orders", token=token)
        except ApiError as e:
            logger.error(f"Error fetching orders: {e.message}")
            return []

        envelope = self.api.parse_envelope(response)
        if not envelope.success or not isinstance(envelope.data, list):
            logger.error(f"Error fetching orders: {envelope.message or response.status_code}")
            return []

        orders = []
        for raw in envelope.data:
            try:
                orders.append(OrderOut.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed order entry: {e}")
        return orders

    async def get_order(self, order_id: OrderId) -> Optional[OrderOut]:
        token = self.session.get_auth_token()
        if not token:
            return None
        try:
            response = await self.api.request("GET", f"/orders/{order_id}", token=token)
        except ApiError as e:
            logger.error(f"Error fetching order {order_id}: {e.message}")
            return None

        envelope = self.api.parse_envelope(response)
        if not envelope.success or not isinstance(envelope.data, dict):
            logger.error(f"Error fetching order {order_id}: HTTP {response.status_code}")
            return None
        try:
            return OrderOut.model_validate(envelope.data)
        except ValidationError as e:
            logger.error(f"Malformed order {order_id}: {e}")
            return None

    async def get_tracking(self, order_id: OrderId) -> List[TrackingEvent]:
        token = self.session.get_auth_token()
        if not token:
            return []
        try:
            response = await self.api.request("GET", f"/orders/{order_id}/tracking", token=token)
        except ApiError as e:
            logger.error(f"Error fetching tracking info: {e.message}")
            return []

        envelope = self.api.parse_envelope(response)
        if not envelope.success or not isinstance(envelope.data, list):
            return []

        events = []
        for raw in envelope.data:
            try:
                events.append(TrackingEvent.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping malformed tracking event: {e}")
        return events

    async def update_order_status(self, order_id: OrderId, status: Union[OrderStatus, str]) -> bool:
        """Admin only; raises on failure"""
        token = self.session.get_auth_token()
        if not token:
            raise AuthenticationRequired()
        if not self.session.is_admin():
            raise AuthorizationException("Admin access required")

        try:
            body = OrderStatusUpdate(status=status).model_dump(mode="json")
        except ValidationError as e:
            raise ValidationException("status", f"Unknown order status: {status}") from e

        response = await self.api.request("PUT", f"/orders/{order_id}/status", token=token, json_body=body)
        envelope = self.api.parse_envelope(response)
        if not envelope.success:
            message = envelope.message or "Failed to update status"
            logger.error(f"Error updating order status: {message}")
            raise ApiError(message, response.status_code)

        logger.info(f"Order {order_id} moved to {body['status']}")
        return True
