"""Shared fixtures: in-memory storage, a scripted fake backend and wired clients."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from storefront.core.events import EventBus, StoreEvent
from storefront.core.monitoring import ApiMonitoring
from storefront.core.storage import MemoryStorage
from storefront.services.api_client import ApiClient
from storefront.services.cart_service import CartClient
from storefront.services.order_service import OrderClient
from storefront.services.session_service import SessionStore

BASE_URL = "http://backend.test/api"
TOKEN = "tok_abcdefghijklmnop"


class FakeBackend:
    """httpx.MockTransport handler answering from scripted responses.

    Each route holds a queue; the last entry keeps answering once the
    others are used up. Entries are (status, body), an exception to raise,
    or a callable taking the request.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses) -> None:
        self.routes[(method, "/api" + path)] = list(responses)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == "/api" + path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        entry = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(entry, Exception):
            raise entry
        if callable(entry):
            return entry(request)
        status, body = entry
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_session(role: str = "customer", expires_in: timedelta = timedelta(days=7), token: str = TOKEN) -> dict:
    return {
        "user": {"id": 7, "name": "Ana Reyes Cruz", "email": "ana@evstore.ph", "role": role},
        "token": token,
        "expires": (datetime.now(timezone.utc) + expires_in).isoformat(),
    }


def cart_item(item_id: int, product_id: int, quantity: int, price: float, **extra) -> dict:
    item = {
        "id": item_id,
        "product_id": product_id,
        "quantity": quantity,
        "price": price,
        "total": price * quantity,
        "name": f"E-Trike {product_id}",
        "image_url": f"/img/{product_id}.jpg",
        "product": {
            "name": f"E-Trike {product_id}",
            "price": price,
            "image_url": f"/img/{product_id}.jpg",
            "images": [f"/img/{product_id}.jpg"],
            "model": "ET-1",
            "category": "E-Trike",
        },
    }
    item.update(extra)
    return item


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session(storage) -> SessionStore:
    return SessionStore(storage)


@pytest.fixture
def logged_in(session) -> SessionStore:
    session.set_session(make_session())
    return session


@pytest.fixture
def admin_session(session) -> SessionStore:
    session.set_session(make_session(role="admin"))
    return session


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def monitor() -> ApiMonitoring:
    return ApiMonitoring()


@pytest.fixture
def api(backend, monitor) -> ApiClient:
    return ApiClient(base_url=BASE_URL, transport=httpx.MockTransport(backend), monitor=monitor)


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def received(events) -> list:
    """Every signal published on the test bus, in order"""
    seen: list = []
    for event in StoreEvent:
        events.subscribe(event, seen.append)
    return seen


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def cart(api, session, events, sleeper) -> CartClient:
    return CartClient(api, session, events=events, sleep=sleeper, max_clear_attempts=3, clear_retry_delay=1.0)


@pytest.fixture
def orders(api, session) -> OrderClient:
    return OrderClient(api, session)
