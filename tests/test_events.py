from __future__ import annotations

from storefront.core.events import EventBus, StoreEvent


async def test_publish_reaches_sync_and_async_handlers_in_order() -> None:
    bus = EventBus()
    calls: list[str] = []

    def sync_handler(event: StoreEvent) -> None:
        calls.append(f"sync:{event.value}")

    async def async_handler(event: StoreEvent) -> None:
        calls.append(f"async:{event.value}")

    bus.subscribe(StoreEvent.CART_UPDATED, sync_handler)
    bus.subscribe(StoreEvent.CART_UPDATED, async_handler)

    await bus.publish(StoreEvent.CART_UPDATED)

    assert calls == ["sync:cartUpdated", "async:cartUpdated"]


async def test_handlers_only_receive_their_event() -> None:
    bus = EventBus()
    cleared: list[StoreEvent] = []
    bus.subscribe(StoreEvent.CART_CLEARED, cleared.append)

    await bus.publish(StoreEvent.CART_UPDATED)
    await bus.publish(StoreEvent.ORDER_PLACED)

    assert cleared == []


async def test_unsubscribe_callable_stops_delivery() -> None:
    bus = EventBus()
    seen: list[StoreEvent] = []
    unsubscribe = bus.subscribe(StoreEvent.ORDER_PLACED, seen.append)

    unsubscribe()
    unsubscribe()
    await bus.publish(StoreEvent.ORDER_PLACED)

    assert seen == []
    assert bus.listener_count(StoreEvent.ORDER_PLACED) == 0


async def test_failing_handler_does_not_block_others() -> None:
    bus = EventBus()
    seen: list[StoreEvent] = []

    def broken(event: StoreEvent) -> None:
        raise RuntimeError("fragment crashed")

    bus.subscribe(StoreEvent.CART_UPDATED, broken)
    bus.subscribe(StoreEvent.CART_UPDATED, seen.append)

    await bus.publish(StoreEvent.CART_UPDATED)

    assert seen == [StoreEvent.CART_UPDATED]


async def test_handler_may_unsubscribe_during_publish() -> None:
    bus = EventBus()
    seen: list[str] = []
    holder: dict = {}

    def once(event: StoreEvent) -> None:
        seen.append("once")
        holder["unsubscribe"]()

    holder["unsubscribe"] = bus.subscribe(StoreEvent.CART_UPDATED, once)
    bus.subscribe(StoreEvent.CART_UPDATED, lambda event: seen.append("always"))

    await bus.publish(StoreEvent.CART_UPDATED)
    await bus.publish(StoreEvent.CART_UPDATED)

    assert seen == ["once", "always", "always"]


def test_event_names_match_wire_signals() -> None:
    assert [e.value for e in StoreEvent] == ["cartUpdated", "cartCleared", "orderPlaced"]
