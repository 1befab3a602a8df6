import json

import pytest

from gorder.broker import EVENT_ORDER_CREATED
from gorder.order.commands import (
    CreateOrder,
    CreateOrderHandler,
    GetCustomerOrder,
    GetCustomerOrderHandler,
    UpdateOrder,
    UpdateOrderHandler,
    build_application,
    pack_items,
)
from gorder.order.domain import Item, ItemWithQuantity, Order, OrderNotFoundError
from gorder.order.memory_repository import MemoryOrderRepository


class FakeStock:
    def __init__(self):
        self.calls = []

    def check_if_items_in_stock(self, items):
        self.calls.append(items)
        return [Item(id=i.id, name="", quantity=i.quantity, price_id="price-" + i.id) for i in items]

    def get_items(self, item_ids):
        return [Item(id=i) for i in item_ids]


class FakePublisher:
    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    def publish(self, publishing):
        if self.fail:
            raise ConnectionError("closed")
        self.published.append(publishing)


class RecordingMetrics:
    def __init__(self):
        self.keys = []

    def inc(self, key, value):
        self.keys.append(key)


def _repo():
    return MemoryOrderRepository(clock=lambda: 1234.0)


def test_pack_items_merges_by_id():
    packed = pack_items([ItemWithQuantity("a", 1), ItemWithQuantity("b", 2), ItemWithQuantity("a", 3)])
    assert packed == [ItemWithQuantity("a", 4), ItemWithQuantity("b", 2)]


def test_pack_items_preserves_total():
    items = [ItemWithQuantity("x", 5), ItemWithQuantity("y", 1), ItemWithQuantity("x", 2)]
    packed = pack_items(items)
    assert sum(i.quantity for i in packed) == sum(i.quantity for i in items)
    assert len({i.id for i in packed}) == len(packed)


def test_create_order_stores_and_publishes():
    repo, stock, publisher = _repo(), FakeStock(), FakePublisher()
    handler = CreateOrderHandler(repo, stock, publisher)
    result = handler.handle(CreateOrder("c1", [ItemWithQuantity("a", 1), ItemWithQuantity("a", 2)]))
    assert result.order_id == "1234"
    stored = repo.get("1234", "c1")
    assert stored.status == "pending"
    assert stored.items[0].price_id == "price-a"
    assert stock.calls == [[ItemWithQuantity("a", 3)]]
    [message] = publisher.published
    assert message.exchange == ""
    assert message.routing_key == EVENT_ORDER_CREATED
    body = json.loads(message.body)
    assert body["ID"] == "1234"
    assert body["CustomerID"] == "c1"


def test_create_order_requires_items():
    publisher = FakePublisher()
    handler = CreateOrderHandler(_repo(), FakeStock(), publisher)
    with pytest.raises(ValueError, match="must have at least one item"):
        handler.handle(CreateOrder("c1", []))
    assert publisher.published == []


def test_create_order_publish_failure():
    handler = CreateOrderHandler(_repo(), FakeStock(), FakePublisher(fail=True))
    with pytest.raises(RuntimeError, match="publish event error") as info:
        handler.handle(CreateOrder("c1", [ItemWithQuantity("a", 1)]))
    assert isinstance(info.value.__cause__, ConnectionError)


@pytest.mark.parametrize("which", ["orderRepo", "stockGRPC", "channel"])
def test_create_order_handler_rejects_missing_deps(which):
    deps = {"orderRepo": _repo(), "stockGRPC": FakeStock(), "channel": FakePublisher()}
    deps[which] = None
    with pytest.raises(ValueError, match=f"{which} is nil"):
        CreateOrderHandler(*deps.values())


def test_update_order_default_function_keeps_order():
    repo = _repo()
    order = Order(id="fake-ID", customer_id="fake-customer-ID", status="ready")
    assert UpdateOrderHandler(repo).handle(UpdateOrder(order)) is None
    assert repo.get("fake-ID", "fake-customer-ID").status == "ready"


def test_update_order_missing_raises():
    with pytest.raises(OrderNotFoundError):
        UpdateOrderHandler(_repo()).handle(UpdateOrder(Order(id="x", customer_id="y", status="s")))


def test_get_customer_order():
    handler = GetCustomerOrderHandler(_repo())
    assert handler.handle(GetCustomerOrder("fake-customer-ID", "fake-ID")).id == "fake-ID"
    with pytest.raises(OrderNotFoundError):
        handler.handle(GetCustomerOrder("c1", "missing"))


def test_build_application_records_metrics():
    metrics = RecordingMetrics()
    app = build_application(_repo(), FakeStock(), FakePublisher(), None, metrics)
    app.create_order.handle(CreateOrder("c1", [ItemWithQuantity("a", 1)]))
    with pytest.raises(OrderNotFoundError):
        app.get_customer_order.handle(GetCustomerOrder("c1", "missing"))
    assert "command.createorder.success" in metrics.keys
    assert "query.getcustomerorder.failure" in metrics.keys