import pytest

from gorder.order.convertor import (
    item_from_wire,
    item_to_wire,
    item_with_quantity_from_wire,
    item_with_quantity_to_wire,
    items_from_wire,
    items_to_wire,
    order_from_wire,
    order_to_wire,
)
from gorder.order.domain import Item, ItemWithQuantity, Order


def test_order_to_wire_field_names():
    order = Order(
        id="o1",
        customer_id="c1",
        status="paid",
        payment_link="link",
        items=[Item(id="i1", name="n", quantity=3, price_id="p")],
    )
    assert order_to_wire(order) == {
        "ID": "o1",
        "CustomerID": "c1",
        "Status": "paid",
        "PaymentLink": "link",
        "Items": [{"ID": "i1", "Name": "n", "Quantity": 3, "PriceID": "p"}],
    }


def test_order_round_trip():
    order = Order(
        id="o1",
        customer_id="c1",
        status="pending",
        items=[Item(id="a", quantity=1), Item(id="b", name="B", quantity=2, price_id="pb")],
    )
    assert order_from_wire(order_to_wire(order)) == order


def test_order_without_items_round_trip():
    order = Order(id="o1", customer_id="c1", status="pending", items=None)
    wire = order_to_wire(order)
    assert wire["Items"] is None
    assert order_from_wire(wire).items is None


def test_order_from_wire_missing_fields():
    order = order_from_wire({"ID": "o1"})
    assert order == Order(id="o1", customer_id="", status="", payment_link="", items=None)


def test_nil_order_rejected():
    with pytest.raises(ValueError, match="cannot convert nil order"):
        order_to_wire(None)
    with pytest.raises(ValueError, match="cannot convert nil order"):
        order_from_wire(None)


def test_item_round_trips():
    item = Item(id="x", name="X", quantity=7, price_id="px")
    assert item_from_wire(item_to_wire(item)) == item
    items = [item, Item(id="y")]
    assert items_from_wire(items_to_wire(items)) == items
    assert items_from_wire(None) == []


def test_item_with_quantity_round_trip():
    item = ItemWithQuantity(id="x", quantity=5)
    wire = item_with_quantity_to_wire(item)
    assert wire == {"ID": "x", "Quantity": 5}
    assert item_with_quantity_from_wire(wire) == item