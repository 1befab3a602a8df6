"""Conversion between order entities and their wire (message) form."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from gorder.order.domain import Item, ItemWithQuantity, Order


def item_to_wire(item: Item) -> dict[str, Any]:
    """Encode an item."""
    return {"ID": item.id, "Name": item.name, "Quantity": item.quantity, "PriceID": item.price_id}


def item_from_wire(data: Mapping[str, Any]) -> Item:
    """Decode an item; missing fields take their zero values."""
    return Item(
        id=data.get("ID") or "",
        name=data.get("Name") or "",
        quantity=data.get("Quantity") or 0,
        price_id=data.get("PriceID") or "",
    )


def items_to_wire(items: Iterable[Item]) -> list[dict[str, Any]]:
    """Encode a list of items."""
    return [item_to_wire(item) for item in items]


def items_from_wire(data: Iterable[Mapping[str, Any]] | None) -> list[Item]:
    """Decode a list of items."""
    return [item_from_wire(entry) for entry in data or ()]


def item_with_quantity_to_wire(item: ItemWithQuantity) -> dict[str, Any]:
    """Encode a product id with a quantity."""
    return {"ID": item.id, "Quantity": item.quantity}


def item_with_quantity_from_wire(data: Mapping[str, Any]) -> ItemWithQuantity:
    """Decode a product id with a quantity."""
    return ItemWithQuantity(id=data.get("ID") or "", quantity=data.get("Quantity") or 0)


def _check(order: Any) -> None:
    if order is None:
        raise ValueError("cannot convert nil order")


def order_to_wire(order: Order) -> dict[str, Any]:
    """Encode an order; absent items are encoded as null."""
    _check(order)
    return {
        "ID": order.id,
        "CustomerID": order.customer_id,
        "Status": order.status,
        "PaymentLink": order.payment_link,
        "Items": None if order.items is None else items_to_wire(order.items),
    }


def order_from_wire(data: Mapping[str, Any]) -> Order:
    """Decode an order; absent or null items stay ``None``."""
    _check(data)
    raw_items = data.get("Items")
    return Order(
        id=data.get("ID") or "",
        customer_id=data.get("CustomerID") or "",
        status=data.get("Status") or "",
        payment_link=data.get("PaymentLink") or "",
        items=None if raw_items is None else items_from_wire(raw_items),
    )