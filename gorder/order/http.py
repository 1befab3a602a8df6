"""HTTP endpoint logic for creating and reading customer orders."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from gorder.errors import ERROR_BIND_REQUEST_ERROR, ERROR_REQUEST_VALIDATE_ERROR, new_with_error
from gorder.order.commands import Application, CreateOrder, GetCustomerOrder
from gorder.order.domain import ItemWithQuantity, Order
from gorder.response import Response, build_response

DEFAULT_SUCCESS_URL = "http://localhost:8282/success"
EMPTY_TRACE_ID = "0" * 32

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


@dataclass(frozen=True)
class CreateOrderResponse:
    """Payload returned after an order was created."""

    order_id: str
    customer_id: str
    redirect_url: str


def validate_items(items: Iterable[ItemWithQuantity]) -> None:
    """Raise ``ValueError`` if any item has a non-positive quantity."""
    for item in items:
        if item.quantity <= 0:
            raise ValueError(f"quantity must be positive, got {item.quantity} from {item.id}")


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"field {key!r} must be a string")
    return value


def _parse_item(raw: Any) -> ItemWithQuantity:
    if not isinstance(raw, Mapping):
        raise TypeError("item must be a JSON object")
    quantity = raw.get("quantity", 0)
    if quantity is None:
        quantity = 0
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise TypeError("field 'quantity' must be an integer")
    if not _INT32_MIN <= quantity <= _INT32_MAX:
        raise ValueError(f"quantity {quantity} out of range")
    return ItemWithQuantity(id=_string(raw, "id"), quantity=quantity)


def _parse_create_request(body: Any) -> tuple[str, list[ItemWithQuantity]]:
    data = json.loads(body) if isinstance(body, (str, bytes, bytearray)) else body
    if not isinstance(data, Mapping):
        raise TypeError("request body must be a JSON object")
    raw_items = data.get("items")
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise TypeError("field 'items' must be a list")
    return _string(data, "customer_id"), [_parse_item(raw) for raw in raw_items]


def _order_to_client(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "status": order.status,
        "payment_link": order.payment_link,
        "items": None
        if order.items is None
        else [
            {"id": i.id, "name": i.name, "quantity": i.quantity, "price_id": i.price_id}
            for i in order.items
        ],
    }


class OrderHTTPHandlers:
    """Turns HTTP requests into application calls and response envelopes."""

    def __init__(self, app: Application, success_url: str = DEFAULT_SUCCESS_URL) -> None:
        self.app = app
        self.success_url = success_url

    def post_customer_orders(
        self, customer_id: str, body: Any, trace_id: str = EMPTY_TRACE_ID
    ) -> Response:
        """Create an order from a JSON body with ``customer_id`` and ``items``."""
        try:
            req_customer, items = _parse_create_request(body)
        except (ValueError, TypeError) as exc:
            return build_response(new_with_error(ERROR_BIND_REQUEST_ERROR, exc), None, trace_id)
        try:
            validate_items(items)
        except ValueError as exc:
            return build_response(new_with_error(ERROR_REQUEST_VALIDATE_ERROR, exc), None, trace_id)
        try:
            result = self.app.create_order.handle(CreateOrder(customer_id=req_customer, items=items))
        except Exception as exc:
            return build_response(exc, None, trace_id)
        resp = CreateOrderResponse(
            order_id=result.order_id,
            customer_id=req_customer,
            redirect_url=f"{self.success_url}?customerID={req_customer}&orderID={result.order_id}",
        )
        return build_response(None, resp, trace_id)

    def get_customer_order(
        self, customer_id: str, order_id: str, trace_id: str = EMPTY_TRACE_ID
    ) -> Response:
        """Return one of the customer's orders."""
        try:
            order = self.app.get_customer_order.handle(
                GetCustomerOrder(customer_id=customer_id, order_id=order_id)
            )
        except Exception as exc:
            return build_response(exc, None, trace_id)
        return build_response(None, _order_to_client(order), trace_id)