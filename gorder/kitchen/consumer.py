"""The kitchen: cooks paid orders and marks them ready."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Protocol

from gorder.broker import Delivery, Publishing, handle_retry
from gorder.order.convertor import order_from_wire
from gorder.order.domain import PAID_STATUS, Order

_LOG = logging.getLogger(__name__)

READY_STATUS = "ready"
DEFAULT_MAX_RETRY = 3


class _OrderService(Protocol):
    def update_order(self, order: Order) -> None: ...


class _Channel(Protocol):
    def publish(self, publishing: Publishing) -> None: ...


def _default_cook(order: Order) -> None:
    _LOG.info("cooking order: %s", order.id)
    time.sleep(5)
    _LOG.info("order %s done!", order.id)


def _parse(body: bytes) -> Order:
    data = json.loads(body)
    if not isinstance(data, Mapping):
        raise ValueError("message body is not a JSON object")
    try:
        return order_from_wire(data)
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"malformed order: {exc}") from exc


class KitchenConsumer:
    """Handles order-paid messages: cook, then report the order as ready."""

    def __init__(
        self,
        order_service: _OrderService,
        channel: _Channel,
        cook: Callable[[Order], None] | None = None,
        max_retry: int = DEFAULT_MAX_RETRY,
    ) -> None:
        self.order_service = order_service
        self.channel = channel
        self.cook = cook if cook is not None else _default_cook
        self.max_retry = max_retry

    def handle_message(self, delivery: Delivery) -> None:
        """Process one delivery and settle it."""
        _LOG.info("kitchen receive a message, msg=%r", delivery.body)
        try:
            order = _parse(delivery.body)
        except ValueError as exc:
            _LOG.info("failed to unmarshall msg to order, err=%s", exc)
            delivery.nack()
            return
        if order.status != PAID_STATUS:
            _LOG.info("order status is not paid")
            delivery.nack()
            return
        self.cook(order)
        ready = Order(
            id=order.id,
            customer_id=order.customer_id,
            status=READY_STATUS,
            payment_link=order.payment_link,
            items=order.items,
        )
        try:
            self.order_service.update_order(ready)
        except Exception as exc:
            _LOG.info("failed to update order, err=%s", exc)
            try:
                handle_retry(self.channel, delivery, self.max_retry)
            except Exception as retry_exc:
                _LOG.warning("kitchen: error handling retry: err=%s", retry_exc)
                delivery.nack()
                return
            delivery.ack()
            return
        _LOG.info("consume success")
        delivery.ack()