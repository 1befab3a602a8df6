"""Consumes order-paid events and records the payment on the order."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Protocol

from gorder.broker import Delivery, Publishing, handle_retry
from gorder.order.commands import Application, UpdateOrder
from gorder.order.convertor import order_from_wire
from gorder.order.domain import Order

_LOG = logging.getLogger(__name__)

DEFAULT_MAX_RETRY = 3


class _Channel(Protocol):
    def publish(self, publishing: Publishing) -> None: ...


def _parse(body: bytes) -> Order:
    data = json.loads(body)
    if not isinstance(data, Mapping):
        raise ValueError("message body is not a JSON object")
    try:
        return order_from_wire(data)
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"malformed order: {exc}") from exc


class OrderPaidConsumer:
    """Marks orders as paid when a paid event arrives."""

    def __init__(self, app: Application, channel: _Channel, max_retry: int = DEFAULT_MAX_RETRY) -> None:
        self.app = app
        self.channel = channel
        self.max_retry = max_retry

    def handle_message(self, delivery: Delivery) -> None:
        """Process one delivery and settle it."""
        try:
            order = _parse(delivery.body)
        except ValueError as exc:
            _LOG.info("error unmarshal msg.body into domain.order, err=%s", exc)
            delivery.nack()
            return

        def apply_payment(_: Order) -> Order:
            order.ensure_paid()
            return order

        try:
            self.app.update_order.handle(UpdateOrder(order=order, update_fn=apply_payment))
        except Exception as exc:
            _LOG.info("error updating order, orderID = %s, err = %s", order.id, exc)
            try:
                handle_retry(self.channel, delivery, self.max_retry)
            except Exception as retry_exc:
                _LOG.warning(
                    "retry_error, error handling retry, messageID=%s, err=%s",
                    delivery.message_id,
                    retry_exc,
                )
                delivery.nack()
                return
            delivery.ack()
            return

        _LOG.info("order consume paid event success!")
        delivery.ack()