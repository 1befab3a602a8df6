"""Consumes order-created events and creates a payment for each order."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Protocol

from gorder.broker import Delivery, Publishing, handle_retry
from gorder.order.convertor import order_from_wire
from gorder.payment.commands import Application, CreatePayment, PaymentOrder

_LOG = logging.getLogger(__name__)

DEFAULT_MAX_RETRY = 3


class _Channel(Protocol):
    def publish(self, publishing: Publishing) -> None: ...


def _parse(body: bytes) -> PaymentOrder:
    data = json.loads(body)
    if not isinstance(data, Mapping):
        raise ValueError("message body is not a JSON object")
    try:
        order = order_from_wire(data)
    except (TypeError, AttributeError) as exc:
        raise ValueError(f"malformed order: {exc}") from exc
    return PaymentOrder(
        id=order.id,
        customer_id=order.customer_id,
        status=order.status,
        payment_link=order.payment_link,
        items=list(order.items or []),
    )


class OrderCreatedConsumer:
    """Creates a payment link for every newly created order."""

    def __init__(self, app: Application, channel: _Channel, max_retry: int = DEFAULT_MAX_RETRY) -> None:
        self.app = app
        self.channel = channel
        self.max_retry = max_retry

    def handle_message(self, delivery: Delivery) -> None:
        """Process one delivery and settle it."""
        _LOG.info("Payment receive a message, msg=%r", delivery.body)
        try:
            order = _parse(delivery.body)
        except ValueError as exc:
            _LOG.info("failed to unmarshall msg to order, err=%s", exc)
            delivery.nack()
            return

        try:
            self.app.create_payment.handle(CreatePayment(order=order))
        except Exception as exc:
            _LOG.info("failed to create payment, err=%s", exc)
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

        _LOG.info("consume success")
        delivery.ack()