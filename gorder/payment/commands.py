"""Payment use cases: creating a payment link for an order."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from gorder.order.domain import Item

_LOG = logging.getLogger(__name__)

WAITING_FOR_PAYMENT = "waiting_for_payment"
INMEM_PAYMENT_LINK = "inmem-payment-link"


@dataclass
class PaymentOrder:
    """An order as seen by the payment service."""

    id: str
    customer_id: str
    status: str
    payment_link: str = ""
    items: list[Item] = field(default_factory=list)


class Processor(Protocol):
    """Creates payment links."""

    def create_payment_link(self, order: PaymentOrder) -> str: ...


class OrderService(Protocol):
    """Updates orders held by the order service."""

    def update_order(self, order: PaymentOrder) -> None: ...


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any: ...


class InmemProcessor:
    """A processor that hands out the same fixed link for every order."""

    def create_payment_link(self, order: PaymentOrder) -> str:
        _LOG.debug("inmem payment link for order %s", order.id)
        return INMEM_PAYMENT_LINK


@dataclass
class CreatePayment:
    """Create a payment link for an order."""

    order: PaymentOrder


class CreatePaymentHandler:
    """Obtains a payment link and marks the order as waiting for payment."""

    def __init__(self, processor: Processor, order_service: OrderService) -> None:
        self.processor = processor
        self.order_service = order_service

    def handle(self, cmd: CreatePayment) -> str:
        link = self.processor.create_payment_link(cmd.order)
        _LOG.info("create payment link for order: %s success, payment link: %s", cmd.order.id, link)
        self.order_service.update_order(
            PaymentOrder(
                id=cmd.order.id,
                customer_id=cmd.order.customer_id,
                status=WAITING_FOR_PAYMENT,
                payment_link=link,
                items=cmd.order.items,
            )
        )
        return link


@dataclass
class Application:
    """The payment service's use cases."""

    create_payment: _Handler