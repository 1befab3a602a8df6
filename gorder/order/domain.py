"""Order aggregate, its line items and the repository contract."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

PAID_STATUS = "paid"
PENDING_STATUS = "pending"


@dataclass
class Item:
    """A priced line item of an order."""

    id: str
    name: str = ""
    quantity: int = 0
    price_id: str = ""


@dataclass
class ItemWithQuantity:
    """A requested product and how many of it."""

    id: str
    quantity: int = 0


@dataclass
class Order:
    """The order aggregate root."""

    id: str
    customer_id: str
    status: str
    payment_link: str = ""
    items: list[Item] | None = None

    @classmethod
    def validated(
        cls,
        order_id: str,
        customer_id: str,
        status: str,
        payment_link: str,
        items: list[Item] | None,
    ) -> Order:
        """Build an order, rejecting missing id, customer, status or items."""
        if not order_id:
            raise ValueError("empty id")
        if not customer_id:
            raise ValueError("empty customerID")
        if not status:
            raise ValueError("empty status")
        if items is None:
            raise ValueError("empty items")
        return cls(
            id=order_id,
            customer_id=customer_id,
            status=status,
            payment_link=payment_link,
            items=items,
        )

    @classmethod
    def pending(cls, customer_id: str, items: list[Item] | None) -> Order:
        """Build a new, not yet stored order in the pending state."""
        if not customer_id:
            raise ValueError("empty customerID")
        if items is None:
            raise ValueError("empty items")
        return cls(id="", customer_id=customer_id, status=PENDING_STATUS, items=items)

    def ensure_paid(self) -> None:
        """Raise ``ValueError`` unless the order has been paid."""
        if self.status != PAID_STATUS:
            raise ValueError(
                f"order status not paid, order id = {self.id}, status = {self.status}"
            )


class OrderNotFoundError(LookupError):
    """No order exists with the given id for the given customer."""

    def __init__(self, order_id: str) -> None:
        super().__init__(order_id)
        self.order_id = order_id

    def __str__(self) -> str:
        return f"order {self.order_id} not found"


UpdateFn = Callable[[Order], Order]


class Repository(Protocol):
    """Storage for orders."""

    def create(self, order: Order) -> Order: ...

    def get(self, order_id: str, customer_id: str) -> Order: ...

    def update(self, order: Order, update_fn: UpdateFn) -> None: ...