"""An in-memory order repository."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from gorder.order.domain import Order, OrderNotFoundError, UpdateFn

_LOG = logging.getLogger(__name__)


class MemoryOrderRepository:
    """Keeps orders in a list, seeded with one placeholder order."""

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock if clock is not None else time.time
        self._lock = threading.Lock()
        self._store: list[Order] = [
            Order(
                id="fake-ID",
                customer_id="fake-customer-ID",
                status="fake-status",
                payment_link="fake-payment-link",
                items=None,
            )
        ]

    def create(self, order: Order) -> Order:
        """Store a copy of ``order`` under an id taken from the current second."""
        with self._lock:
            new_order = Order(
                id=str(int(self._clock())),
                customer_id=order.customer_id,
                status=order.status,
                payment_link=order.payment_link,
                items=order.items,
            )
            self._store.append(new_order)
            _LOG.info("memory_order_repo_create input=%s stored=%d", order, len(self._store))
            return new_order

    def get(self, order_id: str, customer_id: str) -> Order:
        """Return the order with this id for this customer."""
        with self._lock:
            for stored in self._store:
                if stored.id == order_id and stored.customer_id == customer_id:
                    _LOG.debug("memory_order_repo_get||found||id=%s||customerID=%s", order_id, customer_id)
                    return stored
        raise OrderNotFoundError(order_id)

    def update(self, order: Order, update_fn: UpdateFn) -> None:
        """Replace every stored match of ``order`` with ``update_fn(order)``."""
        with self._lock:
            found = False
            for index, stored in enumerate(self._store):
                if stored.id == order.id and stored.customer_id == order.customer_id:
                    found = True
                    self._store[index] = update_fn(order)
            if not found:
                raise OrderNotFoundError(order.id)