"""Stock application queries: stock checks and item lookups."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from gorder.stock.domain import (
    ExceedStockError,
    Item,
    ItemWithQuantity,
    Repository,
    StockShortage,
)

_LOG = logging.getLogger(__name__)

LOCK_PREFIX = "check_stock_"


class PriceLookup(Protocol):
    """Finds the default price of a product."""

    def get_price_by_product_id(self, product_id: str) -> str: ...


class Locker(Protocol):
    """A distributed lock keyed by string."""

    def lock(self, key: str) -> None: ...

    def unlock(self, key: str) -> None: ...


class _NoLock:
    def lock(self, key: str) -> None:
        return None

    def unlock(self, key: str) -> None:
        return None


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any: ...


@dataclass
class CheckIfItemsInStock:
    """Check, price and reserve the requested products."""

    items: list[ItemWithQuantity] = field(default_factory=list)


def lock_key(query: CheckIfItemsInStock) -> str:
    """The lock key for a stock check: the prefix plus the product ids."""
    return LOCK_PREFIX + "_".join(item.id for item in query.items)


def _subtract(
    existing: list[ItemWithQuantity], query: list[ItemWithQuantity]
) -> list[ItemWithQuantity]:
    return [
        ItemWithQuantity(id=e.id, quantity=e.quantity - q.quantity)
        for e in existing
        for q in query
        if e.id == q.id
    ]


class CheckIfItemsInStockHandler:
    """Prices each requested product and takes it out of stock if enough is left."""

    def __init__(
        self, stock_repo: Repository, price_lookup: PriceLookup, locker: Locker | None = None
    ) -> None:
        if stock_repo is None:
            raise ValueError("nil stockRepo")
        if price_lookup is None:
            raise ValueError("nil stripeAPI")
        self.stock_repo = stock_repo
        self.price_lookup = price_lookup
        self.locker = locker if locker is not None else _NoLock()

    def handle(self, query: CheckIfItemsInStock) -> list[Item]:
        key = lock_key(query)
        try:
            self.locker.lock(key)
        except Exception as exc:
            raise RuntimeError(f"redis lock error: key={key}: {exc}") from exc
        try:
            return self._check(query)
        finally:
            try:
                self.locker.unlock(key)
            except Exception as exc:
                _LOG.warning("redis unlock fail, err=%s", exc)

    def _check(self, query: CheckIfItemsInStock) -> list[Item]:
        result: list[Item] = []
        for item in query.items:
            price_id = self.price_lookup.get_price_by_product_id(item.id)
            if not price_id:
                return []
            result.append(Item(id=item.id, quantity=item.quantity, price_id=price_id))
        self._check_stock(query.items)
        return result

    def _check_stock(self, items: list[ItemWithQuantity]) -> None:
        records = self.stock_repo.get_stock([item.id for item in items])
        have: dict[str, int] = {}
        for record in records:
            have[record.id] = have.get(record.id, 0) + record.quantity
        failed = [
            StockShortage(id=item.id, want=item.quantity, have=have.get(item.id, 0))
            for item in items
            if item.quantity > have.get(item.id, 0)
        ]
        if failed:
            raise ExceedStockError(failed)
        self.stock_repo.update_stock(items, _subtract)


@dataclass
class GetItems:
    """Look up products by id."""

    item_ids: list[str] = field(default_factory=list)


class GetItemsHandler:
    """Reads products from the stock repository."""

    def __init__(self, stock_repo: Repository) -> None:
        if stock_repo is None:
            raise ValueError("nil stockRepo")
        self.stock_repo = stock_repo

    def handle(self, query: GetItems) -> list[Item]:
        return self.stock_repo.get_items(list(query.item_ids))


@dataclass
class Application:
    """The stock service's use cases."""

    check_if_items_in_stock: _Handler
    get_items: _Handler


def _ids(items: Iterable[ItemWithQuantity]) -> list[str]:
    return [item.id for item in items]