"""Stock entities, stock errors and the stock repository contract."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class Item:
    """A product known to the stock service."""

    id: str
    name: str = ""
    quantity: int = 0
    price_id: str = ""


@dataclass
class ItemWithQuantity:
    """A product id with a quantity."""

    id: str
    quantity: int = 0


@dataclass
class Order:
    """An order as seen by the stock service."""

    id: str
    customer_id: str
    status: str
    payment_link: str = ""
    items: list[Item] = field(default_factory=list)


@dataclass(frozen=True)
class StockShortage:
    """One product for which more was wanted than is available."""

    id: str
    want: int
    have: int


class StockNotFoundError(LookupError):
    """Some requested products do not exist in stock."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(self.missing)

    def __str__(self) -> str:
        return f"not found in stock: {','.join(self.missing)}"


class ExceedStockError(Exception):
    """Some requested quantities exceed what is in stock."""

    def __init__(self, failed_on: Iterable[StockShortage]) -> None:
        self.failed_on = list(failed_on)
        super().__init__(self.failed_on)

    def __str__(self) -> str:
        info = ",".join(
            f"product_id={s.id}, want {s.want}, have {s.have}" for s in self.failed_on
        )
        return f"not enough stock for [{info}]"


UpdateStockFn = Callable[
    [list[ItemWithQuantity], list[ItemWithQuantity]], list[ItemWithQuantity]
]


class Repository(Protocol):
    """Storage for products and their stock levels."""

    def get_items(self, ids: list[str]) -> list[Item]: ...

    def get_stock(self, ids: list[str]) -> list[ItemWithQuantity]: ...

    def update_stock(self, data: list[ItemWithQuantity], update_fn: UpdateStockFn) -> None: ...