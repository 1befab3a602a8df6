"""An in-memory stock repository seeded with stub products."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping

from gorder.stock.domain import Item, StockNotFoundError


def _stub() -> dict[str, Item]:
    return {
        "item_id": Item(id="foo_item", name="stub item", quantity=10000, price_id="stub_item_price_id"),
        "item1": Item(id="item1", name="stub item 1", quantity=10000, price_id="stub_item1_price_id"),
        "item2": Item(id="item2", name="stub item 2", quantity=10000, price_id="stub_item2_price_id"),
        "item3": Item(id="item3", name="stub item 3", quantity=10000, price_id="stub_item3_price_id"),
    }


class MemoryStockRepository:
    """Looks products up in a dictionary keyed by product id."""

    def __init__(self, store: Mapping[str, Item] | None = None) -> None:
        self._lock = threading.Lock()
        self._store: dict[str, Item] = dict(store) if store is not None else _stub()

    def get_items(self, ids: Iterable[str]) -> list[Item]:
        """Return the items for ``ids`` in order; raise if any is unknown."""
        found: list[Item] = []
        missing: list[str] = []
        with self._lock:
            for item_id in ids:
                item = self._store.get(item_id)
                if item is None:
                    missing.append(item_id)
                else:
                    found.append(item)
        if missing:
            raise StockNotFoundError(missing)
        return found