"""A stock repository backed by the SQL stock table."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable

from gorder.stock.builder import StockQuery
from gorder.stock.domain import ItemWithQuantity, UpdateStockFn
from gorder.stock.sql_store import Expr, StockModel, StockStore

_LOG = logging.getLogger(__name__)


def _to_entities(rows: Iterable[StockModel]) -> list[ItemWithQuantity]:
    return [ItemWithQuantity(id=row.product_id, quantity=row.quantity) for row in rows]


class SQLStockRepository:
    """Reads stock levels and takes stock out under a pessimistic lock."""

    def __init__(self, store: StockStore) -> None:
        self.store = store

    def get_stock(self, ids: Iterable[str]) -> list[ItemWithQuantity]:
        """Return the stock level of each product in ``ids`` that exists."""
        try:
            rows = self.store.batch_get_stock_by_id(StockQuery().product_ids(*ids))
        except Exception as exc:
            raise RuntimeError(f"BatchGetStockByID error: {exc}") from exc
        return _to_entities(rows)

    def update_stock(self, data: Iterable[ItemWithQuantity], update_fn: UpdateStockFn) -> None:
        """Take the requested quantities out of stock in one transaction.

        ``update_fn(existing, data)`` names the products to change; each is
        decremented by its requested quantity only while enough is left.
        """
        requested = list(data)
        try:
            with self.store.transaction() as tx:
                self._update_pessimistic(tx, requested, update_fn)
        except Exception as exc:
            _LOG.warning("update stock transaction err=%s", exc)
            raise

    def _update_pessimistic(
        self,
        tx: sqlite3.Connection,
        data: list[ItemWithQuantity],
        update_fn: UpdateStockFn,
    ) -> None:
        query = StockQuery().product_ids(*(item.id for item in data)).for_update()
        try:
            rows = self.store.batch_get_stock_by_id(query)
        except Exception as exc:
            raise RuntimeError(f"failed to find data: {exc}") from exc

        updated = update_fn(_to_entities(rows), data)
        wanted = {item.id: item.quantity for item in data}
        for upd in updated:
            if upd.id not in wanted:
                raise LookupError(f"item {upd.id} not found in query data")
            quantity = wanted[upd.id]
            try:
                self.store.update(
                    StockQuery().product_ids(upd.id).quantity_gt(quantity),
                    {"quantity": Expr("quantity - ?", (quantity,))},
                    tx,
                )
            except Exception as exc:
                raise RuntimeError(f"unable to update {upd.id}: {exc}") from exc