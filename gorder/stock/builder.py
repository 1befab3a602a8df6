"""A chainable description of conditions on the stock table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gorder.sqllog import marshal_string


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


@dataclass
class StockQuery:
    """Filters, ordering and locking for a stock lookup or update."""

    id: list[int] = field(default_factory=list)
    product_id: list[str] = field(default_factory=list)
    quantity: list[int] = field(default_factory=list)
    version: list[int] = field(default_factory=list)
    order_by: str = ""
    for_update_lock: bool = False

    def ids(self, *args: int) -> StockQuery:
        """Match any of these row ids."""
        self.id = list(args)
        return self

    def product_ids(self, *args: str) -> StockQuery:
        """Match any of these product ids."""
        self.product_id = list(args)
        return self

    def order(self, value: str) -> StockQuery:
        """Order the results by this expression."""
        self.order_by = value
        return self

    def versions(self, *args: int) -> StockQuery:
        """Match any of these row versions."""
        self.version = list(args)
        return self

    def quantity_gt(self, *args: int) -> StockQuery:
        """Require the stored quantity to be at least each of these values."""
        self.quantity = list(args)
        return self

    def for_update(self) -> StockQuery:
        """Lock the selected rows for update."""
        self.for_update_lock = True
        return self

    def format_arg(self) -> str:
        """Render the query as compact JSON, leaving out empty fields."""
        data: dict[str, Any] = {}
        if self.id:
            data["id"] = self.id
        if self.product_id:
            data["product_id"] = self.product_id
        if self.quantity:
            data["quantity"] = self.quantity
        if self.version:
            data["version"] = self.version
        if self.order_by:
            data["order_by"] = self.order_by
        if self.for_update_lock:
            data["for_update_lock"] = True
        return marshal_string(data)

    def where(self) -> tuple[str, list[Any]]:
        """Return the WHERE conditions joined by AND, with their parameters."""
        clauses: list[str] = []
        params: list[Any] = []
        for column, values in (("id", self.id), ("product_id", self.product_id), ("version", self.version)):
            if values:
                clauses.append(f"{column} IN ({_placeholders(len(values))})")
                params.extend(values)
        for value in self.quantity:
            clauses.append("quantity >= ?")
            params.append(value)
        return " AND ".join(clauses), params