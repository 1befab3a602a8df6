"""Stock rows kept in an SQL table, with logged reads and writes."""

from __future__ import annotations

import re
import sqlite3
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from gorder.sqllog import when_mysql
from gorder.stock.builder import StockQuery

TABLE = "o_stock"

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
_COLUMNS = ("id", "product_id", "quantity", "version", "created_at", "updated_at")
_WRITABLE = frozenset(_COLUMNS[1:])
_ORDER = re.compile(
    r"\s*[A-Za-z_]\w*(\s+(ASC|DESC))?\s*(,\s*[A-Za-z_]\w*(\s+(ASC|DESC))?\s*)*",
    re.IGNORECASE,
)


@dataclass
class StockModel:
    """One row of the stock table."""

    id: int = 0
    product_id: str = ""
    quantity: int = 0
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Expr:
    """A raw SQL expression used as the new value of a column."""

    sql: str
    params: tuple[Any, ...] = ()


def _format_time(value: datetime | None) -> str | None:
    return value.strftime(_TIME_FORMAT) if value is not None else None


def _parse_time(text: str | None) -> datetime | None:
    return datetime.strptime(text, _TIME_FORMAT) if text else None


def _to_sql(value: Any) -> Any:
    return _format_time(value) if isinstance(value, datetime) else value


def _row_to_model(row: sqlite3.Row) -> StockModel:
    return StockModel(
        id=row["id"],
        product_id=row["product_id"],
        quantity=row["quantity"],
        version=row["version"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
    )


def _order_clause(order_by: str) -> str:
    if not order_by:
        return ""
    if not _ORDER.fullmatch(order_by):
        raise ValueError(f"unsupported order expression: {order_by!r}")
    return order_by.strip()


class StockStore:
    """Reads and writes the stock table of an SQLite database.

    All statements are serialised through one lock; a transaction holds it
    from start to end, which is what makes row locking "for update" hold.
    """

    def __init__(self, path: str = ":memory:") -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()

    def __enter__(self) -> StockStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        with self._lock:
            self._conn.close()

    def create_schema(self) -> None:
        """Create the stock table if it does not exist yet."""
        with self._lock:
            self._conn.execute(
                f"CREATE TABLE IF NOT EXISTS {TABLE} ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, "
                "product_id TEXT NOT NULL DEFAULT '', "
                "quantity INTEGER NOT NULL DEFAULT 0, "
                "version INTEGER NOT NULL DEFAULT 0, "
                "created_at TEXT, "
                "updated_at TEXT)"
            )

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the block in one transaction; roll back if it raises."""
        with self._lock:
            self._conn.execute("BEGIN IMMEDIATE")
            try:
                yield self._conn
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")

    def _select(self, query: StockQuery, first: bool) -> tuple[str, list[Any]]:
        where, params = query.where()
        sql = f"SELECT {', '.join(_COLUMNS)} FROM {TABLE}"
        if where:
            sql += f" WHERE {where}"
        order = _order_clause(query.order_by)
        if first:
            sql += f" ORDER BY {order + ', ' if order else ''}id LIMIT 1"
        elif order:
            sql += f" ORDER BY {order}"
        return sql, params

    def get_stock_by_id(self, query: StockQuery) -> StockModel:
        """Return the first row matching ``query``; raise ``LookupError`` if none."""
        _, finish = when_mysql("GetStockByID", query)
        try:
            sql, params = self._select(query, first=True)
            with self._lock:
                row = self._conn.execute(sql, params).fetchone()
            if row is None:
                raise LookupError("record not found")
        except Exception as exc:
            finish(None, exc)
            raise
        result = _row_to_model(row)
        finish(result)
        return result

    def batch_get_stock_by_id(self, query: StockQuery) -> list[StockModel]:
        """Return every row matching ``query``."""
        _, finish = when_mysql("BatchGetStockByID", query)
        try:
            sql, params = self._select(query, first=False)
            with self._lock:
                rows = self._conn.execute(sql, params).fetchall()
        except Exception as exc:
            finish(None, exc)
            raise
        result = [_row_to_model(row) for row in rows]
        finish(result)
        return result

    def create(self, model: StockModel, tx: sqlite3.Connection | None = None) -> StockModel:
        """Insert a row; its id and timestamps are filled in on ``model``."""
        _, finish = when_mysql("Create", model)
        now = datetime.now().replace(microsecond=0)
        conn = tx if tx is not None else self._conn
        try:
            with self._lock:
                cursor = conn.execute(
                    f"INSERT INTO {TABLE} (product_id, quantity, version, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (model.product_id, model.quantity, model.version, _format_time(now), _format_time(now)),
                )
        except Exception as exc:
            finish(None, exc)
            raise
        model.id = cursor.lastrowid or 0
        model.created_at = now
        model.updated_at = now
        finish(model)
        return model

    def update(
        self,
        query: StockQuery,
        changes: Mapping[str, Any],
        tx: sqlite3.Connection | None = None,
    ) -> int:
        """Apply ``changes`` to the rows matching ``query``; return how many changed."""
        _, finish = when_mysql("Update", query, dict(changes))
        conn = tx if tx is not None else self._conn
        try:
            if not changes:
                raise ValueError("no columns to update")
            sets: list[str] = []
            params: list[Any] = []
            for column, value in changes.items():
                if column not in _WRITABLE:
                    raise ValueError(f"unknown column: {column!r}")
                if isinstance(value, Expr):
                    sets.append(f"{column} = {value.sql}")
                    params.extend(value.params)
                else:
                    sets.append(f"{column} = ?")
                    params.append(_to_sql(value))
            where, where_params = query.where()
            if not where:
                raise ValueError("WHERE conditions required")
            sql = f"UPDATE {TABLE} SET {', '.join(sets)} WHERE {where}"
            with self._lock:
                cursor = conn.execute(sql, params + where_params)
        except Exception as exc:
            finish(None, exc)
            raise
        finish(cursor.rowcount)
        return cursor.rowcount