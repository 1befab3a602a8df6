"""Order application commands and queries."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, Union

from gorder.broker import EVENT_ORDER_CREATED, Publishing
from gorder.decorator import (
    MetricsClient,
    TodoMetrics,
    apply_command_decorators,
    apply_query_decorators,
)
from gorder.order.convertor import order_to_wire
from gorder.order.domain import Item, ItemWithQuantity, Order, Repository, UpdateFn

_LOG = logging.getLogger(__name__)


class StockService(Protocol):
    """Remote stock checks used while creating orders."""

    def check_if_items_in_stock(self, items: list[ItemWithQuantity]) -> list[Item]: ...

    def get_items(self, item_ids: list[str]) -> list[Item]: ...


class _Publisher(Protocol):
    def publish(self, publishing: Publishing) -> None: ...


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any: ...


@dataclass
class CreateOrder:
    """Place an order for a customer."""

    customer_id: str
    items: list[ItemWithQuantity] = field(default_factory=list)


@dataclass(frozen=True)
class CreateOrderResult:
    """The id of the order that was created."""

    order_id: str


def pack_items(items: Iterable[ItemWithQuantity]) -> list[ItemWithQuantity]:
    """Merge entries for the same product, summing their quantities."""
    merged: dict[str, int] = {}
    for item in items:
        merged[item.id] = merged.get(item.id, 0) + item.quantity
    return [ItemWithQuantity(id=item_id, quantity=qty) for item_id, qty in merged.items()]


def _require(value: Any, name: str) -> Any:
    if value is None:
        raise ValueError(f"{name} is nil")
    return value


class CreateOrderHandler:
    """Checks stock, stores a pending order and publishes the created event."""

    def __init__(self, order_repo: Repository, stock_service: StockService, publisher: _Publisher) -> None:
        self.order_repo = _require(order_repo, "orderRepo")
        self.stock_service = _require(stock_service, "stockGRPC")
        self.publisher = _require(publisher, "channel")

    def handle(self, cmd: CreateOrder) -> CreateOrderResult:
        valid_items = self._validate(cmd.items)
        created = self.order_repo.create(Order.pending(cmd.customer_id, valid_items))
        body = json.dumps(order_to_wire(created), separators=(",", ":")).encode()
        try:
            self.publisher.publish(
                Publishing(exchange="", routing_key=EVENT_ORDER_CREATED, body=body)
            )
        except Exception as exc:
            raise RuntimeError(f"publish event error q.Name={EVENT_ORDER_CREATED}: {exc}") from exc
        return CreateOrderResult(order_id=created.id)

    def _validate(self, items: list[ItemWithQuantity] | None) -> list[Item]:
        if not items:
            raise ValueError("must have at least one item")
        return list(self.stock_service.check_if_items_in_stock(pack_items(items)))


@dataclass
class UpdateOrder:
    """Apply ``update_fn`` to a stored order; no function keeps it as given."""

    order: Order
    update_fn: UpdateFn | None = None


class UpdateOrderHandler:
    """Updates a stored order through the repository."""

    def __init__(self, order_repo: Repository) -> None:
        self.order_repo = _require(order_repo, "orderRepo")

    def handle(self, cmd: UpdateOrder) -> None:
        update_fn = cmd.update_fn
        if update_fn is None:
            _LOG.warning("UpdateFn is nil, order=%s, using default update function", cmd.order)
            update_fn = lambda order: order  # noqa: E731
        self.order_repo.update(cmd.order, update_fn)
        return None


@dataclass
class GetCustomerOrder:
    """Look up one order of one customer."""

    customer_id: str
    order_id: str


class GetCustomerOrderHandler:
    """Reads a customer's order from the repository."""

    def __init__(self, order_repo: Repository) -> None:
        self.order_repo = _require(order_repo, "orderRepo")

    def handle(self, query: GetCustomerOrder) -> Order:
        return self.order_repo.get(query.order_id, query.customer_id)


@dataclass
class Application:
    """The order service's use cases."""

    create_order: _Handler
    update_order: _Handler
    get_customer_order: _Handler


_Logger = Union[logging.Logger, logging.LoggerAdapter]


def build_application(
    order_repo: Repository,
    stock_service: StockService,
    publisher: _Publisher,
    logger: _Logger | None = None,
    metrics_client: MetricsClient | None = None,
) -> Application:
    """Wire the handlers together, each wrapped with logging and metrics."""
    metrics = metrics_client if metrics_client is not None else TodoMetrics()
    return Application(
        create_order=apply_command_decorators(
            CreateOrderHandler(order_repo, stock_service, publisher), logger, metrics
        ),
        update_order=apply_command_decorators(UpdateOrderHandler(order_repo), logger, metrics),
        get_customer_order=apply_query_decorators(
            GetCustomerOrderHandler(order_repo), logger, metrics
        ),
    )