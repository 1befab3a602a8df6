# gorder

This package holds the building blocks of a small ordering system. A customer places an order. The stock service checks the items, prices them and takes them out of stock. The payment service creates a payment link. The kitchen cooks the order once it is paid.

The services pass order events to each other as JSON messages. Every messaging, pricing and locking dependency is a small protocol (an object with `publish`, `update_order`, `get_price_by_product_id` and so on). You can plug in your own implementation or a test double.

The package uses only the standard library.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install ".[test]"
```

## Modules

### Common

- `gorder.errors`: numbered application errors.
  - `CodedError`, with the constructors `new`, `new_with_error` and `new_with_msgf`.
  - `errno` and `output` map an error, or `None`, to the `(errno, message)` pair sent to clients.
- `gorder.response`: the JSON envelope `Response`, with the fields `errno`, `message`, `data` and `trace_id`.
  - `build_response` creates an envelope.
  - `Response.to_json` serialises it.
- `gorder.decorator`: wrappers for command and query handlers.
  - `LoggingDecorator` and `MetricsDecorator` are the wrappers.
  - `apply_command_decorators` and `apply_query_decorators` apply both of them to a handler.
  - `TodoMetrics` is a metrics client that only writes debug log lines.
- `gorder.singleton`: `Singleton`, a thread-safe lazy cache that holds one value per key.
- `gorder.sqllog`: helpers for logging storage calls.
  - `marshal_string` and `format_args` render the call arguments.
  - `when_mysql` returns log fields and a `finish(resp, err=None)` callback that records the cost in milliseconds and the outcome.
- `gorder.broker`: event names (`EVENT_ORDER_CREATED`, `EVENT_ORDER_PAID`) and the message types `Publishing` and `Delivery`.
  - `Delivery.ack` and `Delivery.nack` settle a delivery. Settling it twice raises an error.
  - `HeaderCarrier` is a text-map view of message headers.
  - `handle_retry` increments the `x-retry-count` header. Below `max_retry` it waits `count` seconds and republishes the message to its exchange. Once the count reaches `max_retry` it publishes the message to the `dlq` queue.
- `gorder.discovery`: service instance helpers.
  - `generate_instance_id` makes an instance id.
  - `parse_host_port` splits `host:port`. A port it cannot parse becomes 0.
  - `pick_address` chooses one of several addresses at random. It raises `LookupError` if the list is empty.

### Order service: `gorder.order`

- `domain`: the `Order` aggregate, with `Order.validated`, `Order.pending` and `Order.ensure_paid`.
  - It also holds `Item`, `ItemWithQuantity`, `OrderNotFoundError` and the `Repository` protocol.
- `memory_repository`: `MemoryOrderRepository`.
  - It starts with a single placeholder order, `fake-ID` for `fake-customer-ID`.
  - New orders get their id from the current second of the clock.
- `convertor`: encodes orders and items to and from the wire form, for example `order_to_wire` and `order_from_wire`.
- `commands`: the handlers `CreateOrderHandler`, `UpdateOrderHandler` and `GetCustomerOrderHandler`, the helper `pack_items`, and `build_application`.
  - `build_application` wraps each handler with logging and metrics.
  - Creating an order checks stock, stores a pending order and publishes it to the `order.created` queue.
- `http`: `OrderHTTPHandlers` turns request bodies into application calls and returns `Response` envelopes.
  - `post_customer_orders` creates an order.
  - `get_customer_order` returns an order.
  - A body that cannot be parsed gives errno 1000. An item quantity that is not positive gives errno 1001.
- `consumer`: `OrderPaidConsumer` handles order-paid deliveries.
  - It updates the stored order and requires its status to be `paid`.
  - When the update fails, it hands the delivery to `handle_retry`.

### Stock service: `gorder.stock`

- `domain`: the entities, plus `StockNotFoundError`, `ExceedStockError` (made of `StockShortage` entries) and the `Repository` protocol.
- `memory_repository`: `MemoryStockRepository`, an item lookup preloaded with stub items.
- `builder`: `StockQuery`, a chainable set of filters (`product_ids`, `versions`, `quantity_gt`, `order`, `for_update`).
  - `where()` renders the filters as SQL conditions.
  - `format_arg()` renders them as JSON.
- `sql_store`: `StockStore`, the `o_stock` table in SQLite (`":memory:"` by default).
  - Methods: `create_schema`, `transaction`, `get_stock_by_id`, `batch_get_stock_by_id`, `create` and `update`.
  - `update` accepts an `Expr` as a column value.
- `sql_repository`: `SQLStockRepository`.
  - `get_stock` returns stock levels.
  - `update_stock` decrements the requested quantities inside one transaction. A row changes only while its quantity is at least the amount requested.
- `queries`: `CheckIfItemsInStockHandler` and `GetItemsHandler`, plus `lock_key`.
  - `CheckIfItemsInStockHandler` prices each item through a `PriceLookup`, checks stock and takes it out of stock. Its `Locker` defaults to no locking.

### Payment service: `gorder.payment`

- `commands`: `CreatePaymentHandler` gets a link from a `Processor` and reports the order as `waiting_for_payment`.
  - `InmemProcessor` always returns `inmem-payment-link`.
- `consumer`: `OrderCreatedConsumer` creates a payment for each order-created delivery.

### Kitchen: `gorder.kitchen`

- `consumer`: `KitchenConsumer` handles paid orders.
  - It rejects orders whose status is not `paid`.
  - It calls the `cook` function, which by default sleeps five seconds.
  - It then reports the order as `ready` through the order service.

## Example

```python
from gorder.order.commands import build_application
from gorder.order.domain import Item
from gorder.order.http import OrderHTTPHandlers
from gorder.order.memory_repository import MemoryOrderRepository


class Stock:
    def check_if_items_in_stock(self, items):
        return [Item(id=i.id, quantity=i.quantity, price_id="price-" + i.id) for i in items]

    def get_items(self, item_ids):
        return []


class Outbox:
    def __init__(self):
        self.sent = []

    def publish(self, publishing):
        self.sent.append(publishing)


app = build_application(MemoryOrderRepository(clock=lambda: 1700000000), Stock(), Outbox())
handlers = OrderHTTPHandlers(app)

resp = handlers.post_customer_orders(
    "c1", '{"customer_id": "c1", "items": [{"id": "p1", "quantity": 2}]}'
)
print(resp.errno, resp.data.order_id)   # 0 1700000000

bad = handlers.post_customer_orders(
    "c1", '{"customer_id": "c1", "items": [{"id": "p1", "quantity": 0}]}'
)
print(bad.errno, bad.message)
# 1001 request validate error -> quantity must be positive, got 0 from p1
```

## What the package does not do

- It has no command-line programs.
- It does not run an HTTP or RPC server. `OrderHTTPHandlers` gives the endpoint logic, and you have to mount it in a web framework yourself.
- It does not connect to a message broker. Consumers receive `Delivery` objects from you and publish through any object with a `publish(publishing)` method.
- It contains no client for a service registry, a payment provider, a distributed lock or a remote stock service. You supply those as objects that follow the protocols described above.
- It keeps stock only in SQLite through `StockStore`, and orders only in memory.

## Tests

```
pytest
```