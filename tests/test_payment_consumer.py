import json

import pytest

from gorder.broker import DLQ, EVENT_ORDER_CREATED, Delivery
from gorder.order.domain import Item
from gorder.payment.commands import (
    WAITING_FOR_PAYMENT,
    Application,
    CreatePaymentHandler,
    InmemProcessor,
    PaymentOrder,
)
from gorder.payment.consumer import OrderCreatedConsumer


class FakeChannel:
    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    def publish(self, publishing):
        if self.fail:
            raise ConnectionError("channel closed")
        self.published.append(publishing)


class RecordingOrderService:
    def __init__(self, fail=False):
        self.updated = []
        self.fail = fail

    def update_order(self, order):
        if self.fail:
            raise ConnectionError("order service down")
        self.updated.append(order)


def _consumer(service, channel):
    app = Application(create_payment=CreatePaymentHandler(InmemProcessor(), service))
    return OrderCreatedConsumer(app, channel, max_retry=1)


def _delivery(items=None):
    body = json.dumps(
        {"ID": "o-1", "CustomerID": "c-1", "Status": "pending", "PaymentLink": "", "Items": items}
    ).encode()
    return Delivery(body=body, exchange="", routing_key=EVENT_ORDER_CREATED, message_id="m-1")


def test_creates_payment_and_updates_order():
    service, channel = RecordingOrderService(), FakeChannel()
    delivery = _delivery([{"ID": "p1", "Name": "n", "Quantity": 2, "PriceID": "price-1"}])
    _consumer(service, channel).handle_message(delivery)
    assert delivery.acked is True
    assert service.updated == [
        PaymentOrder(
            id="o-1",
            customer_id="c-1",
            status=WAITING_FOR_PAYMENT,
            payment_link="inmem-payment-link",
            items=[Item(id="p1", name="n", quantity=2, price_id="price-1")],
        )
    ]
    assert channel.published == []


def test_null_items_become_empty_list():
    service = RecordingOrderService()
    _consumer(service, FakeChannel()).handle_message(_delivery(None))
    assert service.updated[0].items == []


def test_failure_is_sent_for_retry():
    channel = FakeChannel()
    delivery = _delivery([])
    _consumer(RecordingOrderService(fail=True), channel).handle_message(delivery)
    assert delivery.acked is True
    assert [p.routing_key for p in channel.published] == [DLQ]
    assert channel.published[0].body == delivery.body


@pytest.mark.parametrize("body", [b"{broken", b'"text"'])
def test_malformed_message_is_rejected(body):
    service, channel = RecordingOrderService(), FakeChannel()
    delivery = Delivery(body=body)
    _consumer(service, channel).handle_message(delivery)
    assert delivery.acked is False
    assert service.updated == []
    assert channel.published == []


def test_failed_retry_rejects_message():
    delivery = _delivery([])
    _consumer(RecordingOrderService(fail=True), FakeChannel(fail=True)).handle_message(delivery)
    assert delivery.acked is False