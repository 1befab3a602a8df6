"""Message-broker event names, message envelopes and the retry policy."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Protocol

_LOG = logging.getLogger(__name__)

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_PAID = "order.paid"

DLX = "dlx"
DLQ = "dlq"
RETRY_HEADER_KEY = "x-retry-count"


@dataclass
class Publishing:
    """A message to publish to an exchange with a routing key."""

    exchange: str
    routing_key: str
    body: bytes
    headers: dict[str, Any] = field(default_factory=dict)
    content_type: str = "application/json"
    persistent: bool = True


@dataclass
class Delivery:
    """A received message that must be acknowledged or rejected once."""

    body: bytes
    headers: dict[str, Any] | None = None
    exchange: str = ""
    routing_key: str = ""
    message_id: str = ""
    acked: bool | None = field(default=None, init=False)

    def _settle(self, acked: bool) -> None:
        if self.acked is not None:
            raise RuntimeError(f"delivery {self.message_id!r} already settled")
        self.acked = acked

    def ack(self) -> None:
        """Acknowledge the message."""
        self._settle(True)

    def nack(self) -> None:
        """Reject the message without requeueing it."""
        self._settle(False)


class _Channel(Protocol):
    def publish(self, publishing: Publishing) -> None: ...


class HeaderCarrier:
    """A text-map view of message headers for trace-context propagation."""

    def __init__(self, headers: MutableMapping[str, Any] | None = None) -> None:
        self.headers: MutableMapping[str, Any] = headers if headers is not None else {}

    def get(self, key: str) -> str:
        """Return the header value, or an empty string if it is absent."""
        if key not in self.headers:
            return ""
        value = self.headers[key]
        if not isinstance(value, str):
            raise TypeError(f"header {key!r} is not a string: {value!r}")
        return value

    def set(self, key: str, value: str) -> None:
        """Store a header value."""
        self.headers[key] = value

    def keys(self) -> list[str]:
        """Return all header names."""
        return list(self.headers)


def handle_retry(
    channel: _Channel,
    delivery: Delivery,
    max_retry: int,
    sleep: Callable[[float], None] = time.sleep,
) -> Publishing:
    """Republish a failed delivery, or move it to the dead-letter queue.

    The retry count in the headers is incremented; once it reaches
    ``max_retry`` the message goes to the DLQ, otherwise it is sent back to
    its exchange after a delay of ``count`` seconds. Returns what was published.
    """
    if delivery.headers is None:
        delivery.headers = {}
    current = delivery.headers.get(RETRY_HEADER_KEY)
    count = current if isinstance(current, int) and not isinstance(current, bool) else 0
    count += 1
    delivery.headers[RETRY_HEADER_KEY] = count

    if count >= max_retry:
        _LOG.info("moving message %s to dlq", delivery.message_id)
        publishing = Publishing(
            exchange="", routing_key=DLQ, body=delivery.body, headers=dict(delivery.headers)
        )
    else:
        _LOG.info("retrying message %s, count=%d", delivery.message_id, count)
        sleep(count)
        publishing = Publishing(
            exchange=delivery.exchange,
            routing_key=delivery.routing_key,
            body=delivery.body,
            headers=dict(delivery.headers),
        )
    channel.publish(publishing)
    return publishing