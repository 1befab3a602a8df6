"""Service-registry helpers: instance ids, address parsing and selection."""

from __future__ import annotations

import logging
import random
import re
from collections.abc import Sequence

_LOG = logging.getLogger(__name__)

_INT = re.compile(r"[+-]?\d+")


def generate_instance_id(service_name: str) -> str:
    """Return a random instance id of the form ``<service>-<number>``."""
    return f"{service_name}-{random.randrange(2**63)}"


def parse_host_port(host_port: str) -> tuple[str, int]:
    """Split ``host:port``; an unparsable port becomes 0."""
    parts = host_port.split(":")
    if len(parts) != 2:
        raise ValueError("invalid host:port format")
    host, port_text = parts
    port = int(port_text) if _INT.fullmatch(port_text) else 0
    return host, port


def pick_address(
    addrs: Sequence[str], service_name: str, rng: random.Random | None = None
) -> str:
    """Pick one discovered address at random."""
    if not addrs:
        raise LookupError(f"got empty {service_name} addrs from consul")
    chooser = rng if rng is not None else random
    _LOG.info("Discovered %d instance of %s, addrs=%s", len(addrs), service_name, list(addrs))
    return chooser.choice(list(addrs))