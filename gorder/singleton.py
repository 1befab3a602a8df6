"""A thread-safe, lazily filled cache of one value per key."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any


class Singleton:
    """Creates each key's value once with ``supplier`` and reuses it afterwards."""

    def __init__(self, supplier: Callable[[str], Any]) -> None:
        self._supplier = supplier
        self._cache: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any:
        """Return the value for ``key``, creating it on first use."""
        try:
            return self._cache[key]
        except KeyError:
            pass
        with self._lock:
            if key not in self._cache:
                self._cache[key] = self._supplier(key)
            return self._cache[key]