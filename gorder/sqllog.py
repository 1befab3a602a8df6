"""Helpers for logging database calls with formatted arguments and timing."""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from collections.abc import Callable, Iterable
from typing import Any, Protocol, runtime_checkable

_LOG = logging.getLogger(__name__)

METHOD = "method"
ARGS = "args"
COST = "cost_ms"
RESPONSE = "response"
ERROR = "err"

_UNSUPPORTED = "unsupported type in formatMySQLArg||err="


@runtime_checkable
class ArgFormatter(Protocol):
    """An object that knows how to render itself for the database log."""

    def format_arg(self) -> str: ...


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"json: unsupported type: {type(value).__name__}")


def marshal_string(value: Any) -> str:
    """Serialise a value as compact JSON."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_encode)


def format_arg(arg: Any) -> str:
    """Render one argument, falling back to an explanatory string on failure."""
    try:
        if isinstance(arg, ArgFormatter):
            return arg.format_arg()
        return marshal_string(arg)
    except Exception as exc:
        return _UNSUPPORTED + str(exc)


def format_args(args: Iterable[Any]) -> str:
    """Render all arguments joined by ``||``."""
    return "||".join(format_arg(arg) for arg in args)


def when_mysql(method: str, *args: Any) -> tuple[dict[str, Any], Callable[..., None]]:
    """Start timing a database call.

    Returns the log fields and a function ``finish(resp, err=None)`` that
    records the cost and outcome and writes the log entry.
    """
    fields: dict[str, Any] = {METHOD: method, ARGS: format_args(args)}
    start = time.monotonic()

    def finish(resp: Any, err: BaseException | None = None) -> None:
        fields[COST] = int((time.monotonic() - start) * 1000)
        fields[RESPONSE] = resp
        if err is not None:
            fields[ERROR] = str(err)
            _LOG.error("mysql_error", extra={"fields": dict(fields)})
        else:
            _LOG.info("mysql_success", extra={"fields": dict(fields)})

    return fields, finish