"""Logging and metrics wrappers around command and query handlers."""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from typing import Any, Protocol, Union

_LOG = logging.getLogger(__name__)

_Logger = Union[logging.Logger, logging.LoggerAdapter]

_MESSAGES = {
    "command": ("Executing command", "Command execute successfully", "Failed to execute command"),
    "query": ("Executing query", "Query executed successfully", "Failed to execute query"),
}


class MetricsClient(Protocol):
    """Anything that can count a named metric."""

    def inc(self, key: str, value: int) -> None: ...


class _Handler(Protocol):
    def handle(self, cmd: Any) -> Any: ...


class TodoMetrics:
    """A metrics client that only traces what it is given at debug level."""

    def inc(self, key: str, value: int) -> None:
        """Record the metric in the debug log and keep nothing."""
        _LOG.debug("metric %s += %d", key, value)


def _check_kind(kind: str) -> str:
    if kind not in _MESSAGES:
        raise ValueError(f"unknown handler kind: {kind!r}")
    return kind


def action_name(cmd: Any) -> str:
    """Return the type name of a command or query."""
    return type(cmd).__name__


def _body(cmd: Any) -> str:
    try:
        if dataclasses.is_dataclass(cmd) and not isinstance(cmd, type):
            return json.dumps(dataclasses.asdict(cmd), default=str)
        return json.dumps(cmd, default=str)
    except (TypeError, ValueError):
        return ""


class LoggingDecorator:
    """Logs the start and outcome of every handled command or query."""

    def __init__(self, kind: str, logger: _Logger | None, base: _Handler) -> None:
        self.kind = _check_kind(kind)
        self.logger = logger if logger is not None else _LOG
        self.base = base

    def handle(self, cmd: Any) -> Any:
        start, done, failed = _MESSAGES[self.kind]
        extra = {self.kind: action_name(cmd), f"{self.kind}_body": _body(cmd)}
        self.logger.debug(start, extra=extra)
        try:
            result = self.base.handle(cmd)
        except Exception as exc:
            self.logger.error("%s: %s", failed, exc, extra=extra)
            raise
        self.logger.info(done, extra=extra)
        return result


class MetricsDecorator:
    """Counts duration, successes and failures of every handled command or query."""

    def __init__(self, kind: str, base: _Handler, client: MetricsClient) -> None:
        self.kind = _check_kind(kind)
        self.base = base
        self.client = client

    def handle(self, cmd: Any) -> Any:
        start = time.monotonic()
        name = action_name(cmd).lower()
        succeeded = False
        try:
            result = self.base.handle(cmd)
            succeeded = True
            return result
        finally:
            elapsed = time.monotonic() - start
            self.client.inc(f"{self.kind}.{name}.duration", int(elapsed))
            outcome = "success" if succeeded else "failure"
            self.client.inc(f"{self.kind}.{name}.{outcome}", 1)


def apply_command_decorators(
    handler: _Handler, logger: _Logger | None, metrics_client: MetricsClient
) -> LoggingDecorator:
    """Wrap a command handler with metrics, then logging."""
    return LoggingDecorator("command", logger, MetricsDecorator("command", handler, metrics_client))


def apply_query_decorators(
    handler: _Handler, logger: _Logger | None, metrics_client: MetricsClient
) -> LoggingDecorator:
    """Wrap a query handler with metrics, then logging."""
    return LoggingDecorator("query", logger, MetricsDecorator("query", handler, metrics_client))