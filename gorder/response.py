"""The JSON envelope returned by the HTTP API."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import Any

from gorder.errors import output


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


@dataclass(frozen=True)
class Response:
    """A response body: error number, message, payload and trace id."""

    errno: int
    message: str
    data: Any
    trace_id: str

    def to_json(self) -> str:
        """Serialise compactly with the wire field names."""
        return json.dumps(
            {
                "errno": self.errno,
                "message": self.message,
                "data": self.data,
                "trace_id": self.trace_id,
            },
            separators=(",", ":"),
            ensure_ascii=False,
            default=_encode,
        )


def build_response(err: BaseException | None, data: Any, trace_id: str) -> Response:
    """Build the envelope; on error the payload is dropped."""
    code, message = output(err)
    if err is not None:
        return Response(errno=code, message=message, data=None, trace_id=trace_id)
    return Response(errno=code, message=message, data=data, trace_id=trace_id)