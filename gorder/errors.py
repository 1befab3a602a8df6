"""Coded application errors and their mapping to (errno, message) pairs."""

from __future__ import annotations

from collections.abc import Iterator

ERRNO_SUCCESS = 0
ERRNO_UNKNOWN = 1

# Request parameter errors: 1xxx
ERROR_BIND_REQUEST_ERROR = 1000
ERROR_REQUEST_VALIDATE_ERROR = 1001

ERR_MSG: dict[int, str] = {
    ERRNO_SUCCESS: "success",
    ERRNO_UNKNOWN: "unknown error",
    ERROR_BIND_REQUEST_ERROR: "bind request error",
    ERROR_REQUEST_VALIDATE_ERROR: "request validate error",
}


class CodedError(Exception):
    """An error carrying an application error code and an optional cause."""

    def __init__(self, code: int, cause: BaseException | None = None, msg: str = "") -> None:
        super().__init__(code)
        self.code = code
        self.cause = cause
        self.msg = msg
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        text = ERR_MSG.get(self.code, "")
        if self.cause is not None:
            return f"{text} -> {self.cause}"
        if self.msg:
            return f"{text} -> {self.msg}"
        return text


def new(code: int) -> CodedError:
    """Create an error with only a code."""
    return CodedError(code)


def new_with_error(code: int, err: BaseException | None) -> CodedError:
    """Create an error with a code wrapping ``err``; without ``err`` it is ``new(code)``."""
    if err is None:
        return new(code)
    return CodedError(code, cause=err)


def new_with_msgf(code: int, fmt: str, *args: object) -> CodedError:
    """Create an error with a code and a printf-style formatted message."""
    return CodedError(code, msg=fmt % args if args else fmt)


def _chain(err: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def errno(err: BaseException | None) -> int:
    """Return the code of the first coded error in the chain, 0 for none, -1 if uncoded."""
    if err is None:
        return ERRNO_SUCCESS
    for link in _chain(err):
        if isinstance(link, CodedError):
            return link.code
    return -1


def output(err: BaseException | None) -> tuple[int, str]:
    """Map an error (or its absence) to the errno and message sent to clients."""
    if err is None:
        return ERRNO_SUCCESS, ERR_MSG[ERRNO_SUCCESS]
    code = errno(err)
    if code == -1:
        return ERRNO_UNKNOWN, str(err)
    return code, str(err)