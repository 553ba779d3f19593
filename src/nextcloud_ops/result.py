"""Uniform result envelope returned by every remote operation."""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import httpx

from nextcloud_ops.exceptions import ParseError

T = TypeVar("T")

AcceptedCodes = Collection[int] | Callable[[int], bool]


class ResultCode(Enum):
    """Classification of an operation outcome."""

    OK = "ok"
    OK_NO_CONTENT = "ok_no_content"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    FILE_NOT_FOUND = "file_not_found"
    CONFLICT = "conflict"
    FOLDER_ALREADY_EXISTS = "folder_already_exists"
    UNHANDLED_HTTP_CODE = "unhandled_http_code"
    TIMEOUT = "timeout"
    WRONG_CONNECTION = "wrong_connection"
    INVALID_RESPONSE = "invalid_response"
    UNKNOWN_ERROR = "unknown_error"


_HTTP_FAILURE_CODES = {
    401: ResultCode.UNAUTHORIZED,
    403: ResultCode.FORBIDDEN,
    404: ResultCode.FILE_NOT_FOUND,
    409: ResultCode.CONFLICT,
}

_EXCEPTION_MESSAGES = {
    ResultCode.TIMEOUT: "Connection timed out",
    ResultCode.WRONG_CONNECTION: "Connection failed",
    ResultCode.INVALID_RESPONSE: "Invalid response from server",
    ResultCode.UNKNOWN_ERROR: "Unexpected exception",
}


def is_2xx(http_code: int) -> bool:
    """Accept any 2xx status code."""
    return 200 <= http_code < 300


def _is_accepted(http_code: int, accepted: AcceptedCodes) -> bool:
    if callable(accepted):
        return bool(accepted(http_code))
    return http_code in accepted


def _classify_exception(exc: BaseException) -> ResultCode:
    if isinstance(exc, httpx.TimeoutException):
        return ResultCode.TIMEOUT
    if isinstance(exc, (httpx.TransportError, OSError)):
        return ResultCode.WRONG_CONNECTION
    if isinstance(exc, ParseError):
        return ResultCode.INVALID_RESPONSE
    return ResultCode.UNKNOWN_ERROR


@dataclass(frozen=True)
class RemoteOperationResult(Generic[T]):
    """Outcome of a single remote operation.

    Either a status-code outcome (the request completed, ``success`` tells
    whether the code was accepted) or an exception outcome (``success`` is
    False and ``exception`` holds the cause). ``data`` is only set on success.
    """

    success: bool
    code: ResultCode
    http_code: int | None = None
    data: T | None = None
    exception: BaseException | None = None

    @classmethod
    def from_status(
        cls,
        http_code: int,
        accepted: AcceptedCodes = is_2xx,
        data: T | None = None,
        *,
        failure_code: ResultCode | None = None,
    ) -> RemoteOperationResult[T]:
        """Build a result from a completed request.

        Args:
            http_code: Status code returned by the server
            accepted: Accepted status codes, or a predicate over the code
            data: Parsed payload, dropped unless the code is accepted
            failure_code: Overrides the code derived from http_code on failure
        """
        if _is_accepted(http_code, accepted):
            code = ResultCode.OK_NO_CONTENT if http_code == 204 else ResultCode.OK
            return cls(success=True, code=code, http_code=http_code, data=data)
        code = failure_code or _HTTP_FAILURE_CODES.get(http_code, ResultCode.UNHANDLED_HTTP_CODE)
        return cls(success=False, code=code, http_code=http_code)

    @classmethod
    def from_exception(cls, exc: BaseException) -> RemoteOperationResult[T]:
        """Build a failed result capturing the exception."""
        return cls(success=False, code=_classify_exception(exc), exception=exc)

    @property
    def is_success(self) -> bool:
        return self.success

    @property
    def log_message(self) -> str:
        """Human readable description of the outcome."""
        if self.exception is not None:
            prefix = _EXCEPTION_MESSAGES.get(self.code, "Unexpected exception")
            return f"{prefix}: {type(self.exception).__name__}: {self.exception}"
        outcome = "success" if self.success else "fail"
        return f"Operation finished with HTTP status code {self.http_code} ({outcome})"
