"""Uniform response envelope returned by every use case.

A use case never raises into the transport layer. It returns either a
``SuccessResponse`` or an ``ErrorResponse``; callers branch on ``success``
(or ``isinstance``) instead of catching exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Generic, Literal, TypeVar

from bill.domain.errors import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class SuccessResponse(Generic[T]):
    data: T
    status_code: HTTPStatus
    message: str
    success: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True)
class ErrorResponse:
    code: ErrorCode
    message: str
    status_code: HTTPStatus
    details: dict[str, Any] | None = None
    success: Literal[False] = field(default=False, init=False)


Response = SuccessResponse[T] | ErrorResponse


def build_response(*, data: T, status_code: HTTPStatus, message: str) -> SuccessResponse[T]:
    """Wrap a use-case result in the success envelope."""
    return SuccessResponse(data=data, status_code=status_code, message=message)


def build_error_response(
    *,
    code: ErrorCode,
    message: str,
    status_code: HTTPStatus,
    details: dict[str, Any] | None = None,
) -> ErrorResponse:
    """
    Wrap a domain failure in the error envelope.

    When ``details`` is given it always carries the error code under ``"code"``
    so clients reading only the details object can still discriminate errors.
    """
    if details is not None:
        details = {**details, "code": code.value}
    return ErrorResponse(code=code, message=message, status_code=status_code, details=details)


def to_payload(response: SuccessResponse[Any] | ErrorResponse) -> dict[str, Any]:
    """Render an envelope as a plain dict for the transport layer."""
    payload: dict[str, Any] = {
        "success": response.success,
        "status_code": int(response.status_code),
        "message": response.message,
    }
    if isinstance(response, SuccessResponse):
        payload["data"] = response.data
    else:
        payload["code"] = response.code.value
        if response.details is not None:
            payload["details"] = response.details
    return payload
