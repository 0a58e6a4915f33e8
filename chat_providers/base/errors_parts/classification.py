"""
Map HTTP statuses and exceptions onto :class:`ErrorCode` values.

The codes only label log events and errors. Whether a failure is retried
is decided by :class:`~chat_providers.base.resilience.retry.RetryConfig`,
never by the code.
"""
from __future__ import annotations

from typing import Mapping, Optional

import httpx

from .error_code import ErrorCode
from .provider_error import ProviderError

STATUS_CODES: Mapping[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _status_of(exc: BaseException) -> Optional[int]:
    """Return the HTTP status attached to ``exc``, if any.

    Looks at ``exc.status_code`` first, then ``exc.response.status_code``.
    """
    for holder in (exc, getattr(exc, "response", None)):
        status = getattr(holder, "status_code", None) if holder is not None else None
        if isinstance(status, int) and 100 <= status < 600:
            return status
    return None


def classify_status(status: int) -> ErrorCode:
    """Map an HTTP status code to an :class:`ErrorCode` (``UNKNOWN`` if unmapped)."""
    return STATUS_CODES.get(status, ErrorCode.UNKNOWN)


def classify_exception(exc: BaseException) -> ErrorCode:
    """Return the :class:`ErrorCode` best describing ``exc``.

    Order: a ``ProviderError`` keeps its own code; timeouts (builtin or
    httpx) are ``TIMEOUT``; an attached HTTP status is mapped; any other
    httpx transport failure is ``TRANSIENT``; everything else ``UNKNOWN``.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    status = _status_of(exc)
    if status is not None:
        return classify_status(status)
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    return ErrorCode.UNKNOWN


__all__ = ["STATUS_CODES", "classify_exception", "classify_status"]
