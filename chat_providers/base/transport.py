"""Streaming HTTP transport with retry, capped exponential backoff and jitter.

Purpose:
    Execute one provider request and hand back a live, successfully opened
    (HTTP 200) streaming response. Every retryable failure is absorbed here;
    callers only ever observe the terminal outcome.

Retry semantics:
    - Up to ``RetryConfig.max_attempts`` attempts (5 by default).
    - Retried: connection-level failures (no response) and the statuses in
      ``RetryConfig.retryable_statuses`` (400, 500, 502, 503, 504).
    - Any other non-200 status fails immediately with its status and body.
    - Before each retry the transport sleeps a jittered duration drawn from
      ``[0, ceiling)``; ceilings double from 1s up to 8s.
    - On exhaustion the last connection error is surfaced if one occurred,
      otherwise the last HTTP status and body.

Cancellation:
    The caller's :class:`CancellationToken` is checked before every attempt,
    bounds each attempt's httpx timeout, and interrupts the backoff sleep.
    Cancellation is never retried.

    While the request waits for response headers, ``client.send`` runs on
    a worker thread and the caller waits on the token, so a cancel from any
    thread returns at once; the abandoned response is closed when it
    arrives. Once streaming, :func:`abort_response` shuts the socket down to
    wake a reader blocked in ``iter_lines``.

Cookies:
    Each ``execute`` call keeps its own cookie jar. A session-affinity
    cookie set by an intermediary on a failed attempt is sent on that call's
    retries, and never leaks into another call, session or client sharing
    the pooled ``httpx.Client``.
"""

from __future__ import annotations

import contextlib
import logging
import random
import socket
import threading
from concurrent.futures import Future
from typing import Callable, Mapping, Optional

import httpx

from .cancellation import CancellationToken, CancelledError
from .errors import ErrorCode, ProviderError, TransportError, classify_exception, classify_status
from .http import get_httpx_client
from .logging import LogContext, get_logger, log_event, normalized_log_event
from .resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from .timeouts import TimeoutConfig, get_timeout_config, to_httpx_timeout

SleepFn = Callable[[float, CancellationToken], bool]


def _sleep_with_token(seconds: float, token: CancellationToken) -> bool:
    """Default backoff sleep; returns True if the token was cancelled meanwhile."""
    return token.wait(seconds)


def abort_response(response: httpx.Response) -> None:
    """Interrupt a read blocked on ``response`` from another thread.

    Shuts the underlying socket down, which makes a pending ``recv`` return
    and the reader fail with an httpx error; the reading thread still owns
    the response and closes it. Responses without a socket (mock transports)
    are simply closed.
    """
    stream = response.extensions.get("network_stream")
    sock = stream.get_extra_info("socket") if stream is not None else None
    if sock is None:
        response.close()
        return
    with contextlib.suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


def _close_abandoned(future: "Future[httpx.Response]") -> None:
    if future.exception() is None:
        future.result().close()


class Transport:
    """Retrying POST transport for one provider endpoint.

    Instances hold only immutable configuration and are safe to share between
    sessions and threads.

    Parameters:
        url: Absolute endpoint URL.
        headers: Request headers (content type, user agent, auth).
        ctx: Log context (provider/model) attached to every event.
        http_client: Optional ``httpx.Client``; defaults to the pooled client
            for ``url``.
        retry_config: Retry/backoff policy.
        timeout_config: Timeout values; defaults to :func:`get_timeout_config`.
        sleep: Backoff sleep hook ``(seconds, token) -> cancelled``.
        rng: Optional random source for the jitter draw.
    """

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str],
        *,
        ctx: Optional[LogContext] = None,
        http_client: Optional[httpx.Client] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
        timeout_config: Optional[TimeoutConfig] = None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._url = url
        self._headers = dict(headers)
        self._ctx = ctx or LogContext()
        self._http_client = http_client
        self._retry = retry_config
        self._timeouts = timeout_config
        self._sleep = sleep or _sleep_with_token
        self._rng = rng
        self._logger = get_logger("chat_providers.transport")

    @property
    def url(self) -> str:
        return self._url

    def _client(self) -> httpx.Client:
        if self._http_client is not None:
            return self._http_client
        return get_httpx_client(self._url, purpose="chat.stream")

    def execute(self, body: bytes, token: Optional[CancellationToken] = None) -> httpx.Response:
        """POST ``body`` and return the open streaming response.

        The returned response has status 200 and an unread body; the caller
        owns it and must close it.

        Raises:
            CancelledError: The token was cancelled or its deadline passed.
            TransportError: Non-retryable status, or all attempts failed.
        """
        token = token or CancellationToken()
        client = self._client()
        timeouts = self._timeouts or get_timeout_config()
        ceilings = list(self._retry.delays()) + [None]
        max_attempts = self._retry.max_attempts
        cookies = httpx.Cookies()

        last_exc: Optional[BaseException] = None
        last_status: Optional[int] = None
        last_body: Optional[str] = None

        for attempt, ceiling in enumerate(ceilings, start=1):
            token.raise_if_cancelled()
            # Built directly rather than via client.build_request so the shared
            # client's own cookie jar is never merged in.
            request = httpx.Request(
                "POST",
                self._url,
                content=body,
                headers=self._headers,
                extensions={"timeout": to_httpx_timeout(timeouts, token.remaining()).as_dict()},
            )
            cookies.set_cookie_header(request)
            normalized_log_event(
                self._logger,
                "transport.attempt",
                self._ctx,
                phase="start",
                attempt=attempt,
                level=logging.DEBUG,
                max_attempts=max_attempts,
            )
            try:
                response = self._send(client, request, token)
            except httpx.HTTPError as e:
                if token.cancelled:
                    raise CancelledError(
                        token.reason or "operation cancelled",
                        provider=self._ctx.provider,
                        model=self._ctx.model,
                        raw=e,
                    ) from e
                last_exc = e
                failure = TransportError(
                    str(e) or type(e).__name__,
                    code=classify_exception(e),
                    provider=self._ctx.provider,
                    model=self._ctx.model,
                    retryable=True,
                    raw=e,
                )
                self._backoff(attempt, ceiling, failure, token)
                continue

            cookies.extract_cookies(response)
            if response.status_code == httpx.codes.OK:
                self._report_attempt(attempt, None, None, None)
                return response

            status = response.status_code
            text = self._drain(response)
            failure = TransportError(
                f"http status code: {status} ({text})",
                code=classify_status(status),
                provider=self._ctx.provider,
                model=self._ctx.model,
                retryable=self._retry.is_retryable_status(status),
                status_code=status,
                body=text,
            )
            if not failure.retryable:
                self._report_attempt(attempt, None, None, failure)
                log_event(
                    self._logger,
                    "transport.error",
                    self._ctx,
                    level=logging.WARNING,
                    attempt=attempt,
                    status=status,
                    error_code=failure.code.value,
                    body=text,
                )
                raise failure
            last_status, last_body = status, text
            log_event(
                self._logger,
                "transport.headers",
                self._ctx,
                level=logging.DEBUG,
                attempt=attempt,
                headers=dict(response.headers),
            )
            self._backoff(attempt, ceiling, failure, token)

        if last_exc is not None:
            raise TransportError(
                f"request failed after {max_attempts} attempts: {last_exc}",
                code=classify_exception(last_exc),
                provider=self._ctx.provider,
                model=self._ctx.model,
                retryable=True,
                raw=last_exc,
            ) from last_exc
        raise TransportError(
            f"http status code: {last_status} ({last_body})",
            code=classify_status(last_status) if last_status is not None else ErrorCode.UNKNOWN,
            provider=self._ctx.provider,
            model=self._ctx.model,
            retryable=True,
            status_code=last_status,
            body=last_body,
        )

    def _send(self, client: httpx.Client, request: httpx.Request, token: CancellationToken) -> httpx.Response:
        """Send ``request`` on a worker thread and wait for headers or cancellation.

        A cancelled wait abandons the worker; whatever response it eventually
        produces is closed.
        """
        future: "Future[httpx.Response]" = Future()
        wake = threading.Event()
        future.add_done_callback(lambda _: wake.set())

        def _worker() -> None:
            try:
                future.set_result(client.send(request, stream=True))
            except Exception as e:  # re-raised on the calling thread
                future.set_exception(e)

        threading.Thread(target=_worker, name="chat-providers-send", daemon=True).start()
        unregister = token.on_cancel(wake.set)
        try:
            while not wake.wait(token.remaining()):
                if token.cancelled:
                    break
        finally:
            unregister()

        if not future.done() or (token.cancelled and future.exception() is None):
            future.add_done_callback(_close_abandoned)
            raise CancelledError(
                token.reason or "operation cancelled",
                provider=self._ctx.provider,
                model=self._ctx.model,
            )
        return future.result()

    def _backoff(
        self,
        attempt: int,
        ceiling: Optional[float],
        failure: ProviderError,
        token: CancellationToken,
    ) -> None:
        """Log a retryable failure and sleep before the next attempt (none after the last)."""
        sleep_for = self._retry.jitter(ceiling, self._rng) if ceiling is not None else None
        self._report_attempt(attempt, ceiling, sleep_for, failure)
        normalized_log_event(
            self._logger,
            "transport.retry" if ceiling is not None else "transport.exhausted",
            self._ctx,
            phase="start",
            attempt=attempt,
            error_code=failure.code.value,
            level=logging.WARNING,
            emitted=False,
            delay=ceiling,
            sleep=round(sleep_for, 3) if sleep_for is not None else None,
            status=getattr(failure, "status_code", None),
            error=failure.message,
        )
        if sleep_for is None:
            return
        if self._sleep(sleep_for, token):
            raise CancelledError(
                token.reason or "operation cancelled",
                provider=self._ctx.provider,
                model=self._ctx.model,
            )

    def _report_attempt(
        self,
        attempt: int,
        delay: Optional[float],
        sleep: Optional[float],
        error: Optional[ProviderError],
    ) -> None:
        if self._retry.attempt_logger:
            self._retry.attempt_logger(
                attempt=attempt,
                max_attempts=self._retry.max_attempts,
                delay=delay,
                sleep=sleep,
                error=error,
            )

    @staticmethod
    def _drain(response: httpx.Response) -> str:
        """Read and close an error response, returning its body as text."""
        try:
            response.read()
            return response.text
        except httpx.HTTPError:
            # The status already tells the story; a truncated error body does not.
            return ""
        finally:
            response.close()


__all__ = ["Transport", "SleepFn", "abort_response"]
