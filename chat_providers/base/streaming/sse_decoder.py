"""Server-sent-event decoder.

Consumes a line iterator (normally ``httpx.Response.iter_lines()``) and
assembles the streamed assistant text with a provider-supplied event parser.

Decoding rules:
    - Lines without the ``data:`` marker (blank separators, ``event:`` lines,
      comments, keep-alives) are skipped.
    - A payload equal to ``[DONE]`` ends consumption successfully.
    - Each other payload is handed to ``parse_event``. A ``ValueError``
      (including ``json.JSONDecodeError``) marks a malformed line, which is
      skipped rather than treated as fatal.
    - Every successfully parsed payload is appended to the raw capture.
    - A terminal event (``finish=True``) ends consumption after its delta is
      applied. A body that ends without a terminal marker is also a
      successful end.
    - A read failure is a :class:`StreamError`; the partial text is dropped.
    - The cancellation token is checked between lines; a read that fails
      because the token closed the response surfaces as ``CancelledError``.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

import httpx

from ...config.defaults import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from ..cancellation import CancellationToken, CancelledError
from ..errors import StreamError
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from .events import StreamEvent, StreamResult

EventParser = Callable[[str], Optional[StreamEvent]]
DeltaSink = Callable[[str], None]

_logger = get_logger("chat_providers.streaming")


def sse_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or ``None`` for any other line.

    The marker is accepted with or without the single space that
    conventionally follows it.
    """
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    payload = line[len(SSE_DATA_PREFIX):]
    if payload.startswith(" "):
        payload = payload[1:]
    return payload.rstrip("\r")


def decode_stream(
    lines: Iterable[str],
    parse_event: EventParser,
    *,
    token: Optional[CancellationToken] = None,
    on_delta: Optional[DeltaSink] = None,
    ctx: Optional[LogContext] = None,
) -> StreamResult:
    """Consume ``lines`` and return the assembled text plus the raw capture.

    Parameters:
        lines: Iterable of decoded body lines.
        parse_event: Provider event parser; returns a ``StreamEvent``, ``None``
            for a well-formed event without text, or raises ``ValueError``.
        token: Optional cancellation token checked between lines.
        on_delta: Optional sink receiving every text fragment as it arrives.
        ctx: Log context.

    Raises:
        CancelledError: The token was cancelled mid-stream.
        StreamError: The underlying body could not be read to completion.
    """
    fragments: List[str] = []
    captured: List[str] = []
    skipped = 0
    finished = False
    iterator = iter(lines)

    while True:
        if token is not None:
            token.raise_if_cancelled()
        try:
            line = next(iterator)
        except StopIteration:
            # an aborted socket can end the body cleanly
            if token is not None:
                token.raise_if_cancelled()
            break
        except (httpx.HTTPError, httpx.StreamError, OSError) as e:
            if token is not None and token.cancelled:
                raise CancelledError(token.reason or "operation cancelled", raw=e) from e
            normalized_log_event(
                _logger,
                "stream.error",
                ctx,
                phase="stream",
                error_code="stream",
                level=logging.WARNING,
                emitted=bool(fragments),
                error=str(e) or type(e).__name__,
            )
            raise StreamError(
                f"reading response stream: {str(e) or type(e).__name__}",
                provider=ctx.provider if ctx else None,
                model=ctx.model if ctx else None,
                raw=e,
            ) from e

        payload = sse_payload(line)
        if payload is None:
            continue
        if payload == SSE_DONE_SENTINEL:
            finished = True
            break
        try:
            event = parse_event(payload)
        except ValueError:
            skipped += 1
            log_event(_logger, "stream.decode_error", ctx, level=logging.DEBUG, payload=payload[:200])
            continue

        captured.append(payload)
        if event is None:
            continue
        if event.delta:
            fragments.append(event.delta)
            if on_delta is not None:
                on_delta(event.delta)
        if event.finish:
            finished = True
            break

    text = "".join(fragments)
    normalized_log_event(
        _logger,
        "stream.finalize",
        ctx,
        phase="finalize",
        level=logging.DEBUG,
        emitted=bool(text),
        events=len(captured),
        skipped=skipped,
        finished=finished,
        chars=len(text),
    )
    raw = "".join(f"{p}\n" for p in captured).encode("utf-8")
    return StreamResult(text=text, raw=raw, events=len(captured), skipped=skipped, finished=finished)


__all__ = ["decode_stream", "sse_payload", "EventParser", "DeltaSink"]
