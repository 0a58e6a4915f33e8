"""Streaming primitives: event types and the server-sent-event decoder."""

from .events import StreamEvent, StreamResult
from .sse_decoder import DeltaSink, EventParser, decode_stream, sse_payload

__all__ = [
    "StreamEvent",
    "StreamResult",
    "decode_stream",
    "sse_payload",
    "EventParser",
    "DeltaSink",
]
