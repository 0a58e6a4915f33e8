"""Streaming value types shared by the decoder and the provider codecs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StreamEvent:
    """One decoded provider event.

    Fields:
      delta: incremental text fragment (``None`` for control events)
      finish: True when the event marks the end of the generated message
    """

    delta: Optional[str] = None
    finish: bool = False


@dataclass(frozen=True)
class StreamResult:
    """Outcome of consuming a complete event stream.

    Fields:
      text: concatenation of every delta, in arrival order
      raw: newline-joined payloads of every successfully parsed event
        (diagnostics only)
      events: number of successfully parsed events
      skipped: number of ``data:`` lines that failed to parse
      finished: True if a terminal event or the ``[DONE]`` sentinel was seen
        (False when the body simply ended)
    """

    text: str
    raw: bytes
    events: int = 0
    skipped: int = 0
    finished: bool = False


__all__ = ["StreamEvent", "StreamResult"]
