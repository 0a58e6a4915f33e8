"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose the cancellation constructs via the canonical
``chat_providers.base.cancellation`` import path while the concrete
implementation lives under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` plays the role of a cancellable deadline: it is
  passed to ``ChatSession.exchange`` and observed by the transport, the
  backoff sleep and the stream decoder.
- ``CancelledError`` is raised by operations that observe a cancellation request.
"""

from .errors import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken, DEADLINE_EXCEEDED

__all__ = ["CancellationToken", "CancelledError", "DEADLINE_EXCEEDED"]
