"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class threaded through every blocking phase
of an exchange: the backoff sleep, each HTTP attempt and each stream read.
A token may carry a deadline; once it passes, the token reports itself as
cancelled with reason ``"deadline exceeded"``.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional

from ..errors import CancelledError
from .state import State

DEADLINE_EXCEEDED = "deadline exceeded"


class CancellationToken:
    """A cooperative cancellation token with deadline and cascading semantics.

    Thread-safe. Child tokens inherit cancellation when the parent is
    cancelled, and never outlive the parent's deadline.

    Parameters:
        timeout: Optional number of seconds from now after which the token
            counts as cancelled.
        parent: Optional parent token to link to.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        parent: "CancellationToken | None" = None,
    ) -> None:
        self._state = State()
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        if timeout is not None:
            self._state.deadline = time.monotonic() + max(0.0, timeout)
        if parent is not None:
            if parent.deadline is not None and (
                self._state.deadline is None or parent.deadline < self._state.deadline
            ):
                self._state.deadline = parent.deadline
            parent.link_child(self)

    @property
    def deadline(self) -> Optional[float]:
        """Monotonic deadline, if one was configured."""
        return self._state.deadline

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested or the deadline has passed."""
        if self._state.cancelled:
            return True
        if self._state.deadline is not None and time.monotonic() >= self._state.deadline:
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return False

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, ``None`` without one, never negative."""
        if self._state.deadline is None:
            return None
        return max(0.0, self._state.deadline - time.monotonic())

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, run callbacks and cascade to children."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        self._event.set()
        for callback in callbacks:
            callback()
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run once on cancellation.

        If the token is already cancelled the callback runs immediately.
        Returns a function that unregisters the callback.
        """
        with self._lock:
            run_now = self._state.cancelled
            if not run_now:
                self._callbacks.append(callback)
        if run_now:
            callback()

        def _unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _unregister

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``; return True as soon as the token is cancelled.

        The wait is additionally bounded by the deadline, so an expiring
        deadline ends the wait early and reports cancellation.
        """
        if self.cancelled:
            return True
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self._event.wait(remaining)
            return self.cancelled
        self._event.wait(max(0.0, seconds))
        return self.cancelled

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def child(self, *, timeout: Optional[float] = None) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(timeout=timeout, parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, deadline={self._state.deadline!r}, "
            f"children={len(self._children)})"
        )


__all__ = ["CancellationToken", "DEADLINE_EXCEEDED"]
