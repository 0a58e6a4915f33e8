"""Retry policy for the streaming transport.

Defines :class:`RetryConfig`, the immutable description of how many attempts
a request gets, which HTTP statuses are worth retrying, and how long to sleep
between attempts. The loop itself lives in
:class:`~chat_providers.base.transport.Transport`; the policy is kept
separate so it can be unit tested without any I/O.

Backoff
-------
The delay ceiling starts at ``initial_delay`` and doubles after every failed
attempt, capped at ``max_delay``. The actual sleep is drawn uniformly from
``[0, ceiling)`` (full jitter) so concurrent callers that failed together do
not retry together.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import FrozenSet, Iterator, Optional, Protocol

from ...config.defaults import (
    RETRY_INITIAL_DELAY_SECONDS,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_DELAY_SECONDS,
    RETRY_STATUS_CODES,
)
from ..errors import ProviderError


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        sleep: float | None,
        error: ProviderError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = RETRY_MAX_ATTEMPTS
    initial_delay: float = RETRY_INITIAL_DELAY_SECONDS
    max_delay: float = RETRY_MAX_DELAY_SECONDS
    retryable_statuses: FrozenSet[int] = field(default_factory=lambda: RETRY_STATUS_CODES)
    attempt_logger: Optional[AttemptLogger] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise ValueError("backoff delays must be non-negative")

    def delays(self) -> Iterator[float]:
        """Yield the backoff ceiling before each retry (``max_attempts - 1`` values).

        Ceilings are non-decreasing and never exceed ``max_delay``.
        """
        delay = min(self.initial_delay, self.max_delay)
        for _ in range(self.max_attempts - 1):
            yield delay
            delay = min(delay * 2, self.max_delay)

    def jitter(self, ceiling: float, rng: Optional[random.Random] = None) -> float:
        """Return a sleep drawn uniformly from ``[0, ceiling)``."""
        draw = (rng or random).random()
        return draw * ceiling

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retryable_statuses


DEFAULT_RETRY_CONFIG = RetryConfig()


__all__ = [
    "AttemptLogger",
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
]
