from __future__ import annotations

import random

import pytest

from chat_providers.base.resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig


def test_default_ceilings_double_and_cap_at_eight_seconds():
    assert list(DEFAULT_RETRY_CONFIG.delays()) == [1.0, 2.0, 4.0, 8.0]  # nosec B101 - asserts are appropriate in unit tests


def test_ceilings_never_exceed_max_delay():
    cfg = RetryConfig(max_attempts=8, initial_delay=1.0, max_delay=8.0)
    ceilings = list(cfg.delays())
    assert len(ceilings) == 7  # nosec B101
    assert ceilings == sorted(ceilings)  # nosec B101 - non-decreasing
    assert max(ceilings) == 8.0  # nosec B101


def test_single_attempt_has_no_backoff():
    assert list(RetryConfig(max_attempts=1).delays()) == []  # nosec B101


def test_jitter_stays_below_ceiling():
    cfg = RetryConfig()
    rng = random.Random(1234)
    draws = [cfg.jitter(4.0, rng) for _ in range(500)]
    assert all(0.0 <= d < 4.0 for d in draws)  # nosec B101
    # full jitter spreads draws across the whole window
    assert min(draws) < 1.0 and max(draws) > 3.0  # nosec B101


@pytest.mark.parametrize("status", [400, 500, 502, 503, 504])
def test_retryable_statuses(status):
    assert DEFAULT_RETRY_CONFIG.is_retryable_status(status)  # nosec B101


@pytest.mark.parametrize("status", [401, 403, 404, 422, 429, 501])
def test_non_retryable_statuses(status):
    assert not DEFAULT_RETRY_CONFIG.is_retryable_status(status)  # nosec B101


def test_invalid_configuration_rejected():
    with pytest.raises(ValueError):
        RetryConfig(max_attempts=0)
    with pytest.raises(ValueError):
        RetryConfig(initial_delay=-1.0)
