"""
Unit tests for Fibonacci backoff.
"""

import pytest

from kinesis_writable import RetryPolicy, RetryState, fib


def test_fib_sequence():
    assert [fib(n) for n in range(1, 9)] == [1, 1, 2, 3, 5, 8, 13, 21]


def test_fib_rejects_zero():
    with pytest.raises(ValueError):
        fib(0)


def test_backoff_curve_for_default_base():
    """Delays for base 100ms: 100, 100, 200, 300, 500."""
    rp = RetryPolicy(max_retries=5, base_delay_ms=100)
    assert [rp.next_backoff_ms(i) for i in range(1, 6)] == [100, 100, 200, 300, 500]
    assert rp.schedule_ms() == [100, 100, 200, 300, 500]


def test_schedule_empty_without_retries():
    assert RetryPolicy(max_retries=0).schedule_ms() == []


def test_retry_state_exhaustion():
    state = RetryState(max_attempts=2)
    assert not state.exhausted
    state.attempts_made = 2
    assert state.exhausted
    assert RetryState(max_attempts=0).exhausted
