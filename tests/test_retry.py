"""Unit tests for the fixed-delay retry policy."""

import pytest

from lichessdash.core.retry import RetryPolicy


def _failing(exc, times, result="ok"):
    calls = []

    def fn():
        calls.append(1)
        if len(calls) <= times:
            raise exc
        return result

    return fn, calls


def test_makes_three_attempts_by_default_and_reraises_last_error():
    sleeps = []
    fn, calls = _failing(ValueError("boom"), times=10)
    policy = RetryPolicy(sleep=sleeps.append)

    with pytest.raises(ValueError, match="boom"):
        policy.call(fn)

    assert len(calls) == 3
    assert sleeps == [1.0, 1.0]


def test_returns_value_once_an_attempt_succeeds():
    sleeps = []
    fn, calls = _failing(ValueError("flaky"), times=1, result=42)

    assert RetryPolicy(sleep=sleeps.append).call(fn) == 42
    assert len(calls) == 2
    assert sleeps == [1.0]


def test_other_exceptions_are_not_retried():
    fn, calls = _failing(KeyError("nope"), times=10)
    policy = RetryPolicy(retry_on=(ValueError,), sleep=lambda _: None)

    with pytest.raises(KeyError):
        policy.call(fn)

    assert len(calls) == 1


def test_zero_retries_means_single_attempt():
    fn, calls = _failing(ValueError("boom"), times=10)
    policy = RetryPolicy(retries=0, sleep=lambda _: None)

    assert policy.attempts == 1
    with pytest.raises(ValueError):
        policy.call(fn)
    assert len(calls) == 1


def test_arguments_are_forwarded():
    policy = RetryPolicy(sleep=lambda _: None)
    assert policy.call(lambda a, b=0: a + b, 1, b=2) == 3
