"""
Tests for the shared retry decorator and circuit breaker.
"""

import pytest

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import RetryConfig, RetryError, _calculate_delay, retry_on_exception

FAST = RetryConfig(max_attempts=3, base_delay=0.0, jitter=False)


@pytest.mark.asyncio
async def test_retry_succeeds_after_transient_failures():
    attempts = 0

    @retry_on_exception((ConnectionError,), config=FAST)
    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise ConnectionError("reset")
        return "ok"

    assert await flaky() == "ok"
    assert attempts == 3


@pytest.mark.asyncio
async def test_retry_gives_up_with_last_exception():
    @retry_on_exception((ConnectionError,), config=FAST)
    async def down():
        raise ConnectionError("refused")

    with pytest.raises(RetryError) as excinfo:
        await down()

    assert excinfo.value.attempts == 3
    assert isinstance(excinfo.value.last_exception, ConnectionError)


@pytest.mark.asyncio
async def test_retry_ignores_unlisted_exceptions():
    attempts = 0

    @retry_on_exception((ConnectionError,), config=FAST)
    async def broken():
        nonlocal attempts
        attempts += 1
        raise KeyError("x")

    with pytest.raises(KeyError):
        await broken()
    assert attempts == 1


def test_backoff_doubles_up_to_max_delay():
    config = RetryConfig(base_delay=0.5, max_delay=3.0, exponential_base=2.0, jitter=False)

    assert [_calculate_delay(attempt, config) for attempt in (1, 2, 3, 4, 5)] == [0.5, 1.0, 2.0, 3.0, 3.0]


def test_jitter_stays_within_ten_percent():
    config = RetryConfig(base_delay=1.0, max_delay=10.0, jitter=True)

    for _ in range(20):
        assert 1.8 <= _calculate_delay(2, config) <= 2.2


@pytest.mark.asyncio
async def test_circuit_opens_and_recovers(monkeypatch):
    now = [100.0]
    monkeypatch.setattr("shared.circuit_breaker.time.time", lambda: now[0])
    breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=10.0, name="test")

    async def fail():
        raise RuntimeError("boom")

    async def succeed():
        return "ok"

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(fail)
    assert breaker.is_open()

    with pytest.raises(CircuitBreakerOpenException):
        await breaker.call(succeed)

    now[0] += 10.0
    assert await breaker.call(succeed) == "ok"
    assert breaker.get_state()["state"] == "closed"
    assert breaker.get_state()["failure_count"] == 0
