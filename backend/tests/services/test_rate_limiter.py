"""Token-bucket limiter: burst, refill, per-IP isolation, stale sweep."""

from dotareplays.infrastructure.rate_limiter import (
    STALE_AFTER_SECONDS, SWEEP_INTERVAL_SECONDS, RateLimiter,
)


def test_burst_then_empty():
    limiter = RateLimiter(rps=1.0, burst=4)
    assert [limiter.allow("10.0.0.1", now=100.0) for _ in range(5)] == [
        True, True, True, True, False,
    ]


def test_refills_at_rps():
    limiter = RateLimiter(rps=2.0, burst=2)
    assert limiter.allow("10.0.0.1", now=100.0)
    assert limiter.allow("10.0.0.1", now=100.0)
    assert not limiter.allow("10.0.0.1", now=100.0)
    assert limiter.allow("10.0.0.1", now=100.5)
    assert not limiter.allow("10.0.0.1", now=100.5)


def test_refill_capped_at_burst():
    limiter = RateLimiter(rps=10.0, burst=2)
    limiter.allow("10.0.0.1", now=100.0)
    results = [limiter.allow("10.0.0.1", now=200.0) for _ in range(3)]
    assert results == [True, True, False]


def test_clients_are_isolated():
    limiter = RateLimiter(rps=1.0, burst=1)
    assert limiter.allow("10.0.0.1", now=100.0)
    assert not limiter.allow("10.0.0.1", now=100.0)
    assert limiter.allow("10.0.0.2", now=100.0)


def test_disabled_never_rejects():
    limiter = RateLimiter(rps=1.0, burst=1, enabled=False)
    assert all(limiter.allow("10.0.0.1", now=100.0) for _ in range(10))
    assert limiter.tracked_clients() == 0


def test_idle_clients_are_swept():
    limiter = RateLimiter(rps=1.0, burst=1)
    start = limiter._last_sweep
    limiter.allow("10.0.0.1", now=start)
    later = start + STALE_AFTER_SECONDS + SWEEP_INTERVAL_SECONDS
    limiter.allow("10.0.0.2", now=later)
    assert limiter.tracked_clients() == 1
