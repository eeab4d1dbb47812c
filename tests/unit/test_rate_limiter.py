"""
Tests for the token bucket rate limiter.
"""

import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from doc_search.llm.rate_limiter import NoOpRateLimiter, TokenBucketRateLimiter


class TestTokenBucketRateLimiter:
    """Tests for TokenBucketRateLimiter."""

    def test_default_capacity(self):
        assert TokenBucketRateLimiter(rate=2.0).capacity == 120
        assert TokenBucketRateLimiter(rate=0.001).capacity == 1

    def test_non_blocking_exhaustion(self):
        limiter = TokenBucketRateLimiter(rate=0.5, capacity=2)

        assert limiter.acquire(block=False)
        assert limiter.acquire(block=False)
        assert not limiter.acquire(block=False)

    def test_blocking_waits_for_refill(self):
        limiter = TokenBucketRateLimiter(rate=20.0, capacity=1)
        limiter.acquire()

        started = time.monotonic()
        assert limiter.acquire()
        assert time.monotonic() - started >= 0.03

    def test_context_manager_spends_token(self):
        limiter = TokenBucketRateLimiter(rate=0.5, capacity=1)

        with limiter:
            pass

        assert not limiter.acquire(block=False)

    def test_shared_between_threads(self):
        limiter = TokenBucketRateLimiter(rate=100.0, capacity=5)

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: limiter.acquire(), range(10)))

        assert all(results)

    @pytest.mark.parametrize("rate", [0, -1.0])
    def test_invalid_rate(self, rate):
        with pytest.raises(ValueError):
            TokenBucketRateLimiter(rate=rate)


class TestNoOpRateLimiter:
    """Tests for NoOpRateLimiter."""

    def test_always_acquires(self):
        limiter = NoOpRateLimiter()

        assert all(limiter.acquire(block=False) for _ in range(100))
        with limiter:
            pass
