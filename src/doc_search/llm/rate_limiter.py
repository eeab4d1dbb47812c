"""Token bucket rate limiter for summarizer API calls."""

import time
from threading import Lock
from typing import Optional

from loguru import logger


class TokenBucketRateLimiter:
    """Thread-safe token bucket shared by all build workers.

    Refills at ``rate`` tokens per second up to ``capacity``; each summarizer
    request spends one token.
    """

    def __init__(
        self,
        rate: float,
        capacity: Optional[int] = None,
        name: str = "RateLimiter"
    ):
        """Initialize rate limiter.

        Args:
            rate: Tokens per second (e.g., 1.0 = 60 requests/min)
            capacity: Bucket capacity (burst size). Defaults to max(1, rate * 60)
            name: Identifier for logging
        """
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = rate
        self.capacity = capacity or max(1, int(rate * 60))
        self.name = name

        self.tokens = float(self.capacity)
        self.last_update = time.monotonic()
        self.lock = Lock()

        logger.debug(f"Initialized {name}: {rate:.2f} tokens/sec, capacity={self.capacity}")

    def _refill(self):
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.last_update) * self.rate)
        self.last_update = now

    def acquire(self, tokens: int = 1, block: bool = True) -> bool:
        """Acquire tokens from the bucket.

        Args:
            tokens: Number of tokens to acquire
            block: If True, wait until tokens are available

        Returns:
            True if tokens were acquired, False only when block=False and the
            bucket is short
        """
        while True:
            with self.lock:
                self._refill()
                if self.tokens >= tokens:
                    self.tokens -= tokens
                    return True
                if not block:
                    return False
                wait_time = (tokens - self.tokens) / self.rate

            # Sleep outside the lock so other workers can refill/check
            logger.debug(f"{self.name}: waiting {wait_time:.2f}s for tokens")
            time.sleep(wait_time)

    def __enter__(self):
        self.acquire(tokens=1, block=True)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class NoOpRateLimiter:
    """Rate limiter for local models with no rate limits."""

    def acquire(self, tokens: int = 1, block: bool = True) -> bool:
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass
