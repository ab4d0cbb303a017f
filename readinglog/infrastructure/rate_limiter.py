"""
Rate limiter using the token bucket algorithm.

Used to keep catalog traffic under the provider's per-minute quota. It only
delays calls; it never retries them.
"""
import asyncio
import time
import logging

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    A rate limiter using the token bucket algorithm for async operations.
    """
    def __init__(self, tokens_per_second: float, max_tokens: int):
        if tokens_per_second <= 0:
            raise ValueError("tokens_per_second must be positive.")
        self.tokens_per_second = tokens_per_second
        self.max_tokens = max(1, max_tokens)
        self.tokens = self.max_tokens
        self.last_refill_time = time.monotonic()
        self.lock = asyncio.Lock()

    @classmethod
    def per_minute(cls, requests_per_minute: float) -> "RateLimiter":
        """Build a limiter from a per-minute quota with a ten second burst."""
        tokens_per_second = requests_per_minute / 60
        return cls(tokens_per_second, int(tokens_per_second * 10))

    def _refill_tokens(self):
        now = time.monotonic()
        time_passed = now - self.last_refill_time
        new_tokens = time_passed * self.tokens_per_second

        if new_tokens > 0:
            self.tokens = min(self.max_tokens, self.tokens + new_tokens)
            self.last_refill_time = now

    async def acquire(self, weight: int = 1):
        """
        Acquire a token before making a rate-limited call.
        Waits if necessary.
        """
        if weight > self.max_tokens:
            raise ValueError("Request weight exceeds max tokens.")

        async with self.lock:
            self._refill_tokens()

            while self.tokens < weight:
                required = weight - self.tokens
                wait_time = required / self.tokens_per_second
                logger.debug(f"Rate limit reached, waiting {wait_time:.2f}s")

                # Release lock while waiting
                self.lock.release()
                try:
                    await asyncio.sleep(wait_time)
                finally:
                    await self.lock.acquire()

                self._refill_tokens()

            self.tokens -= weight
