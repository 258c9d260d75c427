"""
Blocking token bucket rate limiter for outbound monitoring API calls.

Permits are issued at a steady rate. The first acquisition on a fresh limiter
is immediate; each further permit becomes available ``1 / permits_per_second``
seconds after the previous one. Idle time is banked as stored permits, capped
at ``max_burst_seconds`` worth, so a quiet limiter may serve a short burst.
"""

import logging
import threading
import time
from collections.abc import Callable

from .config import RateLimitRule
from .exceptions import RateLimitConfigError

logger = logging.getLogger(__name__)


class TokenBucketRateLimit:
    """
    Token Bucket rate limiter that blocks the caller until a permit is free.

    Safe to share between threads: the bucket state is updated under a lock,
    and the wait happens outside it.
    """

    def __init__(
        self,
        rule: RateLimitRule,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if rule.permits_per_second <= 0:
            raise RateLimitConfigError(
                "Rate limit must be positive",
                config_field="permits_per_second",
                value=rule.permits_per_second,
            )
        if rule.max_burst_seconds < 0:
            raise RateLimitConfigError(
                "Burst window must not be negative",
                config_field="max_burst_seconds",
                value=rule.max_burst_seconds,
            )

        self.rule = rule
        self.lock = threading.Lock()
        self._clock = clock
        self._sleep = sleep

        self._interval = 1.0 / rule.permits_per_second
        self._max_stored = rule.max_burst_seconds * rule.permits_per_second
        self._stored_permits = 0.0
        self._next_free = clock()

    @property
    def rate(self) -> float:
        """Permits issued per second."""
        return self.rule.permits_per_second

    def acquire(self, permits: int = 1) -> float:
        """
        Take ``permits`` from the bucket, blocking until they are available.

        Returns:
            Seconds spent waiting.
        """
        if permits <= 0:
            raise RateLimitConfigError(
                f"Requested permits must be positive: {permits}", config_field="permits"
            )

        wait = self._reserve(permits)
        if wait > 0:
            logger.debug(f"Rate limited, waiting {wait:.3f}s for {permits} permit(s)")
            self._sleep(wait)
        return wait

    def _reserve(self, permits: int) -> float:
        """Claim permits and return how long the caller must wait before using them."""
        with self.lock:
            now = self._clock()
            self._resync(now)

            wait = max(self._next_free - now, 0.0)
            from_storage = min(float(permits), self._stored_permits)
            fresh = permits - from_storage

            # The next caller pays for the fresh permits taken here
            self._next_free += fresh * self._interval
            self._stored_permits -= from_storage
            return wait

    def _resync(self, now: float) -> None:
        """Bank permits accumulated while the limiter was idle."""
        if now > self._next_free:
            idle_permits = (now - self._next_free) / self._interval
            self._stored_permits = min(self._max_stored, self._stored_permits + idle_permits)
            self._next_free = now


def create_rate_limiter(permits_per_second: float) -> TokenBucketRateLimit:
    """Factory function to create a limiter for the given rate."""
    return TokenBucketRateLimit(RateLimitRule.per_second(permits_per_second))
