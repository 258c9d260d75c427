"""
Rate limiting for outbound monitoring API calls.

Provides a blocking token bucket shared by descriptor registration and time
series export so that the combined call rate against one backend stays under
a configured ceiling.
"""

from .algorithms import TokenBucketRateLimit, create_rate_limiter
from .config import RateLimitRule
from .exceptions import RateLimitConfigError, RateLimitError

__all__ = [
    "TokenBucketRateLimit",
    "create_rate_limiter",
    "RateLimitRule",
    "RateLimitError",
    "RateLimitConfigError",
]
