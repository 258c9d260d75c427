"""
Configuration for outbound request rate limiting.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitRule:
    """Configuration for a permits-per-second rate limit."""

    permits_per_second: float
    # Idle time that may be banked as permits for a later burst
    max_burst_seconds: float = 1.0
    description: str | None = None

    @classmethod
    def per_second(cls, permits: float, description: str | None = None) -> "RateLimitRule":
        """Build a rule allowing ``permits`` operations per second."""
        return cls(permits_per_second=permits, description=description)
