"""
Rate limiting exceptions for the metrics writer.
"""

from datetime import UTC, datetime
from typing import Any


class RateLimitError(Exception):
    """Base exception for all rate limiting errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(UTC)


class RateLimitConfigError(RateLimitError):
    """Raised when rate limit configuration is invalid."""

    def __init__(self, message: str, config_field: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, kwargs)
        self.config_field = config_field
