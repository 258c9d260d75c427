"""
Domain-level exceptions for the metrics writer.

These exceptions are raised while building metric definitions, before any
point reaches the export pipeline.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidMetricDefinitionError(DomainException):
    """Raised when a metric or label definition is malformed."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        details = {"field": field, "value": value}
        super().__init__(message, details)
        self.field = field
        self.value = value
