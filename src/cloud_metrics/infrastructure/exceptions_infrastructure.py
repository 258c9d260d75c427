"""
Infrastructure-specific exception hierarchy for the metrics writer.

This module provides exceptions for export pipeline errors: rejected points,
failed descriptor registration, failed time series writes, buffer invariant
violations, remote API failures, and configuration problems.
"""

from typing import Any


class InfrastructureException(Exception):
    """Base exception for all infrastructure-level errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Export Exceptions
# ============================================================================


class MetricExportException(InfrastructureException):
    """Base exception for metric export errors."""

    pass


class InvalidMetricPointError(MetricExportException):
    """Raised when a point is rejected before any side effect takes place."""

    def __init__(self, metric_name: str, reason: str, **kwargs: Any) -> None:
        message = f"Invalid point for metric {metric_name}: {reason}"
        details = {"metric_name": metric_name, "reason": reason, **kwargs}
        super().__init__(message, details)
        self.metric_name = metric_name
        self.reason = reason


class DescriptorRegistrationError(MetricExportException):
    """Raised when a metric descriptor cannot be created on the backend."""

    def __init__(self, metric_type: str, error: str | None = None) -> None:
        message = f"Error creating metric descriptor {metric_type}"
        if error:
            message += f": {error}"

        details = {"metric_type": metric_type, "error": error}
        super().__init__(message, details)
        self.metric_type = metric_type
        self.error = error


class TimeSeriesExportError(MetricExportException):
    """Raised when a batch of time series cannot be written. The batch is dropped."""

    def __init__(self, dropped_points: int, error: str | None = None) -> None:
        message = f"Failed to export {dropped_points} points"
        if error:
            message += f": {error}"

        details = {"dropped_points": dropped_points, "error": error}
        super().__init__(message, details)
        self.dropped_points = dropped_points
        self.error = error


class BufferOverflowError(MetricExportException):
    """Raised when the buffer holds more points than one request may carry."""

    def __init__(self, buffered: int, ceiling: int) -> None:
        message = f"Cannot flush more than {ceiling} points at a time (buffered: {buffered})"
        details = {"buffered": buffered, "ceiling": ceiling}
        super().__init__(message, details)
        self.buffered = buffered
        self.ceiling = ceiling


# ============================================================================
# External Service Exceptions
# ============================================================================


class ExternalServiceException(InfrastructureException):
    """Base exception for external service errors."""

    def __init__(self, service_name: str, message: str, **kwargs: Any) -> None:
        details = {"service_name": service_name, **kwargs}
        super().__init__(message, details)
        self.service_name = service_name


class MonitoringApiError(ExternalServiceException):
    """Raised when a monitoring API call fails at the transport or HTTP level."""

    def __init__(
        self,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        message = f"Monitoring API {operation} failed"
        if status_code is not None:
            message += f" with HTTP {status_code}"
        message += f": {reason}"

        super().__init__(
            "monitoring", message, operation=operation, reason=reason, status_code=status_code
        )
        self.operation = operation
        self.reason = reason
        self.status_code = status_code


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationException(InfrastructureException):
    """Base exception for configuration errors."""

    pass


class MissingConfigurationException(ConfigurationException):
    """Raised when required configuration is missing."""

    def __init__(self, config_key: str, config_section: str | None = None) -> None:
        message = f"Missing required configuration: {config_key}"
        if config_section:
            message = f"Missing required configuration in {config_section}: {config_key}"

        details = {"config_key": config_key, "config_section": config_section}
        super().__init__(message, details)
        self.config_key = config_key
        self.config_section = config_section


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration is invalid."""

    def __init__(
        self, config_key: str, value: Any, reason: str, config_section: str | None = None
    ) -> None:
        message = f"Invalid configuration {config_key}={value}: {reason}"
        if config_section:
            message = f"Invalid configuration in {config_section}: {config_key}={value} - {reason}"

        details = {
            "config_key": config_key,
            "value": str(value),
            "reason": reason,
            "config_section": config_section,
        }
        super().__init__(message, details)
        self.config_key = config_key
        self.value = value
        self.reason = reason
        self.config_section = config_section
