"""
Structured Logging for the metrics writer

JSON structured logs with tracing context, export-specific log fields, and
masking of credentials that may appear in API error messages.
"""

import json
import logging
import re
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

# Export-specific attributes copied from ``extra`` into their own JSON section
EXPORT_FIELDS = ("metric_type", "project", "point_count")

STANDARD_FIELDS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "trace_id",
    "span_id",
    *EXPORT_FIELDS,
}


@dataclass
class SensitiveDataConfig:
    """Configuration for sensitive data masking."""

    api_key_patterns: list[str] = field(
        default_factory=lambda: [
            r"api[_-]?key",
            r"access[_-]?token",
            r"refresh[_-]?token",
            r"authorization",
            r"x-goog-api-key",
        ]
    )

    # Replacement text
    mask_replacement: str = "***MASKED***"

    # Fields to completely exclude from logs
    excluded_fields: set[str] = field(
        default_factory=lambda: {"password", "secret", "private_key", "credentials"}
    )


class ExportLogRecord(logging.LogRecord):
    """Log record carrying the active trace context."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)

        span = trace.get_current_span()
        if span.is_recording():
            span_context = span.get_span_context()
            self.trace_id = format(span_context.trace_id, "032x") if span_context.trace_id else None
            self.span_id = format(span_context.span_id, "016x") if span_context.span_id else None
        else:
            self.trace_id = None
            self.span_id = None


class SensitiveDataMasker:
    """Masks credentials in log messages and extra fields."""

    BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)

    def __init__(self, config: SensitiveDataConfig) -> None:
        self.config = config
        self._compiled_patterns = [
            re.compile(rf'("{pattern}":\s*"[^"]*"|{pattern}=\S+|{pattern}:\s*\S+)', re.IGNORECASE)
            for pattern in config.api_key_patterns
        ]

    def mask_message(self, message: str) -> str:
        """Mask sensitive data in log message."""
        masked_message = self.BEARER_PATTERN.sub(
            lambda m: m.group(1) + self.config.mask_replacement, message
        )
        for pattern in self._compiled_patterns:
            masked_message = pattern.sub(lambda m: self._replace_value(m.group(0)), masked_message)
        return masked_message

    def mask_extra_fields(self, extra: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive data in extra log fields."""
        masked_extra: dict[str, Any] = {}

        for key, value in extra.items():
            if key.lower() in self.config.excluded_fields:
                continue

            if any(re.search(pattern, key.lower()) for pattern in self.config.api_key_patterns):
                masked_extra[key] = self.config.mask_replacement
            elif isinstance(value, str):
                masked_extra[key] = self.mask_message(value)
            elif isinstance(value, dict):
                masked_extra[key] = self.mask_extra_fields(value)
            else:
                masked_extra[key] = value

        return masked_extra

    def _replace_value(self, match: str) -> str:
        """Replace matched value with mask."""
        if "=" in match:
            key_part = match.split("=", 1)[0]
            return f"{key_part}={self.config.mask_replacement}"
        key_part = match.split(":", 1)[0]
        return f'{key_part}: "{self.config.mask_replacement}"'


class ExportJSONFormatter(logging.Formatter):
    """JSON formatter for structured export logs."""

    def __init__(
        self,
        sensitive_data_config: SensitiveDataConfig | None = None,
        include_extra: bool = True,
        sort_keys: bool = True,
    ):
        super().__init__()
        self.include_extra = include_extra
        self.sort_keys = sort_keys
        self.masker = SensitiveDataMasker(sensitive_data_config or SensitiveDataConfig())

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": self.masker.mask_message(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if getattr(record, "trace_id", None):
            log_entry["trace_id"] = record.trace_id
        if getattr(record, "span_id", None):
            log_entry["span_id"] = record.span_id

        export_fields = {
            name: getattr(record, name)
            for name in EXPORT_FIELDS
            if getattr(record, name, None) is not None
        }
        if export_fields:
            log_entry["export"] = export_fields

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": (
                    self.masker.mask_message(str(record.exc_info[1]))
                    if record.exc_info[1]
                    else None
                ),
                "traceback": self.formatException(record.exc_info),
            }

        if self.include_extra:
            extra = {
                key: value
                for key, value in record.__dict__.items()
                if key not in STANDARD_FIELDS and not key.startswith("_")
            }
            if extra:
                log_entry["extra"] = self.masker.mask_extra_fields(extra)

        return json.dumps(log_entry, sort_keys=self.sort_keys, default=str)


def setup_structured_logging(
    level: str = "INFO",
    format_type: str = "json",
    sensitive_data_config: SensitiveDataConfig | None = None,
    log_file: str | None = None,
) -> None:
    """
    Setup structured logging for the metrics writer.

    Args:
        level: Logging level
        format_type: Formatter type ('json' or 'text')
        sensitive_data_config: Sensitive data masking configuration
        log_file: Optional log file path
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter: ExportJSONFormatter | logging.Formatter
    if format_type == "json":
        formatter = ExportJSONFormatter(sensitive_data_config)
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.setLevel(getattr(logging, level.upper()))
    logging.setLogRecordFactory(ExportLogRecord)

    logging.info("Structured logging configured successfully")
