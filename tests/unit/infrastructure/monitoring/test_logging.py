"""
Unit tests for structured export logging.
"""

import json
import logging
import sys

import pytest
from opentelemetry.sdk.trace import TracerProvider

from cloud_metrics.infrastructure.monitoring.logging import (
    ExportJSONFormatter,
    ExportLogRecord,
    SensitiveDataConfig,
    SensitiveDataMasker,
    setup_structured_logging,
)


def _record(message="test message", level=logging.INFO, exc_info=None, **extra):
    record = ExportLogRecord(
        "cloud_metrics.test", level, __file__, 10, message, None, exc_info, func="flush"
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def configured_root():
    """Run setup_structured_logging and undo its global changes afterwards."""
    root = logging.getLogger()
    level = root.level
    factory = logging.getLogRecordFactory()
    installed = []

    def _configure(**kwargs):
        setup_structured_logging(**kwargs)
        installed.extend(root.handlers)
        return root

    yield _configure

    for handler in installed:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)
    logging.setLogRecordFactory(factory)


class TestSensitiveDataMasker:
    """Test masking of credentials."""

    @pytest.fixture
    def masker(self):
        return SensitiveDataMasker(SensitiveDataConfig())

    def test_bearer_token_masked(self, masker):
        masked = masker.mask_message("request failed: Authorization header Bearer ya29.abc-DEF_123")

        assert "ya29" not in masked
        assert "Bearer ***MASKED***" in masked

    def test_api_key_query_parameter_masked(self, masker):
        masked = masker.mask_message("POST /v3/projects/p/timeSeries?api_key=AIzaSecret failed")

        assert "AIzaSecret" not in masked
        assert "api_key=***MASKED***" in masked

    def test_plain_message_unchanged(self, masker):
        message = "Flushed 12 metrics to Cloud Monitoring"

        assert masker.mask_message(message) == message

    def test_extra_fields(self, masker):
        masked = masker.mask_extra_fields(
            {
                "access_token": "secret-token",
                "password": "hunter2",
                "nested": {"api_key": "k", "region": "us"},
                "attempt": 2,
            }
        )

        assert masked == {
            "access_token": "***MASKED***",
            "nested": {"api_key": "***MASKED***", "region": "us"},
            "attempt": 2,
        }


class TestExportJSONFormatter:
    """Test JSON log output."""

    def test_basic_fields(self):
        output = json.loads(ExportJSONFormatter().format(_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "cloud_metrics.test"
        assert output["message"] == "test message"
        assert output["function"] == "flush"
        assert output["line"] == 10
        assert output["timestamp"].endswith("Z")
        assert "trace_id" not in output
        assert "export" not in output

    def test_export_fields_section(self):
        record = _record(project="projects/p", point_count=3)

        output = json.loads(ExportJSONFormatter().format(record))

        assert output["export"] == {"project": "projects/p", "point_count": 3}
        assert "extra" not in output

    def test_extra_fields_are_masked(self):
        record = _record(refresh_token="abc", password="hunter2", attempt=1)

        output = json.loads(ExportJSONFormatter().format(record))

        assert output["extra"] == {"refresh_token": "***MASKED***", "attempt": 1}

    def test_extra_can_be_disabled(self):
        record = _record(attempt=1)

        output = json.loads(ExportJSONFormatter(include_extra=False).format(record))

        assert "extra" not in output

    def test_exception_section(self):
        try:
            raise RuntimeError("token expired: Bearer abc.def")
        except RuntimeError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        output = json.loads(ExportJSONFormatter().format(record))

        assert output["exception"]["type"] == "RuntimeError"
        assert "abc.def" not in output["exception"]["message"]
        assert "Traceback" in output["exception"]["traceback"]

    def test_trace_context_from_active_span(self):
        tracer = TracerProvider().get_tracer(__name__)

        with tracer.start_as_current_span("flush") as span:
            record = _record()
            span_context = span.get_span_context()

        output = json.loads(ExportJSONFormatter().format(record))

        assert output["trace_id"] == format(span_context.trace_id, "032x")
        assert output["span_id"] == format(span_context.span_id, "016x")


class TestSetupStructuredLogging:
    """Test logging setup."""

    def test_json_handler_installed(self, configured_root):
        root = configured_root(level="DEBUG")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ExportJSONFormatter)
        assert logging.getLogRecordFactory() is ExportLogRecord

    def test_text_format(self, configured_root):
        root = configured_root(format_type="text")

        assert not isinstance(root.handlers[0].formatter, ExportJSONFormatter)

    def test_log_file(self, configured_root, tmp_path):
        log_file = tmp_path / "writer.log"

        root = configured_root(log_file=str(log_file))
        logging.getLogger("cloud_metrics.test").info(
            "Flushed 1 metrics", extra={"project": "projects/p"}
        )
        for handler in root.handlers:
            handler.flush()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert lines[-1]["message"] == "Flushed 1 metrics"
        assert lines[-1]["export"] == {"project": "projects/p"}
