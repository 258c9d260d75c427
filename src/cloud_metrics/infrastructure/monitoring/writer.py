"""
Metrics writer for the Cloud Monitoring v3 API.

Points are validated, encoded into time series entries, and buffered until
``max_points_per_request`` entries are waiting or ``flush`` is called. Each
flush sends the whole buffer in one rate-limited request. Failed requests are
not retried; the batch is dropped and the error raised to the caller.
"""

import logging
import threading
from collections import deque
from typing import Any

from ...domain.entities.metric import Metric, MetricPoint
from ...domain.interfaces.metric_writer import MetricWriter
from ..exceptions_infrastructure import (
    BufferOverflowError,
    InvalidConfigurationException,
    InvalidMetricPointError,
    MonitoringApiError,
    TimeSeriesExportError,
)
from ..rate_limiting.algorithms import TokenBucketRateLimit
from .client import MonitoringClient
from .descriptors import ENCODED_METRIC_KINDS, ENCODED_VALUE_TYPES, DescriptorRegistry
from .metrics import ExportMetrics
from .wire import MonitoredResource, Point, RemoteDescriptor, TimeSeries, TypedValue

logger = logging.getLogger(__name__)

# The API rejects timeSeries.create requests carrying more entries than this
MAX_POINTS_PER_REQUEST_CEILING = 200

PROJECT_PREFIX = "projects/"


class CloudMonitoringWriter(MetricWriter):
    """
    Buffering writer for one monitoring backend.

    The buffer is guarded by a lock. The append that fills it snapshots and
    clears it in the same critical section, so the buffer never holds more
    than ``max_points_per_request`` entries however writers interleave.
    Writes arriving while a batch is on the network go into the fresh
    buffer, not the batch in flight.
    """

    def __init__(
        self,
        client: MonitoringClient,
        project: str,
        monitored_resource: MonitoredResource,
        rate_limiter: TokenBucketRateLimit,
        export_metrics: ExportMetrics,
        max_points_per_request: int = MAX_POINTS_PER_REQUEST_CEILING,
    ) -> None:
        if not project:
            raise InvalidConfigurationException("project", project, "must not be empty")
        if not 0 < max_points_per_request <= MAX_POINTS_PER_REQUEST_CEILING:
            raise InvalidConfigurationException(
                "max_points_per_request",
                max_points_per_request,
                f"must be between 1 and {MAX_POINTS_PER_REQUEST_CEILING}",
            )

        self.client = client
        self.project = PROJECT_PREFIX + project
        self.monitored_resource = monitored_resource
        self.rate_limiter = rate_limiter
        self.export_metrics = export_metrics
        self.max_points_per_request = max_points_per_request
        self.registry = DescriptorRegistry(client, self.project, rate_limiter)

        self._buffer: deque[TimeSeries] = deque()
        self._lock = threading.Lock()
        self._flush_count = 0
        self._flushed_points = 0
        self._error_count = 0

    def write(self, point: MetricPoint) -> None:
        """
        Encode and buffer a point, flushing if the buffer is now full.

        Raises:
            InvalidMetricPointError: If the point does not match its metric.
            DescriptorRegistrationError: If the metric cannot be registered.
            TimeSeriesExportError: If the flush triggered by this write fails.
        """
        self._validate(point)
        metric = point.metric

        descriptor = self.registry.register(metric)
        if len(point.label_values) != len(descriptor.labels):
            raise InvalidMetricPointError(
                metric.name,
                "label value count does not match the registered descriptor's label count",
                expected=len(descriptor.labels),
                actual=len(point.label_values),
            )

        entry = self._encode(point, descriptor)

        batch: list[TimeSeries] = []
        with self._lock:
            self._buffer.append(entry)
            if len(self._buffer) >= self.max_points_per_request:
                batch = self._drain()

        logger.debug(f"Enqueued metric {descriptor.type} for writing")
        if batch:
            self._send(batch)

    def flush(self) -> int:
        """
        Send all buffered points in one request. This call blocks.

        Returns:
            Number of points sent.

        Raises:
            BufferOverflowError: If more points are buffered than one request allows.
            TimeSeriesExportError: If the request fails. The batch is dropped.
        """
        with self._lock:
            batch = self._drain()

        if not batch:
            logger.debug("Nothing to flush")
            return 0
        return self._send(batch)

    def _drain(self) -> list[TimeSeries]:
        """Snapshot and clear the buffer. Caller must hold ``self._lock``."""
        if len(self._buffer) > MAX_POINTS_PER_REQUEST_CEILING:
            raise BufferOverflowError(len(self._buffer), MAX_POINTS_PER_REQUEST_CEILING)

        batch = list(self._buffer)
        self._buffer.clear()
        return batch

    def _send(self, batch: list[TimeSeries]) -> int:
        """Send one drained batch in a single rate-limited request."""
        self.rate_limiter.acquire()
        try:
            self.client.create_time_series(self.project, batch)
        except MonitoringApiError as e:
            with self._lock:
                self._error_count += 1
            logger.error(
                f"Dropped {len(batch)} points after failed export: {e}",
                extra={"project": self.project, "point_count": len(batch)},
            )
            raise TimeSeriesExportError(len(batch), str(e)) from e

        for entry in batch:
            self.export_metrics.record_pushed(entry.metric_kind, entry.value_type)

        with self._lock:
            self._flush_count += 1
            self._flushed_points += len(batch)
        logger.info(
            f"Flushed {len(batch)} metrics to Cloud Monitoring",
            extra={"project": self.project, "point_count": len(batch)},
        )
        return len(batch)

    def get_stats(self) -> dict[str, Any]:
        """Get writer statistics."""
        with self._lock:
            return {
                "project": self.project,
                "buffered_points": len(self._buffer),
                "registered_descriptors": len(self.registry),
                "flush_count": self._flush_count,
                "flushed_points": self._flushed_points,
                "error_count": self._error_count,
            }

    def _validate(self, point: MetricPoint) -> None:
        """Reject a point before it has any side effect."""
        metric: Metric = point.metric

        if metric.kind not in ENCODED_METRIC_KINDS:
            raise InvalidMetricPointError(
                metric.name,
                "unrecognized metric kind, must be one of "
                + ", ".join(kind.name for kind in ENCODED_METRIC_KINDS),
            )
        if metric.value_type not in ENCODED_VALUE_TYPES:
            raise InvalidMetricPointError(
                metric.name,
                "unrecognized metric value type, must be one of "
                + ", ".join(value_type.name for value_type in ENCODED_VALUE_TYPES),
            )
        if not metric.value_type.accepts(point.value):
            raise InvalidMetricPointError(
                metric.name,
                f"value {point.value!r} is not a valid {metric.value_type.name}",
            )
        if len(point.label_values) != len(metric.labels):
            raise InvalidMetricPointError(
                metric.name,
                "label value count does not match the metric's label count",
                expected=len(metric.labels),
                actual=len(point.label_values),
            )
        if not all(isinstance(value, str) for value in point.label_values):
            raise InvalidMetricPointError(metric.name, "label values must be strings")

    def _encode(self, point: MetricPoint, descriptor: RemoteDescriptor) -> TimeSeries:
        """Build the time series entry for a validated point."""
        labels = {
            label.key: value
            for label, value in zip(descriptor.labels, point.label_values, strict=True)
        }
        return TimeSeries(
            metric_type=descriptor.type,
            labels=labels,
            point=Point(
                end_time=point.timestamp,
                value=TypedValue.encode(point.metric.value_type, point.value),
            ),
            resource=self.monitored_resource,
            metric_kind=descriptor.metric_kind,
            value_type=descriptor.value_type,
        )
