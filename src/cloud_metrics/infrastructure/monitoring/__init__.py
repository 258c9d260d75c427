"""
Infrastructure Monitoring Module

Export of metric points to the Cloud Monitoring v3 API:
- Wire model and JSON encoding
- HTTP API client
- Descriptor registration with a per-metric cache
- Buffered, rate-limited batch writer
- Counters describing the writer's own activity
- Structured logging
"""

from .client import HttpMonitoringClient, MonitoringClient
from .descriptors import DescriptorRegistry, create_label_descriptors, create_metric_descriptor
from .logging import setup_structured_logging
from .metrics import ExportMetrics
from .wire import MonitoredResource, RemoteDescriptor, TimeSeries, TypedValue
from .writer import MAX_POINTS_PER_REQUEST_CEILING, CloudMonitoringWriter

__all__ = [
    "MonitoringClient",
    "HttpMonitoringClient",
    "DescriptorRegistry",
    "create_label_descriptors",
    "create_metric_descriptor",
    "setup_structured_logging",
    "ExportMetrics",
    "MonitoredResource",
    "RemoteDescriptor",
    "TimeSeries",
    "TypedValue",
    "CloudMonitoringWriter",
    "MAX_POINTS_PER_REQUEST_CEILING",
]
