"""
Writer assembly.

Wires the rate limiter, API client, self-monitoring counters, and writer
together from a ``WriterConfig``. The caller owns the returned objects'
lifecycle, including the Prometheus registry the counters live in.
"""

import logging

from prometheus_client import CollectorRegistry

from .config import WriterConfig
from .monitoring.client import HttpMonitoringClient, MonitoringClient
from .monitoring.logging import setup_structured_logging
from .monitoring.metrics import ExportMetrics
from .monitoring.writer import CloudMonitoringWriter
from .rate_limiting.algorithms import create_rate_limiter

logger = logging.getLogger(__name__)


def create_writer(
    config: WriterConfig,
    client: MonitoringClient | None = None,
    registry: CollectorRegistry | None = None,
) -> CloudMonitoringWriter:
    """
    Build a writer from configuration.

    Args:
        config: Writer settings
        client: API client; defaults to an HTTP client for ``config.api_url``
        registry: Registry for the writer's own counters; defaults to a new one
    """
    if client is None:
        client = HttpMonitoringClient(base_url=config.api_url, timeout=config.timeout)

    writer = CloudMonitoringWriter(
        client=client,
        project=config.project,
        monitored_resource=config.monitored_resource,
        rate_limiter=create_rate_limiter(config.max_qps),
        export_metrics=ExportMetrics(registry if registry is not None else CollectorRegistry()),
        max_points_per_request=config.max_points_per_request,
    )
    logger.info(
        f"Created metrics writer for {writer.project} "
        f"(max_qps={config.max_qps}, max_points_per_request={config.max_points_per_request})"
    )
    return writer


def create_writer_from_env(
    client: MonitoringClient | None = None,
    registry: CollectorRegistry | None = None,
    log_format: str = "json",
) -> CloudMonitoringWriter:
    """Load settings from the environment, configure logging, and build a writer."""
    config = WriterConfig.from_env()
    setup_structured_logging(level=config.log_level, format_type=log_format)
    return create_writer(config, client=client, registry=registry)
