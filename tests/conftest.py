"""Global pytest configuration and fixtures."""

# Standard library imports
import sys
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import Mock

# Third-party imports
import pytest
from prometheus_client import CollectorRegistry

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Local imports
from cloud_metrics.domain.entities.metric import (
    Kind,
    LabelDescriptor,
    Metric,
    MetricPoint,
    ValueType,
)
from cloud_metrics.infrastructure.monitoring.client import MonitoringClient
from cloud_metrics.infrastructure.monitoring.metrics import ExportMetrics
from cloud_metrics.infrastructure.monitoring.wire import MonitoredResource
from cloud_metrics.infrastructure.monitoring.writer import CloudMonitoringWriter
from cloud_metrics.infrastructure.rate_limiting.algorithms import TokenBucketRateLimit
from cloud_metrics.infrastructure.rate_limiting.config import RateLimitRule

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock whose sleep moves time forward instead of blocking."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(fake_clock: FakeClock) -> TokenBucketRateLimit:
    """Limiter at 1 permit/second driven by the fake clock."""
    return TokenBucketRateLimit(
        RateLimitRule.per_second(1), clock=fake_clock, sleep=fake_clock.sleep
    )


@pytest.fixture
def mock_client() -> Mock:
    """Monitoring client whose descriptor create echoes the request back."""
    client = Mock(spec=MonitoringClient)
    client.create_metric_descriptor.side_effect = lambda project, descriptor: descriptor
    client.create_time_series.return_value = None
    return client


@pytest.fixture
def collector_registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def export_metrics(collector_registry: CollectorRegistry) -> ExportMetrics:
    return ExportMetrics(collector_registry)


@pytest.fixture
def monitored_resource() -> MonitoredResource:
    return MonitoredResource(type="global", labels={"project_id": "test-project"})


@pytest.fixture
def make_writer(mock_client, monitored_resource, rate_limiter, export_metrics):
    """Factory for writers sharing the test collaborators."""

    def _make(max_points_per_request: int = 200) -> CloudMonitoringWriter:
        return CloudMonitoringWriter(
            client=mock_client,
            project="test-project",
            monitored_resource=monitored_resource,
            rate_limiter=rate_limiter,
            export_metrics=export_metrics,
            max_points_per_request=max_points_per_request,
        )

    return _make


@pytest.fixture
def gauge_metric() -> Metric:
    """FLOAT64 gauge with two labels."""
    return Metric(
        name="/queue/latency",
        description="Queue latency",
        value_display_name="Latency",
        kind=Kind.GAUGE,
        value_type=ValueType.FLOAT64,
        labels=(
            LabelDescriptor("queue", "Queue name"),
            LabelDescriptor("region", "Serving region"),
        ),
    )


@pytest.fixture
def counter_metric() -> Metric:
    """INT64 cumulative metric with one label."""
    return Metric(
        name="/requests/count",
        description="Request count",
        value_display_name="Requests",
        kind=Kind.CUMULATIVE,
        value_type=ValueType.INT64,
        labels=(LabelDescriptor("status", "Response status"),),
    )


@pytest.fixture
def make_point():
    def _make(metric: Metric, value, *label_values: str) -> MetricPoint:
        return MetricPoint(
            metric=metric, value=value, label_values=label_values, timestamp=FIXED_TIME
        )

    return _make
