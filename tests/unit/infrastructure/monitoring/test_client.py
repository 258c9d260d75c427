"""
Unit tests for the HTTP monitoring client.

Requests are served by ``httpx.MockTransport`` so no network is used.
"""

import json
import math
from dataclasses import replace
from datetime import UTC, datetime

import httpx
import pytest

from cloud_metrics.domain.entities.metric import ValueType
from cloud_metrics.infrastructure.exceptions_infrastructure import MonitoringApiError
from cloud_metrics.infrastructure.monitoring.client import DEFAULT_API_URL, HttpMonitoringClient
from cloud_metrics.infrastructure.monitoring.wire import (
    MonitoredResource,
    Point,
    RemoteDescriptor,
    RemoteLabelDescriptor,
    TimeSeries,
    TypedValue,
)

DESCRIPTOR = RemoteDescriptor(
    type="custom.googleapis.com/jobs/duration",
    description="Job duration",
    display_name="Duration",
    value_type="DOUBLE",
    metric_kind="GAUGE",
    labels=(RemoteLabelDescriptor("job", "Job name"),),
)


def _client(handler, **kwargs) -> HttpMonitoringClient:
    return HttpMonitoringClient(
        http_client=httpx.Client(transport=httpx.MockTransport(handler)), **kwargs
    )


def _entry() -> TimeSeries:
    return TimeSeries(
        metric_type=DESCRIPTOR.type,
        labels={"job": "nightly"},
        point=Point(datetime(2024, 1, 2, tzinfo=UTC), TypedValue(ValueType.FLOAT64, 2.5)),
        resource=MonitoredResource(),
        metric_kind="GAUGE",
        value_type="DOUBLE",
    )


class TestCreateMetricDescriptor:
    """Test metricDescriptors.create calls."""

    def test_posts_descriptor_and_parses_reply(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            reply = {**json.loads(request.content), "name": "projects/p/metricDescriptors/x"}
            return httpx.Response(200, json=reply)

        descriptor = _client(handler).create_metric_descriptor("projects/p", DESCRIPTOR)

        assert descriptor == DESCRIPTOR
        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == f"{DEFAULT_API_URL}/projects/p/metricDescriptors"
        assert json.loads(requests[0].content) == DESCRIPTOR.to_dict()

    def test_custom_base_url_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=DESCRIPTOR.to_dict())

        client = _client(
            handler,
            base_url="https://monitoring.example.com/v3/",
            headers={"Authorization": "Bearer token"},
        )
        client.create_metric_descriptor("projects/p", DESCRIPTOR)

        assert seen["url"] == "https://monitoring.example.com/v3/projects/p/metricDescriptors"
        assert seen["auth"] == "Bearer token"

    def test_http_error_raises(self):
        client = _client(lambda request: httpx.Response(403, text="permission denied"))

        with pytest.raises(MonitoringApiError) as exc_info:
            client.create_metric_descriptor("projects/p", DESCRIPTOR)

        assert exc_info.value.status_code == 403
        assert exc_info.value.operation == "metricDescriptors.create"
        assert "permission denied" in str(exc_info.value)

    def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(MonitoringApiError) as exc_info:
            _client(handler).create_metric_descriptor("projects/p", DESCRIPTOR)

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_malformed_reply_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(MonitoringApiError):
            client.create_metric_descriptor("projects/p", DESCRIPTOR)


class TestCreateTimeSeries:
    """Test timeSeries.create calls."""

    def test_posts_batch(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={})

        _client(handler).create_time_series("projects/p", [_entry(), _entry()])

        assert str(requests[0].url) == f"{DEFAULT_API_URL}/projects/p/timeSeries"
        body = json.loads(requests[0].content)
        assert body == {"timeSeries": [_entry().to_dict(), _entry().to_dict()]}

    def test_empty_reply_body_accepted(self):
        _client(lambda request: httpx.Response(200)).create_time_series("projects/p", [_entry()])

    @pytest.mark.parametrize("value", [math.inf, math.nan])
    def test_non_finite_value_raises_before_sending(self, value):
        requests = []
        client = _client(lambda request: requests.append(request) or httpx.Response(200))
        point = Point(datetime(2024, 1, 2, tzinfo=UTC), TypedValue(ValueType.FLOAT64, value))
        entry = replace(_entry(), point=point)

        with pytest.raises(MonitoringApiError) as exc_info:
            client.create_time_series("projects/p", [_entry(), entry])

        assert exc_info.value.operation == "timeSeries.create"
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert requests == []

    def test_server_error_raises(self):
        client = _client(lambda request: httpx.Response(500, text="internal"))

        with pytest.raises(MonitoringApiError) as exc_info:
            client.create_time_series("projects/p", [_entry()])

        assert exc_info.value.status_code == 500
        assert exc_info.value.operation == "timeSeries.create"


class TestClientLifecycle:
    """Test ownership of the underlying httpx client."""

    def test_injected_client_is_not_closed(self):
        http_client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200)))

        with HttpMonitoringClient(http_client=http_client):
            pass

        assert not http_client.is_closed

    def test_owned_client_is_closed(self):
        client = HttpMonitoringClient(timeout=5.0)
        client.close()

        assert client._client.is_closed
