"""
Monitoring API client.

Defines the two remote operations the writer depends on and an HTTP
implementation over httpx. Credentials are the caller's concern: pass an
``httpx.Client`` that already authenticates its requests, or static headers.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..exceptions_infrastructure import MonitoringApiError
from .wire import RemoteDescriptor, TimeSeries, create_time_series_request

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://monitoring.googleapis.com/v3"


class MonitoringClient(ABC):
    """Synchronous client for the monitoring backend."""

    @abstractmethod
    def create_metric_descriptor(
        self, project: str, descriptor: RemoteDescriptor
    ) -> RemoteDescriptor:
        """Register a metric descriptor and return the backend's copy of it."""
        pass

    @abstractmethod
    def create_time_series(self, project: str, time_series: list[TimeSeries]) -> None:
        """Write a batch of time series in one request."""
        pass


class HttpMonitoringClient(MonitoringClient):
    """Monitoring client speaking the Cloud Monitoring v3 REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = headers or {}
        self.timeout = timeout
        self._client = http_client or httpx.Client(timeout=timeout)
        self._owns_client = http_client is None

    def create_metric_descriptor(
        self, project: str, descriptor: RemoteDescriptor
    ) -> RemoteDescriptor:
        data = self._post(
            "metricDescriptors.create", project, "metricDescriptors", descriptor.to_dict()
        )
        try:
            return RemoteDescriptor.from_dict(data)
        except (KeyError, TypeError) as e:
            raise MonitoringApiError(
                "metricDescriptors.create", f"Malformed descriptor in response: {e}"
            ) from e

    def create_time_series(self, project: str, time_series: list[TimeSeries]) -> None:
        self._post(
            "timeSeries.create", project, "timeSeries", create_time_series_request(time_series)
        )

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpMonitoringClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _post(self, operation: str, project: str, collection: str, body: dict[str, Any]) -> Any:
        """POST a JSON body to ``{base_url}/{project}/{collection}`` and return the JSON reply."""
        url = f"{self.base_url}/{project}/{collection}"
        try:
            content = json.dumps(body, allow_nan=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Monitoring API {operation} body is not valid JSON: {e}")
            raise MonitoringApiError(operation, f"Request body is not valid JSON: {e}") from e

        try:
            response = self._client.post(
                url,
                content=content,
                headers={"Content-Type": "application/json", **self.headers},
            )
        except httpx.HTTPError as e:
            logger.error(f"Monitoring API {operation} request failed: {e}")
            raise MonitoringApiError(operation, str(e)) from e

        if not response.is_success:
            logger.error(f"Monitoring API {operation} returned HTTP {response.status_code}")
            raise MonitoringApiError(operation, response.text, status_code=response.status_code)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise MonitoringApiError(operation, f"Invalid JSON in response: {e}") from e
