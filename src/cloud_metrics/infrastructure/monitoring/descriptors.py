"""
Metric descriptor registration.

A metric's metadata (name, kind, value type, label definitions) must be
registered with the backend before points for it can be written. The
registry creates each descriptor on first use and caches it for the
lifetime of the registry, keyed by metric instance.
"""

import logging
import threading
from collections.abc import Iterable

from ...domain.entities.metric import Kind, LabelDescriptor, Metric, ValueType
from ..exceptions_infrastructure import DescriptorRegistrationError, MonitoringApiError
from ..rate_limiting.algorithms import TokenBucketRateLimit
from .client import MonitoringClient
from .wire import RemoteDescriptor, RemoteLabelDescriptor

logger = logging.getLogger(__name__)

METRIC_DOMAIN = "custom.googleapis.com"
LABEL_VALUE_TYPE = "STRING"

ENCODED_METRIC_KINDS: dict[Kind, str] = {
    Kind.GAUGE: "GAUGE",
    Kind.CUMULATIVE: "CUMULATIVE",
}

ENCODED_VALUE_TYPES: dict[ValueType, str] = {
    ValueType.INT64: "INT64",
    ValueType.FLOAT64: "DOUBLE",
    ValueType.BOOL: "BOOL",
    ValueType.STRING: "STRING",
}


def metric_type_name(metric: Metric) -> str:
    """Fully qualified type of a metric: the domain, a slash, then the metric name verbatim."""
    return f"{METRIC_DOMAIN}/{metric.name}"


def create_label_descriptors(
    labels: Iterable[LabelDescriptor],
) -> tuple[RemoteLabelDescriptor, ...]:
    """Map local labels to remote ones. Every label is sent as a string."""
    return tuple(
        RemoteLabelDescriptor(
            key=label.name, description=label.description, value_type=LABEL_VALUE_TYPE
        )
        for label in labels
    )


def create_metric_descriptor(metric: Metric) -> RemoteDescriptor:
    """Build the descriptor to register for a metric."""
    if metric.kind not in ENCODED_METRIC_KINDS:
        raise ValueError(f"Unrecognized metric kind: {metric.kind}")
    if metric.value_type not in ENCODED_VALUE_TYPES:
        raise ValueError(f"Unrecognized metric value type: {metric.value_type}")

    return RemoteDescriptor(
        type=metric_type_name(metric),
        description=metric.description,
        display_name=metric.value_display_name,
        value_type=ENCODED_VALUE_TYPES[metric.value_type],
        metric_kind=ENCODED_METRIC_KINDS[metric.kind],
        labels=create_label_descriptors(metric.labels),
    )


class DescriptorRegistry:
    """
    Lazily registers metric descriptors and caches the backend's replies.

    Cache lookups take a short registry lock. A first registration holds a
    lock of its own for that metric while it waits for a permit and the API,
    so concurrent first writes of one metric issue one create call and
    writes of already registered metrics are not held up.
    """

    def __init__(
        self,
        client: MonitoringClient,
        project: str,
        rate_limiter: TokenBucketRateLimit,
    ) -> None:
        self.client = client
        self.project = project
        self.rate_limiter = rate_limiter
        self._descriptors: dict[Metric, RemoteDescriptor] = {}
        self._pending: dict[Metric, threading.Lock] = {}
        self._lock = threading.Lock()

    def register(self, metric: Metric) -> RemoteDescriptor:
        """
        Return the registered descriptor for a metric, creating it on first use.

        Raises:
            DescriptorRegistrationError: If the backend rejects the descriptor.
        """
        with self._lock:
            cached = self._descriptors.get(metric)
            if cached is not None:
                logger.debug(f"Fetched existing metric descriptor {cached.type}")
                return cached
            registration_lock = self._pending.setdefault(metric, threading.Lock())

        with registration_lock:
            # Another thread may have finished registering while this one waited
            with self._lock:
                cached = self._descriptors.get(metric)
            if cached is not None:
                return cached

            try:
                descriptor = self._create(metric)
            finally:
                with self._lock:
                    self._pending.pop(metric, None)
            return descriptor

    def _create(self, metric: Metric) -> RemoteDescriptor:
        descriptor = create_metric_descriptor(metric)

        self.rate_limiter.acquire()
        try:
            descriptor = self.client.create_metric_descriptor(self.project, descriptor)
        except MonitoringApiError as e:
            raise DescriptorRegistrationError(descriptor.type, str(e)) from e

        logger.info(
            f"Registered new metric descriptor {descriptor.type}",
            extra={"metric_type": descriptor.type, "project": self.project},
        )
        with self._lock:
            self._descriptors[metric] = descriptor
        return descriptor

    def is_registered(self, metric: Metric) -> bool:
        with self._lock:
            return metric in self._descriptors

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)
