"""
Configuration Management - Loads writer settings from the environment
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from .exceptions_infrastructure import (
    InvalidConfigurationException,
    MissingConfigurationException,
)
from .monitoring.client import DEFAULT_API_URL
from .monitoring.wire import MonitoredResource
from .monitoring.writer import MAX_POINTS_PER_REQUEST_CEILING

logger = logging.getLogger(__name__)

ENV_PREFIX = "CLOUD_METRICS_"


def _parse_labels(value: str) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` into a dict."""
    labels: dict[str, str] = {}
    for pair in value.split(","):
        pair = pair.strip()
        if not pair:
            continue
        key, sep, label_value = pair.partition("=")
        if not sep or not key.strip():
            raise InvalidConfigurationException(
                f"{ENV_PREFIX}RESOURCE_LABELS", value, f"malformed label pair {pair!r}"
            )
        labels[key.strip()] = label_value.strip()
    return labels


def _parse_number(key: str, raw: str, convert: type) -> int | float:
    try:
        return convert(raw)
    except ValueError as e:
        raise InvalidConfigurationException(key, raw, f"not a valid {convert.__name__}") from e


@dataclass
class WriterConfig:
    """Metrics writer configuration settings"""

    project: str
    max_qps: float = 30.0
    max_points_per_request: int = MAX_POINTS_PER_REQUEST_CEILING
    monitored_resource: MonitoredResource = field(default_factory=MonitoredResource)
    api_url: str = DEFAULT_API_URL
    timeout: float | None = None  # None blocks until the transport completes
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.project:
            raise MissingConfigurationException("project", "writer")
        if self.max_qps <= 0:
            raise InvalidConfigurationException(
                "max_qps", self.max_qps, "must be positive", "writer"
            )
        if not 0 < self.max_points_per_request <= MAX_POINTS_PER_REQUEST_CEILING:
            raise InvalidConfigurationException(
                "max_points_per_request",
                self.max_points_per_request,
                f"must be between 1 and {MAX_POINTS_PER_REQUEST_CEILING}",
                "writer",
            )
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidConfigurationException(
                "timeout", self.timeout, "must be positive when set", "writer"
            )

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "WriterConfig":
        """Load writer config from environment variables"""
        if load_env_file:
            load_dotenv(find_dotenv(usecwd=True))

        project = os.getenv(f"{ENV_PREFIX}PROJECT", "")
        if not project:
            logger.error(f"{ENV_PREFIX}PROJECT is not set")
            raise MissingConfigurationException(f"{ENV_PREFIX}PROJECT")

        timeout_raw = os.getenv(f"{ENV_PREFIX}TIMEOUT")
        return cls(
            project=project,
            max_qps=_parse_number(
                f"{ENV_PREFIX}MAX_QPS", os.getenv(f"{ENV_PREFIX}MAX_QPS", "30"), float
            ),
            max_points_per_request=_parse_number(
                f"{ENV_PREFIX}MAX_POINTS_PER_REQUEST",
                os.getenv(f"{ENV_PREFIX}MAX_POINTS_PER_REQUEST", "200"),
                int,
            ),
            monitored_resource=MonitoredResource(
                type=os.getenv(f"{ENV_PREFIX}RESOURCE_TYPE", "global"),
                labels=_parse_labels(os.getenv(f"{ENV_PREFIX}RESOURCE_LABELS", "")),
            ),
            api_url=os.getenv(f"{ENV_PREFIX}API_URL", DEFAULT_API_URL),
            timeout=(
                _parse_number(f"{ENV_PREFIX}TIMEOUT", timeout_raw, float) if timeout_raw else None
            ),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
        )
