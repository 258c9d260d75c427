"""
Wire model for the Cloud Monitoring v3 API.

Dataclasses mirroring the JSON resources the writer sends and receives:
metric descriptors, typed values, points, and time series. Each type
converts to the API's camelCase JSON with ``to_dict`` and back with
``from_dict``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ...domain.entities.metric import ValueType

# JSON field holding the value for each value type
VALUE_FIELDS: dict[ValueType, str] = {
    ValueType.INT64: "int64Value",
    ValueType.FLOAT64: "doubleValue",
    ValueType.BOOL: "boolValue",
    ValueType.STRING: "stringValue",
}


def format_timestamp(timestamp: datetime) -> str:
    """Format an instant as RFC 3339 UTC with millisecond precision."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp produced by ``format_timestamp``."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class RemoteLabelDescriptor:
    """Label definition as registered with the backend."""

    key: str
    description: str = ""
    value_type: str = "STRING"

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "description": self.description, "valueType": self.value_type}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteLabelDescriptor":
        return cls(
            key=data["key"],
            description=data.get("description", ""),
            value_type=data.get("valueType", "STRING"),
        )


@dataclass(frozen=True)
class RemoteDescriptor:
    """A metric descriptor as registered with the backend."""

    type: str
    description: str
    display_name: str
    value_type: str
    metric_kind: str
    labels: tuple[RemoteLabelDescriptor, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "displayName": self.display_name,
            "valueType": self.value_type,
            "metricKind": self.metric_kind,
            "labels": [label.to_dict() for label in self.labels],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RemoteDescriptor":
        return cls(
            type=data["type"],
            description=data.get("description", ""),
            display_name=data.get("displayName", ""),
            value_type=data["valueType"],
            metric_kind=data["metricKind"],
            labels=tuple(
                RemoteLabelDescriptor.from_dict(label) for label in data.get("labels", [])
            ),
        )


@dataclass(frozen=True)
class TypedValue:
    """
    A point value with exactly one of its four slots set.

    ``value_type`` names the slot; ``value`` holds the Python value.
    """

    value_type: ValueType
    value: bool | int | float | str

    @classmethod
    def encode(cls, value_type: ValueType, value: Any) -> "TypedValue":
        """Encode a validated Python value for the given type."""
        if value_type is ValueType.FLOAT64:
            value = float(value)
        return cls(value_type, value)

    def to_dict(self) -> dict[str, Any]:
        # The API represents 64-bit integers as decimal strings in JSON
        value = str(self.value) if self.value_type is ValueType.INT64 else self.value
        return {VALUE_FIELDS[self.value_type]: value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TypedValue":
        present = [value_type for value_type, key in VALUE_FIELDS.items() if key in data]
        if len(present) != 1:
            raise ValueError(f"TypedValue must set exactly one value field, got {sorted(data)}")

        value_type = present[0]
        value = data[VALUE_FIELDS[value_type]]
        if value_type is ValueType.INT64:
            value = int(value)
        elif value_type is ValueType.FLOAT64:
            value = float(value)
        return cls(value_type, value)


@dataclass(frozen=True)
class Point:
    """A typed value at the end of its time interval."""

    end_time: datetime
    value: TypedValue

    def to_dict(self) -> dict[str, Any]:
        return {
            "interval": {"endTime": format_timestamp(self.end_time)},
            "value": self.value.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        return cls(
            end_time=parse_timestamp(data["interval"]["endTime"]),
            value=TypedValue.from_dict(data["value"]),
        )


@dataclass(frozen=True)
class MonitoredResource:
    """The monitored resource a time series is attributed to."""

    type: str = "global"
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "labels": dict(self.labels)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MonitoredResource":
        return cls(type=data["type"], labels=dict(data.get("labels", {})))


@dataclass(frozen=True)
class TimeSeries:
    """
    One batch entry: a single point with its metric, labels, and resource.

    ``metric_kind`` and ``value_type`` are copied from the descriptor for the
    writer's own accounting and are not sent to the API.
    """

    metric_type: str
    labels: dict[str, str]
    point: Point
    resource: MonitoredResource
    metric_kind: str
    value_type: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": {"type": self.metric_type, "labels": dict(self.labels)},
            "points": [self.point.to_dict()],
            "resource": self.resource.to_dict(),
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], metric_kind: str = "", value_type: str = ""
    ) -> "TimeSeries":
        points = data["points"]
        if len(points) != 1:
            raise ValueError(f"Expected exactly one point per time series, got {len(points)}")

        return cls(
            metric_type=data["metric"]["type"],
            labels=dict(data["metric"].get("labels", {})),
            point=Point.from_dict(points[0]),
            resource=MonitoredResource.from_dict(data["resource"]),
            metric_kind=metric_kind,
            value_type=value_type,
        )


def create_time_series_request(time_series: list[TimeSeries]) -> dict[str, Any]:
    """Build the body of a timeSeries.create call."""
    return {"timeSeries": [entry.to_dict() for entry in time_series]}
