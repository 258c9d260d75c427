"""
Metric Entities - Metric definitions and the points observed against them
"""

# Standard library imports
import re
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..exceptions import InvalidMetricDefinitionError

LABEL_NAME_PATTERN = re.compile(r"^\w+$")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Kind(Enum):
    """How successive values of a metric relate to each other"""

    GAUGE = "GAUGE"  # Instantaneous value
    CUMULATIVE = "CUMULATIVE"  # Monotonically non-decreasing accumulator


class ValueType(Enum):
    """Closed set of value types a metric can carry"""

    INT64 = "INT64"
    FLOAT64 = "FLOAT64"
    BOOL = "BOOL"
    STRING = "STRING"

    def accepts(self, value: Any) -> bool:
        """Check whether a Python value is a valid instance of this type."""
        if self is ValueType.BOOL:
            return isinstance(value, bool)
        if self is ValueType.STRING:
            return isinstance(value, str)
        if isinstance(value, bool):
            return False
        if self is ValueType.INT64:
            return isinstance(value, int) and INT64_MIN <= value <= INT64_MAX
        if not isinstance(value, (int, float)):
            return False
        # Rejects NaN and infinities, which JSON cannot carry
        return -sys.float_info.max <= value <= sys.float_info.max


@dataclass(frozen=True)
class LabelDescriptor:
    """Name and human description of one metric label."""

    name: str
    description: str

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidMetricDefinitionError("Label name must not be empty", "name", self.name)
        if not LABEL_NAME_PATTERN.match(self.name):
            raise InvalidMetricDefinitionError(
                f"Label name must match {LABEL_NAME_PATTERN.pattern}: {self.name!r}",
                "name",
                self.name,
            )


@dataclass(frozen=True, eq=False)
class Metric:
    """
    Immutable definition of a named, typed measurement series.

    Equality and hashing are by instance identity: two metrics built with the
    same schema are distinct, and each is registered with the backend on its
    own first write.
    """

    name: str
    description: str
    value_display_name: str
    kind: Kind
    value_type: ValueType
    labels: tuple[LabelDescriptor, ...] = ()

    def __post_init__(self) -> None:
        # Normalise lists passed by callers so the definition stays immutable
        object.__setattr__(self, "labels", tuple(self.labels))

        for field_name in ("name", "description", "value_display_name"):
            if not getattr(self, field_name):
                raise InvalidMetricDefinitionError(
                    f"Metric {field_name} must not be empty", field_name
                )

        label_names = [label.name for label in self.labels]
        duplicates = sorted({name for name in label_names if label_names.count(name) > 1})
        if duplicates:
            raise InvalidMetricDefinitionError(
                f"Duplicate label names in metric {self.name}: {', '.join(duplicates)}",
                "labels",
                duplicates,
            )

    @property
    def label_names(self) -> tuple[str, ...]:
        return tuple(label.name for label in self.labels)

    def __repr__(self) -> str:
        return (
            f"Metric(name={self.name!r}, kind={self.kind.name}, "
            f"value_type={self.value_type.name}, labels={list(self.label_names)})"
        )


@dataclass(frozen=True)
class MetricPoint:
    """
    A single timestamped observation of a metric.

    Label values are positional and correspond to ``metric.labels``. The point
    is not validated on construction; writers validate it before any side
    effect so that a rejected point leaves no trace.
    """

    metric: Metric
    value: Any
    label_values: tuple[str, ...] = field(default_factory=tuple)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_values", tuple(self.label_values))
