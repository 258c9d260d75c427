"""
Metric writer interface.

The domain defines what it means to export a point; infrastructure decides
where the point goes and how it is batched.
"""

from abc import ABC, abstractmethod

from ..entities.metric import MetricPoint


class MetricWriter(ABC):
    """Destination for metric points. Implementations may buffer writes."""

    @abstractmethod
    def write(self, point: MetricPoint) -> None:
        """Write a point. The point may be buffered until the next flush."""
        pass

    @abstractmethod
    def flush(self) -> int:
        """Send all buffered points and return how many were sent."""
        pass
