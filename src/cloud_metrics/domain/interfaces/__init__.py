"""Domain interfaces implemented by the infrastructure layer."""

from .metric_writer import MetricWriter

__all__ = ["MetricWriter"]
