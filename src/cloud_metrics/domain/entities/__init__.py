"""Domain entities for metric definitions and observations."""

from .metric import Kind, LabelDescriptor, Metric, MetricPoint, ValueType

__all__ = ["Kind", "LabelDescriptor", "Metric", "MetricPoint", "ValueType"]
