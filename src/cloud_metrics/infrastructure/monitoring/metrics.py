"""
Self-monitoring metrics for the export pipeline.

The writer reports how many points it has pushed through a Prometheus
counter registered in a caller-supplied ``CollectorRegistry``. Whoever
assembles the pipeline owns the registry and decides how it is exposed.
"""

from prometheus_client import CollectorRegistry, Counter

POINTS_PUSHED_METRIC = "cloud_metrics_points_pushed"


class ExportMetrics:
    """Counters describing the writer's own export activity."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry
        self.points_pushed = Counter(
            POINTS_PUSHED_METRIC,
            "Count of points pushed to the Cloud Monitoring API.",
            ["kind", "valueType"],
            registry=registry,
        )

    def record_pushed(self, kind: str, value_type: str, count: int = 1) -> None:
        """Count ``count`` points successfully pushed for a kind and value type."""
        self.points_pushed.labels(kind, value_type).inc(count)

    def get_pushed(self, kind: str, value_type: str) -> float:
        """Current pushed-points total for a kind and value type."""
        value = self.registry.get_sample_value(
            f"{POINTS_PUSHED_METRIC}_total", {"kind": kind, "valueType": value_type}
        )
        return value or 0.0
