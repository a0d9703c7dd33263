"""A test double for integer metrics that keeps its data inspectable."""

from typing import Dict, List

from nodeprobe.metrics.metric import Aggregation, Int64MetricRepresentation


class FakeInt64Metric:
    """Aggregates integer measurements in memory, one entry per label set."""

    def __init__(self, name: str, aggregation, tag_names) -> None:
        if not name:
            raise ValueError("metric name must not be empty")
        self.name = name
        self.aggregation = aggregation
        self._allowed_tags = set(tag_names or [])
        self._metrics: List[Int64MetricRepresentation] = []

    def record(self, tags: Dict[str, str], measurement: int) -> None:
        """Record a measurement, with ``tags`` as metric labels."""
        labels = {}
        for tag_name, tag_value in (tags or {}).items():
            if tag_name not in self._allowed_tags:
                raise ValueError(f'tag "{tag_name}" is not allowed')
            labels[tag_name] = tag_value

        metric = next((m for m in self._metrics if m.labels == labels), None)
        if metric is None:
            metric = Int64MetricRepresentation(self.name, labels, 0)
            self._metrics.append(metric)

        if self.aggregation == Aggregation.LAST_VALUE:
            metric.value = measurement
        elif self.aggregation == Aggregation.SUM:
            metric.value += measurement
        else:
            raise ValueError("unsupported aggregation type")

    def list_metrics(self) -> List[Int64MetricRepresentation]:
        """Return a snapshot of the current metrics."""
        return [Int64MetricRepresentation(m.name, dict(m.labels), m.value) for m in self._metrics]