"""
Prometheus Metrics Collector

In-process metrics for the relay, exported in the Prometheus text
exposition format (text/plain; version=0.0.4).
"""
import time
import threading
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single sample with its labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    """Shared storage for metrics keyed by label combination."""

    kind = "untyped"

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(labels: Dict[str, str]) -> tuple:
        return tuple(sorted((k, str(v)) for k, v in labels.items()))

    def get(self, **labels: str) -> float:
        """Current value for a label combination (0 if never touched)."""
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Counter(_LabeledMetric):
    """Monotonic counter: deliveries, webhook events, notifications."""

    kind = "counter"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount


class Gauge(_LabeledMetric):
    """Point-in-time value: queue depth, draining flag."""

    kind = "gauge"

    def set(self, value: float, **labels: str) -> None:
        with self._lock:
            self._values[self._key(labels)] = value

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def dec(self, amount: float = 1.0, **labels: str) -> None:
        self.inc(-amount, **labels)


class Histogram:
    """
    Bucketed observations with sum and count.

    Buckets are cumulative, matching the Prometheus `le` convention.
    """

    kind = "histogram"

    # Partner APIs answer in hundreds of ms to tens of seconds
    DEFAULT_BUCKETS = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)

    def __init__(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._series: Dict[tuple, Dict] = {}
        self._lock = threading.Lock()

    def observe(self, value: float, **labels: str) -> None:
        key = _LabeledMetric._key(labels)
        with self._lock:
            series = self._series.setdefault(
                key, {"buckets": [0] * len(self.buckets), "sum": 0.0, "count": 0}
            )
            series["sum"] += value
            series["count"] += 1
            for i, bound in enumerate(self.buckets):
                if value <= bound:
                    series["buckets"][i] += 1

    def count(self, **labels: str) -> int:
        with self._lock:
            series = self._series.get(_LabeledMetric._key(labels))
            return series["count"] if series else 0

    def export_lines(self) -> List[str]:
        lines = []
        with self._lock:
            for key, series in self._series.items():
                base = dict(key)
                for bound, hits in zip(self.buckets, series["buckets"]):
                    lines.append(
                        f"{self.name}_bucket{_format_labels({**base, 'le': str(bound)})} {hits}"
                    )
                lines.append(
                    f"{self.name}_bucket{_format_labels({**base, 'le': '+Inf'})} {series['count']}"
                )
                lines.append(f"{self.name}_sum{_format_labels(base)} {series['sum']}")
                lines.append(f"{self.name}_count{_format_labels(base)} {series['count']}")
        return lines


class Timer:
    """Context manager observing elapsed seconds into a histogram."""

    def __init__(self, histogram: Histogram, **labels: str):
        self.histogram = histogram
        self.labels = labels
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        if self.start_time is not None:
            self.elapsed = time.perf_counter() - self.start_time
            self.histogram.observe(self.elapsed, **self.labels)


def _format_labels(labels: Dict[str, str]) -> str:
    if not labels:
        return ""
    parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
    return "{" + ",".join(parts) + "}"


class MetricsRegistry:
    """Holds every relay metric and renders the Prometheus export."""

    def __init__(self):
        self._metrics: Dict[str, Counter | Gauge | Histogram] = {}
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        # ============================================
        # WEBHOOK METRICS
        # ============================================
        self.webhook_events = self.counter(
            "relay_webhook_events_total",
            "Monday webhook requests by partner and kind",
            ["partner", "kind"]
        )

        # ============================================
        # QUEUE METRICS
        # ============================================
        self.queue_pending = self.gauge(
            "relay_queue_pending",
            "Items waiting in the partner delivery queue",
            ["partner"]
        )

        self.queue_draining = self.gauge(
            "relay_queue_draining",
            "1 while the partner queue is draining",
            ["partner"]
        )

        self.queue_overflow = self.counter(
            "relay_queue_overflow_total",
            "Items rejected or evicted because the queue was full",
            ["partner", "policy"]
        )

        self.deliveries = self.counter(
            "relay_deliveries_total",
            "Queue items handled by outcome (processed, failed, dropped)",
            ["partner", "outcome"]
        )

        self.delivery_duration = self.histogram(
            "relay_delivery_duration_seconds",
            "Duration of one item processor invocation",
            ["partner"]
        )

        # ============================================
        # PARTNER METRICS
        # ============================================
        self.partner_results = self.counter(
            "relay_partner_results_total",
            "Partner API outcomes by status",
            ["partner", "status"]
        )

        self.slack_notifications = self.counter(
            "relay_slack_notifications_total",
            "Slack notifications by outcome",
            ["outcome"]
        )

    def counter(self, name: str, description: str, labels: Optional[List[str]] = None) -> Counter:
        metric = Counter(name, description, labels)
        self._metrics[name] = metric
        return metric

    def gauge(self, name: str, description: str, labels: Optional[List[str]] = None) -> Gauge:
        metric = Gauge(name, description, labels)
        self._metrics[name] = metric
        return metric

    def histogram(
        self,
        name: str,
        description: str,
        labels: Optional[List[str]] = None,
        buckets: Optional[tuple] = None
    ) -> Histogram:
        metric = Histogram(name, description, labels, buckets)
        self._metrics[name] = metric
        return metric

    def export(self) -> str:
        """
        Render all metrics in Prometheus text exposition format.

        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []
        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")
            if isinstance(metric, Histogram):
                lines.extend(metric.export_lines())
            else:
                for sample in metric.collect():
                    lines.append(f"{name}{_format_labels(sample.labels)} {sample.value}")
            lines.append("")
        return "\n".join(lines)

    def reset(self) -> None:
        """Drop all recorded values. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
