"""
Prometheus Metrics Collector

In-process counters, gauges and histograms for the dashboard core.
Generates Prometheus text exposition format (text/plain; version=0.0.4).
"""
from typing import Dict, List, Optional
from dataclasses import dataclass, field


@dataclass
class MetricValue:
    """Single metric value with optional labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)


class _LabelledMetric:
    """Shared storage keyed by a sorted label tuple."""

    kind = "untyped"

    def __init__(self, name: str, description: str, labels: Optional[List[str]] = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._values: Dict[tuple, float] = {}

    @staticmethod
    def _label_key(labels: Dict[str, str]) -> tuple:
        return tuple(sorted(labels.items()))

    def value(self, **labels: str) -> float:
        """Current value for a label set (0 when never touched)."""
        return self._values.get(self._label_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Counter(_LabelledMetric):
    """Cumulative metric that only goes up."""

    kind = "counter"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counters can only increase")
        key = self._label_key(labels)
        self._values[key] = self._values.get(key, 0.0) + amount


class Gauge(_LabelledMetric):
    """Metric that can go up and down."""

    kind = "gauge"

    def set(self, value: float, **labels: str) -> None:
        self._values[self._label_key(labels)] = value


class Histogram:
    """
    Samples observations and counts them in cumulative buckets.
    Used for backend round-trip latency.
    """

    kind = "histogram"
    DEFAULT_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

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
        self.buckets = buckets or self.DEFAULT_BUCKETS
        self._values: Dict[tuple, Dict] = {}

    def observe(self, value: float, **labels: str) -> None:
        key = tuple(sorted(labels.items()))
        data = self._values.setdefault(
            key, {"buckets": {b: 0 for b in self.buckets}, "sum": 0.0, "count": 0}
        )
        data["sum"] += value
        data["count"] += 1
        for bucket in self.buckets:
            if value <= bucket:
                data["buckets"][bucket] += 1

    def collect(self) -> List[MetricValue]:
        result = []
        for key, data in self._values.items():
            base = dict(key)
            for bucket in sorted(self.buckets):
                result.append(MetricValue(data["buckets"][bucket], {**base, "le": str(bucket)}))
            result.append(MetricValue(data["count"], {**base, "le": "+Inf"}))
            result.append(MetricValue(data["sum"], {**base, "_metric": "sum"}))
            result.append(MetricValue(data["count"], {**base, "_metric": "count"}))
        return result


class MetricsRegistry:
    """
    Central registry for all dashboard metrics.

    Provides Prometheus text format export.
    """

    def __init__(self):
        self._metrics: Dict[str, Counter | Gauge | Histogram] = {}
        self._setup_metrics()

    def _setup_metrics(self) -> None:
        """Initialize all application metrics."""

        # ============================================
        # OUTCOME LOGGING
        # ============================================
        self.outcomes_logged = self._register(Counter(
            "callplan_outcomes_logged_total",
            "Call outcomes confirmed by the backend",
            ["outcome", "context"]
        ))

        self.outcome_failures = self._register(Counter(
            "callplan_outcome_failures_total",
            "Outcome logging attempts that failed",
            ["context"]
        ))

        # ============================================
        # REMINDERS
        # ============================================
        self.reminders_created = self._register(Counter(
            "callplan_reminders_created_total",
            "Reminders created through the backend"
        ))

        # ============================================
        # POLLING & QUEUE
        # ============================================
        self.poll_failures = self._register(Counter(
            "callplan_poll_failures_total",
            "Background poll iterations that failed",
            ["poller"]
        ))

        self.queue_remaining = self._register(Gauge(
            "callplan_queue_remaining",
            "Uncalled contacts left in today's plan"
        ))

        self.service_latency = self._register(Histogram(
            "callplan_service_latency_seconds",
            "Backend call round-trip time",
            ["operation"]
        ))

    def _register(self, metric):
        self._metrics[metric.name] = metric
        return metric

    def export(self) -> str:
        """
        Export all metrics in Prometheus text exposition format.

        Reference:
        https://prometheus.io/docs/instrumenting/exposition_formats/
        """
        lines = []

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")

            for mv in metric.collect():
                labels = dict(mv.labels)
                metric_name = name
                if isinstance(metric, Histogram):
                    if "_metric" in labels:
                        metric_name = f"{name}_{labels.pop('_metric')}"
                    else:
                        metric_name = f"{name}_bucket"
                lines.append(f"{metric_name}{self._format_labels(labels)} {mv.value}")

            lines.append("")

        return "\n".join(lines)

    def _format_labels(self, labels: Dict[str, str]) -> str:
        if not labels:
            return ""
        parts = [f'{k}="{v}"' for k, v in sorted(labels.items())]
        return "{" + ",".join(parts) + "}"

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        self._metrics.clear()
        self._setup_metrics()


# Global metrics instance
metrics = MetricsRegistry()
