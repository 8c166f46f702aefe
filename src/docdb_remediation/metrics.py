"""
Prometheus-style metrics for remediation workflow executions.

Metrics are collected in process and rendered in Prometheus text format.
"""

from typing import Dict, Optional, Tuple
import threading


class MetricsCollector:
    """
    Singleton metrics collector.

    Thread-safe: concurrent workflow executions record into it.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize metrics storage."""
        self._counters: Dict[str, Dict[str, int]] = {}
        # Per series: [observation count, running sum]
        self._histograms: Dict[str, Dict[str, list]] = {}
        self._update_lock = threading.Lock()

    def increment_counter(self, name: str, value: int = 1, labels: Optional[Dict[str, str]] = None):
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Increment amount (default 1)
            labels: Label dictionary
        """
        label_key = self._make_label_key(labels or {})

        with self._update_lock:
            series = self._counters.setdefault(name, {})
            series[label_key] = series.get(label_key, 0) + value

    def record_histogram(self, name: str, value: float, labels: Optional[Dict[str, str]] = None):
        """
        Record a histogram observation.

        Args:
            name: Metric name
            value: Observed value
            labels: Label dictionary
        """
        label_key = self._make_label_key(labels or {})

        with self._update_lock:
            series = self._histograms.setdefault(name, {}).setdefault(label_key, [0, 0.0])
            series[0] += 1
            series[1] += value

    def get_counter(self, name: str, labels: Optional[Dict[str, str]] = None) -> int:
        """Current value of a counter series (0 if never incremented)."""
        return self._counters.get(name, {}).get(self._make_label_key(labels or {}), 0)

    def get_histogram(self, name: str, labels: Optional[Dict[str, str]] = None) -> Tuple[int, float]:
        """(count, sum) of a histogram series ((0, 0.0) if never observed)."""
        count, total = self._histograms.get(name, {}).get(self._make_label_key(labels or {}), (0, 0.0))
        return count, total

    def get_metrics(self) -> str:
        """
        Get all metrics in Prometheus text format.

        Returns:
            Prometheus-formatted metrics string
        """
        lines = []

        with self._update_lock:
            for name, labels_dict in self._counters.items():
                lines.append(f"# TYPE {name} counter")
                for label_key, value in labels_dict.items():
                    lines.append(f"{name}{{{label_key}}} {value}")

            # Histograms (simplified - just count and sum)
            for name, labels_dict in self._histograms.items():
                lines.append(f"# TYPE {name} histogram")
                for label_key, (count, total) in labels_dict.items():
                    lines.append(f"{name}_count{{{label_key}}} {count}")
                    lines.append(f"{name}_sum{{{label_key}}} {total}")

        return "\n".join(lines)

    def reset(self) -> None:
        """Drop all recorded series. Intended for tests."""
        with self._update_lock:
            self._counters.clear()
            self._histograms.clear()

    def _make_label_key(self, labels: Dict[str, str]) -> str:
        """Convert label dict to string key."""
        if not labels:
            return ""
        return ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))


# Singleton instance
metrics = MetricsCollector()


def track_remediation_outcome(outcome: str, directive: str):
    """Increment the outcome counter."""
    metrics.increment_counter(
        "docdb_remediation_outcomes_total",
        1,
        {"outcome": outcome, "directive": directive}
    )


def track_remediation_failure(state: str):
    """Increment the uncaught-failure counter."""
    metrics.increment_counter(
        "docdb_remediation_failures_total",
        1,
        {"state": state}
    )


def track_remediation_duration(duration_seconds: float, outcome: str):
    """Track workflow execution duration."""
    metrics.record_histogram(
        "docdb_remediation_duration_seconds",
        duration_seconds,
        {"outcome": outcome}
    )


def get_metrics_text() -> str:
    """
    Get all metrics in Prometheus text format.

    Returns:
        Prometheus-formatted metrics
    """
    return metrics.get_metrics()
