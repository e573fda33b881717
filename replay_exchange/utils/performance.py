"""
Performance monitoring for the replay exchange.

Tracks latency of matching and aggregation calls, simple counters and
process resource usage.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Dict, List

import psutil

logger = logging.getLogger(__name__)


def _percentile(sorted_values: List[float], fraction: float) -> float:
    return sorted_values[min(int(fraction * len(sorted_values)), len(sorted_values) - 1)]


class PerformanceMonitor:
    """
    Collects timing metrics, counters and system statistics.

    The REST and WebSocket servers run on separate threads, so every
    access goes through a lock.
    """

    def __init__(self, max_samples: int = 10000, enabled: bool = True):
        """
        Initialize performance monitor.

        Args:
            max_samples: Maximum samples kept per metric
            enabled: Whether measure_latency records anything
        """
        self.max_samples = max_samples
        self.enabled = enabled
        self.metrics: Dict[str, List[float]] = {}
        self.counters: Dict[str, int] = {}
        self.start_time = time.time()
        self.lock = threading.Lock()

        self.process = psutil.Process()
        self.initial_memory = self.process.memory_info().rss

    def record_metric(self, name: str, value: float) -> None:
        """
        Record a performance metric.

        Args:
            name: Metric name
            value: Metric value
        """
        with self.lock:
            samples = self.metrics.setdefault(name, [])
            samples.append(value)
            if len(samples) > self.max_samples:
                samples.pop(0)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter metric."""
        with self.lock:
            self.counters[name] = self.counters.get(name, 0) + value

    def get_metric_stats(self, name: str) -> Dict[str, float]:
        """
        Get statistics for a metric.

        Returns:
            Dictionary with min, max, avg, p50, p95 and count
        """
        with self.lock:
            return self._stats(self.metrics.get(name, []))

    @staticmethod
    def _stats(values: List[float]) -> Dict[str, float]:
        if not values:
            return {"min": 0, "max": 0, "avg": 0, "p50": 0, "p95": 0, "count": 0}

        ordered = sorted(values)
        return {
            "min": ordered[0],
            "max": ordered[-1],
            "avg": sum(ordered) / len(ordered),
            "p50": _percentile(ordered, 0.5),
            "p95": _percentile(ordered, 0.95),
            "count": len(ordered),
        }

    def get_system_stats(self) -> Dict[str, Any]:
        """Get current process statistics."""
        try:
            memory_info = self.process.memory_info()
            return {
                "memory_rss_mb": memory_info.rss / 1024 / 1024,
                "memory_percent": self.process.memory_percent(),
                "cpu_percent": self.process.cpu_percent(),
                "thread_count": self.process.num_threads(),
                "memory_growth_mb": (memory_info.rss - self.initial_memory) / 1024 / 1024,
            }
        except psutil.Error as e:
            logger.error(f"Error getting system stats: {str(e)}")
            return {}

    def get_summary(self) -> Dict[str, Any]:
        """Get performance summary."""
        with self.lock:
            summary = {
                "uptime_seconds": time.time() - self.start_time,
                "counters": dict(self.counters),
                "metrics": {name: self._stats(values) for name, values in self.metrics.items() if values},
            }

        summary.update(self.get_system_stats())
        return summary

    def reset(self) -> None:
        """Reset all metrics and counters."""
        with self.lock:
            self.metrics.clear()
            self.counters.clear()
            self.start_time = time.time()
            self.initial_memory = self.process.memory_info().rss


@contextmanager
def measure_latency(monitor: PerformanceMonitor, operation_name: str):
    """
    Context manager to measure operation latency.

    Args:
        monitor: Performance monitor instance
        operation_name: Name of the operation being measured
    """
    if not monitor.enabled:
        yield
        return

    start_time = time.perf_counter()
    try:
        yield
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        monitor.record_metric(f"{operation_name}_latency_ms", latency_ms)
        monitor.increment_counter(operation_name)


# Global performance monitor instance
performance_monitor = PerformanceMonitor()


def get_performance_monitor() -> PerformanceMonitor:
    """Get the global performance monitor instance."""
    return performance_monitor
