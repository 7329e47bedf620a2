"""
Performance monitoring and metrics collection.
"""
import inspect
import time
import logging
import threading
from collections import defaultdict
from functools import wraps
from typing import Any, Dict, List, Optional

from analyst.core.logging import get_correlation_id

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_METRIC = 1000

# Thread-safe metrics storage
_metrics_lock = threading.Lock()
_metrics: Dict[str, List[Dict[str, Any]]] = defaultdict(list)


def _percentile(ordered: List[float], fraction: float) -> float:
    return ordered[min(int(len(ordered) * fraction), len(ordered) - 1)]


class PerformanceMonitor:
    """Monitor and track performance metrics."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a performance metric.

        Args:
            name: Metric name (e.g., 'classify_columns', 'analyze_dataset')
            value: Metric value (usually duration in seconds)
            metadata: Optional metadata (correlation_id, status, etc.)
        """
        with _metrics_lock:
            samples = _metrics[name]
            samples.append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(samples) > MAX_SAMPLES_PER_METRIC:
                del samples[:-MAX_SAMPLES_PER_METRIC]

    @staticmethod
    def _stats_locked(metric_name: str) -> Optional[Dict[str, float]]:
        samples = _metrics.get(metric_name)
        if not samples:
            return None

        values = sorted(m['value'] for m in samples)
        errors = sum(1 for m in samples if m['metadata'].get('status') == 'error')
        return {
            'count': len(values),
            'errors': errors,
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / len(values),
            'p50': _percentile(values, 0.5),
            'p95': _percentile(values, 0.95),
            'p99': _percentile(values, 0.99),
        }

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a metric.

        Returns:
            Dict with count, errors, min, max, mean and percentiles, or None if no data
        """
        with _metrics_lock:
            return PerformanceMonitor._stats_locked(metric_name)

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        """Get statistics for all metrics."""
        with _metrics_lock:
            return {name: PerformanceMonitor._stats_locked(name) for name in list(_metrics)}

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def _finish(metric_name: str, started: float, error: Optional[BaseException] = None) -> None:
    duration = time.perf_counter() - started
    metadata = {'correlation_id': get_correlation_id(), 'status': 'error' if error else 'success'}
    if error is not None:
        metadata['error'] = str(error)
    PerformanceMonitor.record_metric(metric_name, duration, metadata)

    if error is None:
        logger.debug(f"{metric_name} completed in {duration:.3f}s", extra={'metric': metric_name, 'duration': duration})
    else:
        logger.warning(
            f"{metric_name} failed after {duration:.3f}s: {error}",
            extra={'metric': metric_name, 'duration': duration}
        )


def track_performance(metric_name: str):
    """
    Decorator to track execution time of sync or async callables.

    Usage:
        @track_performance("classify_columns")
        def classify_columns(...):
            ...
    """
    def decorator(func):
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _finish(metric_name, started, e)
                    raise
                _finish(metric_name, started)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _finish(metric_name, started, e)
                raise
            _finish(metric_name, started)
            return result
        return sync_wrapper

    return decorator
