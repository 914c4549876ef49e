"""Performance profiling utilities for 2-3 tree operations."""

import time
import functools
from contextlib import contextmanager
from typing import Dict, List, Callable, Iterator, Optional
from dataclasses import dataclass, field
import statistics
from collections import defaultdict

# Tracking is opt-in; benchmarks and the menu's --profile flag switch it on
PROFILING_ENABLED_BY_DEFAULT = False


@dataclass
class MethodMetrics:
    """Timing statistics collected for one operation."""
    call_count: int = 0
    total_time: float = 0.0
    min_time: float = float('inf')
    max_time: float = 0.0
    times: List[float] = field(default_factory=list)

    def add_measurement(self, elapsed: float) -> None:
        self.call_count += 1
        self.total_time += elapsed
        self.min_time = min(self.min_time, elapsed)
        self.max_time = max(self.max_time, elapsed)
        self.times.append(elapsed)

    @property
    def avg_time(self) -> float:
        return self.total_time / self.call_count if self.call_count > 0 else 0

    @property
    def median_time(self) -> float:
        return statistics.median(self.times) if self.times else 0

    def __str__(self) -> str:
        return (f"Calls: {self.call_count}, "
                f"Total: {self.total_time:.6f}s, "
                f"Avg: {self.avg_time:.6f}s, "
                f"Median: {self.median_time:.6f}s")


class PerformanceTracker:
    """Process-wide collector of operation timings."""

    _instance = None

    @classmethod
    def get_instance(cls) -> 'PerformanceTracker':
        if cls._instance is None:
            cls._instance = PerformanceTracker()
        return cls._instance

    def __init__(self):
        self.metrics: Dict[str, MethodMetrics] = defaultdict(MethodMetrics)
        self.enabled = PROFILING_ENABLED_BY_DEFAULT

    def add_measurement(self, name: str, elapsed: float) -> None:
        if self.enabled:
            self.metrics[name].add_measurement(elapsed)

    def reset(self) -> None:
        self.metrics.clear()

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def report(self, sort_by: str = 'total_time') -> str:
        """
        Render the collected metrics as a table.

        Args:
            sort_by: A MethodMetrics attribute to order rows by, descending.
        """
        if not self.metrics:
            return "No performance data collected."

        lines = ["Performance Metrics:"]
        lines.append("-" * 88)
        lines.append(f"{'Operation':<32} {'Calls':>8} {'Total (s)':>12} {'Avg (µs)':>12} "
                     f"{'Median (µs)':>12} {'Max (µs)':>8}")
        lines.append("-" * 88)

        rows = sorted(self.metrics.items(), key=lambda kv: getattr(kv[1], sort_by), reverse=True)
        for name, m in rows:
            lines.append(f"{name:<32} {m.call_count:>8} {m.total_time:>12.6f} "
                         f"{m.avg_time * 1e6:>12.2f} {m.median_time * 1e6:>12.2f} "
                         f"{m.max_time * 1e6:>8.1f}")
        return "\n".join(lines)


@contextmanager
def profiled(reset: bool = True) -> Iterator[PerformanceTracker]:
    """Enable tracking for the duration of a block, restoring the previous state afterwards."""
    tracker = PerformanceTracker.get_instance()
    was_enabled = tracker.enabled
    if reset:
        tracker.reset()
    tracker.enable()
    try:
        yield tracker
    finally:
        tracker.enabled = was_enabled


def track_performance(method: Optional[Callable] = None, *,
                      tag: Optional[str] = None) -> Callable:
    """
    Decorator recording the wall-clock time of each call while tracking is enabled.

    Usable bare (@track_performance) or with a custom name
    (@track_performance(tag="search")).
    """
    def decorator(func):
        name = tag or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tracker = PerformanceTracker.get_instance()
            if not tracker.enabled:
                return func(*args, **kwargs)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                tracker.add_measurement(name, time.perf_counter() - start)
        return wrapper

    if method is None:
        return decorator
    return decorator(method)
