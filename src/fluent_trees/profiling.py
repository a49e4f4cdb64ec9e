"""
Profiling of the subtree-scanning tree operations.

Every tracked call records its wall time and the number of nodes it
visited. Visits are reported by the scans themselves through
PerformanceTracker.count_visited() and are credited to each tracked call in
progress, so an outer operation such as remove_descendants() accumulates the
visits of every rescan it triggers.
"""

import time
import functools
import statistics
from typing import Callable, Dict, List, Optional
from dataclasses import dataclass, field

# ScanMetrics attributes a report can be sorted on
REPORT_SORT_KEYS = ("total_time", "call_count", "nodes_visited")


@dataclass
class ScanMetrics:
    """Time and visit counters of one tracked operation."""
    call_count: int = 0
    total_time: float = 0.0
    nodes_visited: int = 0
    times: List[float] = field(default_factory=list)

    def add_call(self, elapsed: float) -> None:
        self.call_count += 1
        self.total_time += elapsed
        self.times.append(elapsed)

    @property
    def avg_time(self) -> float:
        return self.total_time / self.call_count if self.call_count else 0.0

    @property
    def median_time(self) -> float:
        return statistics.median(self.times) if self.times else 0.0

    @property
    def nodes_per_call(self) -> float:
        return self.nodes_visited / self.call_count if self.call_count else 0.0


class PerformanceTracker:
    """
    Process-wide collector of ScanMetrics, keyed by operation name.

    Tracking starts disabled; tracked operations then run without any
    bookkeeping until enable() is called.
    """

    _instance = None

    @classmethod
    def get_instance(cls) -> 'PerformanceTracker':
        if cls._instance is None:
            cls._instance = PerformanceTracker()
        return cls._instance

    def __init__(self):
        self.metrics: Dict[str, ScanMetrics] = {}
        self.enabled = False
        self._running: List[str] = []  # outermost first

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def reset(self) -> None:
        self.metrics.clear()

    def metrics_for(self, operation: str) -> ScanMetrics:
        if operation not in self.metrics:
            self.metrics[operation] = ScanMetrics()
        return self.metrics[operation]

    def begin(self, operation: str) -> None:
        self._running.append(operation)

    def end(self, operation: str, elapsed: float) -> None:
        self._running.pop()
        self.metrics_for(operation).add_call(elapsed)

    def count_visited(self, count: int) -> None:
        """Credit `count` visited nodes to every tracked call in progress."""
        if not self.enabled:
            return
        for operation in self._running:
            self.metrics_for(operation).nodes_visited += count

    def report(self, sort_by: str = 'total_time') -> str:
        """
        Render the collected metrics as a fixed-width table, sorted
        descending on one of REPORT_SORT_KEYS.

        Raises:
            ValueError: If `sort_by` is not a report sort key.
        """
        if sort_by not in REPORT_SORT_KEYS:
            raise ValueError(
                f"report(): sort_by must be one of {REPORT_SORT_KEYS}, got {sort_by!r}"
            )
        if not self.metrics:
            return "No performance data collected."

        header = (f"{'Operation':<36} {'Calls':>7} {'Total (s)':>11} {'Median (s)':>11} "
                  f"{'Nodes':>10} {'Nodes/call':>11}")
        rule = "-" * len(header)
        lines = ["Tree scan metrics:", rule, header, rule]
        ranked = sorted(self.metrics.items(),
                        key=lambda item: getattr(item[1], sort_by),
                        reverse=True)
        for operation, m in ranked:
            lines.append(f"{operation:<36} {m.call_count:>7} {m.total_time:>11.6f} "
                         f"{m.median_time:>11.6f} {m.nodes_visited:>10} {m.nodes_per_call:>11.1f}")
        return "\n".join(lines)


def track_performance(method: Optional[Callable] = None, *,
                      tag: Optional[str] = None) -> Callable:
    """
    Decorator timing each call of a tree operation while tracking is enabled.

    Usable bare or as @track_performance(tag="name"); the default name is the
    function's qualified name. Calls that raise are still recorded.
    """
    def decorator(func):
        name = tag or func.__qualname__

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tracker = PerformanceTracker.get_instance()
            if not tracker.enabled:
                return func(*args, **kwargs)

            tracker.begin(name)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                tracker.end(name, time.perf_counter() - start)
        return wrapper

    if method is None:
        return decorator
    return decorator(method)
