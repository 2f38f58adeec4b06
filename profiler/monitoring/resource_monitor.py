"""
Host readings for the profiler.

Wall clock, monotonic clock, process memory (RSS), peak process memory,
process start time and deep-copy size measurement.
"""

import copy
import pickle
import sys
import time
import tracemalloc
from typing import Any

import psutil

from profiler.exceptions import MeasurementError

try:
    import resource
except ImportError:  # Windows
    resource = None


def deep_copy(variable: Any) -> Any:
    """
    Produce a fully independent copy of ``variable``.

    Pickle round-trip first, ``copy.deepcopy`` for objects pickle refuses
    (lambdas, local classes, reductions that raise, ...).
    """
    try:
        return pickle.loads(pickle.dumps(variable, protocol=pickle.HIGHEST_PROTOCOL))
    except Exception:
        pass

    try:
        return copy.deepcopy(variable)
    except Exception as e:
        raise MeasurementError(
            f"Cannot copy variable for size measurement: {e}",
            type_name=type(variable).__name__,
        ) from e


class ResourceMonitor:
    """
    Read clocks and memory usage of the current process.

    Typical usage:
        monitor = ResourceMonitor()
        monitor.memory_usage()          # bytes (RSS)
        monitor.measure_copy_size(data) # bytes allocated by a deep copy
    """

    def __init__(self, pid: int | None = None):
        self._process = psutil.Process(pid)

    def wall_time(self) -> float:
        """Current wall-clock time in epoch seconds."""
        return time.time()

    def monotonic_ms(self) -> float:
        """Monotonic clock reading in milliseconds. Only differences are meaningful."""
        return time.perf_counter() * 1000

    def process_start_time(self) -> float:
        """Creation time of the process in epoch seconds."""
        return self._process.create_time()

    def memory_usage(self) -> int:
        """Resident set size of the process in bytes."""
        return self._process.memory_info().rss

    def peak_memory_usage(self) -> int:
        """
        Peak resident set size of the process in bytes.

        Uses ``peak_wset`` on Windows and ``ru_maxrss`` elsewhere
        (kilobytes on Linux, bytes on macOS).
        """
        info = self._process.memory_info()
        current = info.rss

        peak_wset = getattr(info, "peak_wset", None)
        if peak_wset is not None:
            return max(peak_wset, current)

        if resource is not None:
            max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
            if sys.platform != "darwin":
                max_rss *= 1024
            return max(max_rss, current)

        return current

    def measure_copy_size(self, variable: Any) -> int:
        """
        Approximate in-memory size of ``variable`` in bytes.

        Snapshots traced memory, deep-copies the variable, snapshots again and
        returns the difference. Expensive: allocates a full copy. Negative
        deltas caused by garbage collection are clamped to zero.
        """
        started = not tracemalloc.is_tracing()
        if started:
            tracemalloc.start()
        try:
            before, _ = tracemalloc.get_traced_memory()
            clone = deep_copy(variable)
            after, _ = tracemalloc.get_traced_memory()
        finally:
            if started:
                tracemalloc.stop()

        del clone
        return max(0, after - before)


__all__ = ["ResourceMonitor", "deep_copy"]
