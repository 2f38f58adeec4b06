"""
Instrumentation recorder.

Records timestamped entries annotated with elapsed time and memory usage,
optionally the size of a variable, and start/stop timer pairs. Storage is
delegated to a logging backend; the in-memory sink attached at construction
keeps everything needed for the HTML report.

Not thread-safe: one recorder instruments one sequential flow.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from profiler.exceptions import MeasurementError
from profiler.formatting import format_size, format_time
from profiler.logging.backend import LoguruBackend, ProfilerBackend
from profiler.logging.memory_sink import Entry, MemorySink
from profiler.monitoring.resource_monitor import ResourceMonitor
from profiler.report import format_report, render_html
from profiler.utils import logger

ENTRY_LEVEL = "INFO"
TIMER_NOT_STARTED = "not started"


def _merge(computed: Dict[str, Any], context: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Computed fields first and authoritative; caller keys added when they don't collide."""
    merged = dict(computed)
    for key, value in (context or {}).items():
        merged.setdefault(key, value)
    return merged


class Profiler:
    """
    Gate, baselines and active timer of one instrumentation session.

    Typical usage:
        profiler = Profiler()
        profiler.enable()
        profiler.log("config loaded")
        profiler.log_start("query")
        ...
        profiler.log_stop("query")
        html = profiler.get_html()

    Time values are milliseconds, memory values are bytes.
    """

    def __init__(
        self,
        backend: Optional[ProfilerBackend] = None,
        monitor: Optional[ResourceMonitor] = None,
        name: str = "profiler",
    ):
        """
        Create a disabled recorder.

        Args:
            backend: Logging backend. Defaults to a fresh ``LoguruBackend``.
            monitor: Source of clock and memory readings.
            name: Name bound into every record.
        """
        self.enabled = False
        self.start_time: Optional[float] = None
        self.start_memory: Optional[int] = None
        self.active_timer: Optional[float] = None

        self._monitor = monitor or ResourceMonitor()
        self._anchor_wall = 0.0
        self._anchor_mono = 0.0

        self.backend = backend if backend is not None else LoguruBackend(name)
        self.memory_sink = MemorySink()
        self.backend.add_sink(self.memory_sink, level="DEBUG")

    def get_logger(self):
        """Return the backend's logger for fine-grained setup."""
        return self.backend.logger

    def is_enabled(self) -> bool:
        """Tell whether the profiler is recording."""
        return self.enabled

    def push_handler(self, sink: Any, **options: Any) -> "Profiler":
        """
        Attach an output sink to the backend.

        Examples: a rotating log file (``"profiler.log", rotation="10 MB"``),
        ``sys.stderr``, any callable taking a loguru message.
        """
        self.backend.add_sink(sink, **options)
        return self

    @property
    def entries(self) -> List[Entry]:
        """Entries captured so far, oldest first."""
        return self.memory_sink.entries

    def enable(self, start_time: Optional[float] = None, start_memory: Optional[int] = None) -> None:
        """
        Enable recording and capture the baselines.

        Args:
            start_time: Epoch seconds (``time.time()``) marking the true start of
                the application. Defaults to the process creation time.
            start_memory: Memory usage in bytes at the true start. Defaults to
                the current usage.
        """
        self.enabled = True
        self._anchor_mono = self._monitor.monotonic_ms()
        self._anchor_wall = self._monitor.wall_time()
        self.start_time = start_time if start_time is not None else self._monitor.process_start_time()
        self.start_memory = start_memory if start_memory is not None else self._monitor.memory_usage()

        self.log("Profiling enabled")

    def _elapsed_ms(self) -> float:
        # Wall offset of the baseline, then monotonic progress since enable()
        offset = (self._anchor_wall - self.start_time) * 1000
        return offset + (self._monitor.monotonic_ms() - self._anchor_mono)

    def log(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log elapsed time and memory usage.

        Args:
            message: Identifies the entry in the log
            context: Arbitrary data to log
        """
        if not self.enabled:
            return

        elapsed = self._elapsed_ms()
        memory = self._monitor.memory_usage()
        computed = {
            "time": format_time(elapsed),
            "memory": format_size(memory),
            "memory_bytes": memory,
            "time_ms": elapsed,
        }
        self.backend.log(ENTRY_LEVEL, message, _merge(computed, context))

    def log_mem(self, label: str, variable: Any, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log time, memory usage and the approximate size of a single variable.

        The size is the memory allocated by a full deep copy of ``variable``,
        so this is expensive: keep it out of hot paths.

        Raises:
            MeasurementError: the variable can be neither pickled nor deep-copied
        """
        if not self.enabled:
            return

        try:
            size = self._monitor.measure_copy_size(variable)
        except MeasurementError as e:
            e.context.setdefault("label", label)
            raise

        self.log(label, _merge({
            "memory_variable": format_size(size),
            "memory_variable_bytes": size,
        }, context))

    def log_start(self, label: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Start the timer. Ideal for the elapsed time of a database query."""
        if not self.enabled:
            return

        self.active_timer = self._monitor.monotonic_ms()
        self.log(f"Start: {label}", _merge({"elapsed": "start"}, context))

    def log_stop(self, label: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Stop the timer started by the last ``log_start`` and log the elapsed time."""
        if not self.enabled:
            return

        if self.active_timer is None:
            logger.warning(f"Profiler timer stopped without start: {label}")
            self.log(f"Stop: {label}", _merge({"elapsed": TIMER_NOT_STARTED}, context))
            return

        elapsed = self._monitor.monotonic_ms() - self.active_timer
        self.active_timer = None
        self.log(f"Stop: {label}", _merge({
            "elapsed": format_time(elapsed),
            "elapsed_ms": elapsed,
        }, context))

    @contextmanager
    def timer(self, label: str, context: Optional[Dict[str, Any]] = None) -> Iterator["Profiler"]:
        """A context manager wrapping a block in ``log_start`` / ``log_stop``."""
        self.log_start(label, context)
        try:
            yield self
        finally:
            self.log_stop(label, context)

    def get_html(self) -> str:
        """Render the captured entries as an HTML fragment."""
        return render_html(self.entries, peak_memory=self._monitor.peak_memory_usage())

    def get_report(self) -> str:
        """Render the captured entries as a plain-text table."""
        return format_report(self.entries, peak_memory=self._monitor.peak_memory_usage())

    def close(self) -> None:
        """Detach every sink this profiler attached."""
        self.backend.remove_sinks()


__all__ = ["Profiler", "ENTRY_LEVEL", "TIMER_NOT_STARTED"]
