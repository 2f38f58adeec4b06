"""
Profiler - lightweight in-process instrumentation.
Main package exports.
"""

from .config import ProfilerConfig, create_profiler, write_report
from .exceptions import ConfigError, MeasurementError, ProfilerError
from .formatting import format_size, format_time
from .logging import Entry, LoguruBackend, MemorySink, ProfilerBackend
from .monitoring import ResourceMonitor
from .recorder import Profiler
from .report import format_report, log_report, print_report, render_html
from .utils import setup_logging

__version__ = "1.0.0"

__all__ = [
    "Profiler",
    "ProfilerConfig",
    "create_profiler",
    "write_report",
    "ProfilerError",
    "ConfigError",
    "MeasurementError",
    "format_size",
    "format_time",
    "Entry",
    "LoguruBackend",
    "MemorySink",
    "ProfilerBackend",
    "ResourceMonitor",
    "format_report",
    "log_report",
    "print_report",
    "render_html",
    "setup_logging",
]
