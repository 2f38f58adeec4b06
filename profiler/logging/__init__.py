"""
Logging backend and sinks for the profiler.
"""

from profiler.logging.backend import (
    LoguruBackend,
    ProfilerBackend,
    independent_logger,
)
from profiler.logging.memory_sink import Entry, MemorySink

__all__ = [
    "LoguruBackend",
    "ProfilerBackend",
    "independent_logger",
    "Entry",
    "MemorySink",
]
