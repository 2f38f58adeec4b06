"""
Host resource readings for the profiler.
"""

from profiler.monitoring.resource_monitor import ResourceMonitor, deep_copy

__all__ = [
    "ResourceMonitor",
    "deep_copy",
]
