"""
Shared fixtures for all tests.

This conftest.py provides a controllable host monitor and profilers that
detach their loguru sinks after each test.
"""

from typing import Any, List

import pytest

from profiler.logging.backend import LoguruBackend
from profiler.recorder import Profiler


class FakeMonitor:
    """Deterministic stand-in for ResourceMonitor."""

    def __init__(self):
        self.now = 1_700_000_000.0  # epoch seconds
        self.mono = 5_000.0  # milliseconds
        self.memory = 2 * 1024 * 1024
        self.peak = 8 * 1024 * 1024
        self.created = self.now - 1.5
        self.copy_size = 4096
        self.measured: List[Any] = []

    def advance(self, ms: float) -> None:
        """Move both clocks forward."""
        self.mono += ms
        self.now += ms / 1000

    def wall_time(self) -> float:
        return self.now

    def monotonic_ms(self) -> float:
        return self.mono

    def process_start_time(self) -> float:
        return self.created

    def memory_usage(self) -> int:
        return self.memory

    def peak_memory_usage(self) -> int:
        return self.peak

    def measure_copy_size(self, variable: Any) -> int:
        self.measured.append(variable)
        return self.copy_size


@pytest.fixture
def monitor() -> FakeMonitor:
    """Fake host readings."""
    return FakeMonitor()


@pytest.fixture
def profiler(monitor):
    """Disabled profiler wired to the fake monitor."""
    instance = Profiler(monitor=monitor)
    yield instance
    instance.close()


@pytest.fixture
def real_profiler():
    """Disabled profiler reading the real host."""
    instance = Profiler()
    yield instance
    instance.close()


@pytest.fixture
def backend():
    """Loguru backend that detaches its sinks afterwards."""
    instance = LoguruBackend(name="test")
    yield instance
    instance.remove_sinks()
