"""
Unit tests for the Profiler recorder.

Tests the enable gate, elapsed time and memory fields, variable size
logging, the start/stop timer and context merging.
"""

import subprocess
import sys
from unittest.mock import patch

import pytest

from profiler.exceptions import MeasurementError
from profiler.recorder import TIMER_NOT_STARTED, Profiler


def test_disabled_profiler_records_nothing(profiler, monitor):
    """Every logging call is a no-op until enable()."""
    profiler.log("x")
    profiler.log_mem("var", [1, 2, 3])
    profiler.log_start("q")
    profiler.log_stop("q")

    assert profiler.is_enabled() is False
    assert profiler.entries == []
    assert monitor.measured == []
    assert profiler.active_timer is None


def test_enable_emits_single_entry(profiler):
    profiler.enable()

    assert profiler.is_enabled() is True
    assert len(profiler.entries) == 1
    assert profiler.entries[0].message == "Profiling enabled"
    assert profiler.entries[0].level == "INFO"


def test_enable_defaults_baselines_from_host(profiler, monitor):
    profiler.enable()

    assert profiler.start_time == monitor.created
    assert profiler.start_memory == monitor.memory
    # Process started 1.5s before enable()
    assert profiler.entries[0].context["time_ms"] == pytest.approx(1500.0)
    assert profiler.entries[0].context["time"] == "1.50s"


def test_enable_accepts_explicit_baselines(profiler, monitor):
    profiler.enable(start_time=monitor.now - 0.05, start_memory=1234)

    assert profiler.start_memory == 1234
    assert profiler.entries[0].context["time"] == "50.00ms"


def test_enable_twice_resets_baselines(profiler, monitor):
    profiler.enable(start_time=monitor.now - 10)
    profiler.enable(start_time=monitor.now)

    assert [e.message for e in profiler.entries] == ["Profiling enabled", "Profiling enabled"]
    assert profiler.entries[1].context["time_ms"] == pytest.approx(0.0)


def test_log_fields(profiler, monitor):
    profiler.enable(start_time=monitor.now)
    monitor.advance(250)
    monitor.memory = 3 * 1024 * 1024

    profiler.log("config loaded")

    entry = profiler.entries[-1]
    assert entry.message == "config loaded"
    assert entry.context["time"] == "250.00ms"
    assert entry.context["time_ms"] == pytest.approx(250.0)
    assert entry.context["memory"] == "3.00mb"
    assert entry.context["memory_bytes"] == 3 * 1024 * 1024


def test_log_twice_elapsed_non_decreasing(profiler, monitor):
    profiler.enable()
    profiler.log("x")
    monitor.advance(3)
    profiler.log("x")

    first, second = profiler.entries[1:]
    assert first.message == second.message == "x"
    assert second.context["time_ms"] >= first.context["time_ms"]


def test_log_elapsed_follows_monotonic_clock(profiler, monitor):
    """A wall clock jump after enable() does not move elapsed time backwards."""
    profiler.enable(start_time=monitor.now)
    monitor.now -= 3600
    monitor.mono += 10

    profiler.log("after clock change")

    assert profiler.entries[-1].context["time_ms"] == pytest.approx(10.0)


def test_log_keeps_caller_context(profiler):
    profiler.enable()
    profiler.log("query", {"sql": "SELECT 1", "rows": 1})

    context = profiler.entries[-1].context
    assert context["sql"] == "SELECT 1"
    assert context["rows"] == 1
    assert "time" in context


def test_computed_fields_take_precedence(profiler, monitor):
    profiler.enable()
    profiler.log("x", {"memory": "caller value", "extra": True})

    context = profiler.entries[-1].context
    assert context["memory"] == "2.00mb"
    assert context["extra"] is True


def test_computed_fields_come_first(profiler):
    profiler.enable()
    profiler.log("x", {"a": 1})

    keys = list(profiler.entries[-1].context)
    assert keys[:4] == ["time", "memory", "memory_bytes", "time_ms"]
    assert keys[-1] == "a"


def test_log_keeps_caller_keys_used_internally(profiler):
    profiler.enable()
    profiler.log("x", {"profiler": "pg", "_context_text": 1, "a": 2})

    context = profiler.entries[-1].context
    assert context["profiler"] == "pg"
    assert context["_context_text"] == 1
    assert context["a"] == 2


def test_log_accepts_non_string_context_keys(profiler):
    profiler.enable()
    profiler.log("x", {1: "a"})

    context = profiler.entries[-1].context
    assert context[1] == "a"
    assert "time" in context


def test_log_mem_records_variable_size(profiler, monitor):
    profiler.enable()
    data = {"rows": list(range(10))}

    profiler.log_mem("rows", data, {"source": "db"})

    entry = profiler.entries[-1]
    assert monitor.measured == [data]
    assert entry.message == "rows"
    assert entry.context["memory_variable"] == "4.00kb"
    assert entry.context["memory_variable_bytes"] == 4096
    assert entry.context["source"] == "db"
    assert "time" in entry.context


def test_log_mem_unmeasurable_variable_raises_with_label(profiler, monitor):
    profiler.enable()
    with patch.object(
        monitor, "measure_copy_size", side_effect=MeasurementError("boom", type_name="lock")
    ):
        with pytest.raises(MeasurementError) as exc_info:
            profiler.log_mem("lock", object())

    assert exc_info.value.context["label"] == "lock"
    assert len(profiler.entries) == 1


def test_log_start_sets_timer(profiler, monitor):
    profiler.enable()
    profiler.log_start("q", {"table": "users"})

    entry = profiler.entries[-1]
    assert profiler.active_timer == monitor.mono
    assert entry.message == "Start: q"
    assert entry.context["elapsed"] == "start"
    assert entry.context["table"] == "users"


def test_log_stop_reports_elapsed(profiler, monitor):
    profiler.enable()
    profiler.log_start("q")
    monitor.advance(42)
    profiler.log_stop("q")

    entry = profiler.entries[-1]
    assert entry.message == "Stop: q"
    assert entry.context["elapsed"] == "42.00ms"
    assert entry.context["elapsed_ms"] == pytest.approx(42.0)
    assert profiler.active_timer is None


def test_log_stop_without_start_does_not_crash(profiler):
    profiler.enable()
    profiler.log_stop("q")

    entry = profiler.entries[-1]
    assert entry.message == "Stop: q"
    assert entry.context["elapsed"] == TIMER_NOT_STARTED
    assert "elapsed_ms" not in entry.context


def test_log_stop_twice_second_has_no_timer(profiler, monitor):
    profiler.enable()
    profiler.log_start("q")
    profiler.log_stop("q")
    profiler.log_stop("q")

    assert profiler.entries[-1].context["elapsed"] == TIMER_NOT_STARTED


def test_timer_context_manager(profiler, monitor):
    profiler.enable()
    with profiler.timer("block", {"step": 1}) as p:
        assert p is profiler
        monitor.advance(1500)

    start, stop = profiler.entries[-2:]
    assert start.message == "Start: block"
    assert stop.message == "Stop: block"
    assert stop.context["elapsed"] == "1.50s"
    assert stop.context["step"] == 1


def test_timer_context_manager_stops_on_error(profiler):
    profiler.enable()
    with pytest.raises(RuntimeError):
        with profiler.timer("failing"):
            raise RuntimeError("fail")

    assert profiler.entries[-1].message == "Stop: failing"


def test_start_stop_real_clock_close_to_zero(real_profiler):
    real_profiler.enable()
    real_profiler.log_start("q")
    real_profiler.log_stop("q")

    elapsed = real_profiler.entries[-1].context["elapsed_ms"]
    assert 0 <= elapsed < 50


def test_real_log_mem_positive_for_large_structure(real_profiler):
    real_profiler.enable()
    data = [str(i) * 10 for i in range(20000)]

    real_profiler.log_mem("strings", data)

    assert real_profiler.entries[-1].context["memory_variable_bytes"] > 0


def test_push_handler_returns_self(profiler):
    captured = []
    assert profiler.push_handler(captured.append) is profiler

    profiler.enable()

    assert len(captured) == 1
    assert "Profiling enabled" in captured[0]


def test_get_logger_is_bound(profiler):
    profiler.get_logger().info("direct")

    assert [e.message for e in profiler.entries] == ["direct"]


def test_two_profilers_are_isolated(monitor):
    first = Profiler(monitor=monitor)
    second = Profiler(monitor=monitor)
    try:
        first.enable()
        first.log("only first")

        assert len(first.entries) == 2
        assert second.entries == []
    finally:
        first.close()
        second.close()


def test_close_detaches_sinks(profiler):
    profiler.enable()
    profiler.close()
    profiler.log("after close")

    assert len(profiler.entries) == 1


def test_get_html_and_report(profiler, monitor):
    profiler.enable()
    profiler.log("hello")

    html = profiler.get_html()
    report = profiler.get_report()

    assert "<strong>Logged</strong>: 2 entries." in html
    assert "8.00mb" in html
    assert "hello" in report
    assert "Logged: 2 entries. Peak memory usage: 8.00mb." in report


def test_default_profiler_writes_nothing_to_stderr():
    """Entries stay out of the default loguru stderr handler."""
    code = (
        "from profiler.recorder import Profiler\n"
        "p = Profiler()\n"
        "p.enable()\n"
        "p.log('hidden entry', {'k': 1})\n"
        "p.log_start('q')\n"
        "p.log_stop('q')\n"
        "assert len(p.entries) == 4\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code], capture_output=True, text=True, timeout=60
    )

    assert result.returncode == 0, result.stderr
    assert "hidden entry" not in result.stderr
    assert "Profiler" not in result.stderr
