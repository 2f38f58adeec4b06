"""
Logging backend for the profiler.

The recorder only needs one capability: accept a leveled message with a
structured context. ``LoguruBackend`` provides it with an independent loguru
logger, so entries reach only the sinks added to that backend.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Protocol

from loguru import logger

SINK_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}{extra[_context_text]}\n{exception}"
)


def _format_record(record) -> str:
    """Loguru format function rendering the structured context as key=value pairs."""
    context = record["extra"].get("context", {})
    pairs = [f"{key}={value}" for key, value in context.items()]
    record["extra"]["_context_text"] = " | " + " ".join(pairs) if pairs else ""
    return SINK_LOG_FORMAT


def independent_logger():
    """
    Copy of the global loguru logger without any of its handlers.

    Global handlers may hold streams or files that cannot be deep-copied,
    so the handler table is replaced by an empty one during the copy.
    """
    handlers = logger._core.handlers
    new_logger = copy.deepcopy(logger, {id(handlers): {}})
    new_logger.remove()
    return new_logger


class ProfilerBackend(Protocol):
    """Capability the recorder depends on."""

    @property
    def logger(self) -> Any:
        ...

    def log(self, level: str, message: str, context: Dict[str, Any]) -> None:
        ...

    def add_sink(self, sink: Any, **options: Any) -> int:
        ...

    def remove_sinks(self) -> None:
        ...


class LoguruBackend:
    """
    Route profiler entries through a private loguru logger.

    The logger starts WITHOUT handlers: nothing is printed until a sink is
    added, and sinks of the global ``loguru.logger`` never see the entries.
    The caller's context travels as a single ``extra["context"]`` dict.

    Typical usage:
        backend = LoguruBackend()
        backend.add_sink(MemorySink())
        backend.add_sink("profiler.log", rotation="10 MB")
        backend.log("INFO", "hello", {"time": "1.00ms"})
    """

    def __init__(self, name: str = "profiler"):
        self.name = name
        self._logger = independent_logger().bind(profiler=name)
        self._handler_ids: List[int] = []

    @property
    def logger(self):
        """The backend's own loguru logger, for fine-grained use."""
        return self._logger

    @property
    def handler_ids(self) -> List[int]:
        return list(self._handler_ids)

    def add_sink(self, sink: Any, **options: Any) -> int:
        """
        Attach an output sink (anything ``loguru.logger.add`` accepts).

        Args:
            sink: File path, stream, callable or ``MemorySink``
            **options: Forwarded to ``logger.add`` (level, rotation, retention, filter, ...)

        Returns:
            The loguru handler id
        """
        if not callable(sink) or hasattr(sink, "write"):
            options.setdefault("format", _format_record)
        handler_id = self._logger.add(sink, **options)
        self._handler_ids.append(handler_id)
        return handler_id

    def remove_sinks(self) -> None:
        """Detach every sink added through this backend."""
        while self._handler_ids:
            handler_id = self._handler_ids.pop()
            try:
                self._logger.remove(handler_id)
            except ValueError:
                # Already removed through get_logger().remove()
                continue

    def log(self, level: str, message: str, context: Dict[str, Any]) -> None:
        """Emit ``message`` with ``context`` bound as ``extra["context"]``."""
        self._logger.bind(context=dict(context)).log(level, message)


__all__ = [
    "ProfilerBackend",
    "LoguruBackend",
    "independent_logger",
]
