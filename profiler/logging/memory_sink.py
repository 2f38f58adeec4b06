# -*- coding: utf-8 -*-
"""
MemorySink: loguru sink that keeps every record in memory for later rendering.

Purpose:
- Capture profiler entries (message + structured context) in insertion order
  so a report can be rendered at the end of the run.
- Minimal API:
    MemorySink()
    - entries -> list[Entry]
    - clear() -> None
    - len(sink)

Design notes:
- Attach it with ``logger.add(sink)``; loguru calls the sink with a message
  object whose ``.record`` holds the structured data.
- The context is read from ``extra["context"]``; other extra keys are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Entry:
    """One recorded observation."""

    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    level: str = "INFO"
    timestamp: Optional[datetime] = None

    def get(self, key: str, default: Any = None) -> Any:
        """Shortcut for ``entry.context.get(key, default)``."""
        return self.context.get(key, default)


class MemorySink:
    """
    In-memory capture sink.

    Example:
        sink = MemorySink()
        logger.add(sink)
        logger.bind(context={"time": "1.00ms"}).info("hello")
        sink.entries[0].context  # {"time": "1.00ms"}
    """

    def __init__(self):
        self._entries: List[Entry] = []

    def __call__(self, message) -> None:
        record = message.record
        context = dict(record["extra"].get("context", {}))
        self._entries.append(
            Entry(
                message=record["message"],
                context=context,
                level=record["level"].name,
                timestamp=record["time"],
            )
        )

    @property
    def entries(self) -> List[Entry]:
        """Captured entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop every captured entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["MemorySink", "Entry"]
