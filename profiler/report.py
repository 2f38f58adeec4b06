# -*- coding: utf-8 -*-
"""
Report rendering for captured profiler entries.

HTML fragment for embedding in a page, plain-text table for logs,
rich table for the terminal.
"""

from html import escape
from typing import Iterable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape as escape_markup
from rich.table import Table

from profiler.formatting import format_size
from profiler.logging.memory_sink import Entry
from profiler.monitoring.resource_monitor import ResourceMonitor
from profiler.utils import logger

COLUMNS = ["#", "Message", "Time", "Memory", "Var memory", "Elapsed"]
CONTEXT_COLUMNS = ["time", "memory", "memory_variable", "elapsed"]
PLACEHOLDER = "N/A"

_CELL_STYLE = "border-right: 1px solid #cccccc; padding: 0 5px"


def _resolve_peak(peak_memory: Optional[int]) -> int:
    if peak_memory is not None:
        return peak_memory
    return ResourceMonitor().peak_memory_usage()


def _cells(entry: Entry) -> List[Optional[str]]:
    """Context values for the report columns, None where missing."""
    return [
        str(entry.context[column]) if column in entry.context else None
        for column in CONTEXT_COLUMNS
    ]


def render_html(entries: Sequence[Entry], peak_memory: Optional[int] = None) -> str:
    """
    Render entries as an HTML fragment.

    Args:
        entries: Captured entries, oldest first
        peak_memory: Peak process memory in bytes. Read from the host when omitted.

    Returns:
        HTML string with a summary line and one table row per entry
    """
    peak = _resolve_peak(peak_memory)
    lines = [
        '<div style="width:100%; padding:10px 0 20px; background: #f5f5f5;">',
        '    <div style="width: 80%; margin: 0 auto">',
        "        <h4>Profiler</h4>",
        "        <p>",
        f"            <strong>Logged</strong>: {len(entries)} entries.",
        f"            <strong>Peak memory usage</strong>: {format_size(peak)}.",
        "        </p>",
        '        <table style="width: 100%; border: 1px solid #cccccc; line-height: 150%">',
        '            <thead style="text-align: left; border-bottom: 1px solid #cccccc">',
    ]
    for column in COLUMNS:
        lines.append(f'                <th style="{_CELL_STYLE}">{escape(column)}</th>')
    lines.append("            </thead>")
    lines.append("            <tbody>")

    for index, entry in enumerate(entries):
        background = "background:#fbfbfb" if index % 2 else ""
        lines.append(f'                <tr style="border-top: 1px solid #cccccc;{background}">')
        lines.append(f'                    <td style="{_CELL_STYLE}">{index + 1}</td>')
        lines.append(f'                    <td style="{_CELL_STYLE}">{escape(entry.message)}</td>')
        for value in _cells(entry):
            if value is None:
                cell = f'<span style="color: #dddddd">{PLACEHOLDER}</span>'
            else:
                cell = escape(value)
            lines.append(f'                    <td style="{_CELL_STYLE}">{cell}</td>')
        lines.append("                </tr>")

    lines.extend([
        "            </tbody>",
        "        </table>",
        "    </div>",
        "</div>",
    ])
    return "\n".join(lines)


def format_report(entries: Sequence[Entry], peak_memory: Optional[int] = None) -> str:
    """
    Format entries into a human-readable text table.

    Returns:
        Formatted multi-line string ready for logging
    """
    peak = _resolve_peak(peak_memory)
    lines = []
    lines.append("=" * 100)
    lines.append("Profiler")
    lines.append(f"Logged: {len(entries)} entries. Peak memory usage: {format_size(peak)}.")
    lines.append("=" * 100)
    lines.append(
        f"{'#':>4} {'Message':<40} {'Time':>10} {'Memory':>10} {'Var memory':>12} {'Elapsed':>12}"
    )
    lines.append("-" * 100)

    for index, entry in enumerate(entries, 1):
        time_, memory, variable, elapsed = (v if v is not None else PLACEHOLDER for v in _cells(entry))
        lines.append(
            f"{index:>4} {entry.message:<40} {time_:>10} {memory:>10} {variable:>12} {elapsed:>12}"
        )

    lines.append("=" * 100)
    return "\n".join(lines)


def log_report(entries: Sequence[Entry], peak_memory: Optional[int] = None):
    """
    Log the text report line by line.
    """
    summary = format_report(entries, peak_memory=peak_memory)

    # One record per line keeps the table readable in every handler
    for line in summary.split("\n"):
        logger.info(line)


def build_table(entries: Iterable[Entry]) -> Table:
    """Build a rich table with one row per entry."""
    table = Table(title="Profiler")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Message", style="green")
    table.add_column("Time", style="yellow")
    table.add_column("Memory", style="blue")
    table.add_column("Var memory", style="magenta")
    table.add_column("Elapsed", style="yellow")

    for index, entry in enumerate(entries, 1):
        cells = [v if v is not None else PLACEHOLDER for v in _cells(entry)]
        table.add_row(str(index), escape_markup(entry.message), *(escape_markup(c) for c in cells))
    return table


def print_report(
    entries: Sequence[Entry],
    console: Optional[Console] = None,
    peak_memory: Optional[int] = None,
) -> None:
    """Print the entries as a rich table followed by the summary line."""
    console = console or Console()
    peak = _resolve_peak(peak_memory)
    console.print(build_table(entries))
    console.print(
        f"[bold]Logged[/bold]: {len(entries)} entries. "
        f"[bold]Peak memory usage[/bold]: {format_size(peak)}."
    )


__all__ = [
    "render_html",
    "format_report",
    "log_report",
    "build_table",
    "print_report",
    "COLUMNS",
    "PLACEHOLDER",
]
