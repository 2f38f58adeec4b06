"""
Human-readable formatting of durations and byte sizes.

All durations are in milliseconds, the profiler's internal time unit.
"""

from typing import Union

Number = Union[int, float]

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND

KILOBYTE = 1024
MEGABYTE = 1024 * 1024


def format_time(ms: Number) -> str:
    """
    Pretty-print a duration given in milliseconds.

    Examples:
        >>> format_time(50)
        '50.00ms'
        >>> format_time(2000)
        '2.00s'
        >>> format_time(400000)
        '6.67m'
    """
    if ms >= MS_PER_MINUTE:
        return f"{ms / MS_PER_MINUTE:.2f}m"

    if ms >= MS_PER_SECOND:
        return f"{ms / MS_PER_SECOND:.2f}s"

    return f"{ms:.2f}ms"


def format_size(size: Number) -> str:
    """
    Pretty-print a byte count.

    Exactly 1024 bytes stays in bytes, exactly 1 MiB stays in kilobytes.

    Examples:
        >>> format_size(500)
        '500b'
        >>> format_size(2048)
        '2.00kb'
    """
    if size > MEGABYTE:
        return f"{size / MEGABYTE:.2f}mb"

    if size > KILOBYTE:
        return f"{size / KILOBYTE:.2f}kb"

    return f"{int(size)}b"


__all__ = ["format_time", "format_size", "MS_PER_SECOND", "MS_PER_MINUTE"]
