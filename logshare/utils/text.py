"""Text helpers for logshare.

Pure functions with no I/O.
"""

from __future__ import annotations

_BYTE_UNITS = ("KB", "MB", "GB", "TB")


def format_byte_count(size: int) -> str:
    """Format a byte count for display using decimal units.

    Examples: ``0`` -> ``"Zero KB"``, ``512`` -> ``"512 bytes"``,
    ``1_500_000`` -> ``"1.5 MB"``.
    """
    if size <= 0:
        return "Zero KB"
    if size < 1000:
        return "1 byte" if size == 1 else f"{size} bytes"
    value = float(size)
    unit = _BYTE_UNITS[0]
    for unit in _BYTE_UNITS:
        value /= 1000.0
        if value < 1000:
            break
    if value >= 100 or unit == "KB":
        return f"{value:.0f} {unit}"
    return f"{value:.1f} {unit}"


def truncate(text: str, limit: int, marker: str = "…") -> str:
    """Trim ``text`` to at most ``limit`` characters, appending ``marker`` when cut."""
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    return text[: max(limit - len(marker), 0)] + marker


def indent(text: str, prefix: str = "  ") -> str:
    """Prefix every line of ``text``."""
    return "\n".join(prefix + line if line else line for line in text.splitlines())
