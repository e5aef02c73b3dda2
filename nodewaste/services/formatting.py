from __future__ import annotations

import math

from nodewaste.models.usage import AggregatedUsage

UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB"]
BASE = 1000


def format_bytes(size: int) -> str:
    """Decimal (SI) size, e.g. ``1024 -> "1.0 kB"`` and ``12345 -> "12 kB"``."""
    if size < 10:
        return f"{max(0, size)} B"
    value = float(size)
    unit = 0
    while value >= BASE and unit < len(UNITS) - 1:
        value /= BASE
        unit += 1
    rounded = math.floor(value * 10 + 0.5) / 10
    if rounded < 10:
        return f"{rounded:.1f} {UNITS[unit]}"
    return f"{rounded:.0f} {UNITS[unit]}"


def format_report_line(row: AggregatedUsage) -> str:
    return (
        f"{row.name}@{row.version}: {row.instance_count} "
        f"({format_bytes(row.size_bytes)} -> {format_bytes(row.total_bytes)})"
    )


def relative_bar(size: int, total: int, width: int = 16) -> str:
    if width <= 0 or total <= 0:
        return ""
    ratio = min(1.0, max(0.0, size / total))
    filled = int(round(ratio * width))
    return "█" * filled + "░" * max(0, width - filled)
