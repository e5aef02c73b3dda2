from __future__ import annotations

import pytest

from nodewaste.models.usage import AggregatedUsage, UsageRecord
from nodewaste.services.formatting import format_bytes, format_report_line, relative_bar


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (9, "9 B"),
        (10, "10 B"),
        (999, "999 B"),
        (1000, "1.0 kB"),
        (1024, "1.0 kB"),
        (2048, "2.0 kB"),
        (12345, "12 kB"),
        (1_500_000, "1.5 MB"),
        (3_000_000_000, "3.0 GB"),
    ],
)
def test_format_bytes(size: int, expected: str) -> None:
    assert format_bytes(size) == expected


def test_format_report_line() -> None:
    records = tuple(UsageRecord("left-pad", "1.0.0", f"/p{idx}/node_modules/left-pad", 1024) for idx in range(2))
    row = AggregatedUsage(name="left-pad", version="1.0.0", records=records, size_bytes=1024)

    assert format_report_line(row) == "left-pad@1.0.0: 2 (1.0 kB -> 2.0 kB)"


def test_relative_bar() -> None:
    assert relative_bar(50, 100, width=4) == "██░░"
    assert relative_bar(1, 0) == ""
