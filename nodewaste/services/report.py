from __future__ import annotations

import heapq

from result import Err, Ok, Result
from rich.console import Console
from rich.table import Table

from nodewaste.models.usage import AnalysisError, AnalysisErrorCode, UsageReport
from nodewaste.services.formatting import format_bytes, format_report_line, relative_bar
from nodewaste.services.fs import DEFAULT_FS, FileSystem


def render_report(report: UsageReport) -> str:
    return "".join(f"{format_report_line(row)}\n" for row in report.rows)


def write_report(report: UsageReport, path: str, fs: FileSystem = DEFAULT_FS) -> Result[str, AnalysisError]:
    """Write the report to *path*, replacing any previous one. Returns the absolute path."""
    resolved = fs.absolute(fs.expanduser(path))
    try:
        fs.write_text(resolved, render_report(report))
    except OSError as exc:
        return Err(
            AnalysisError(
                code=AnalysisErrorCode.REPORT_WRITE_FAILED,
                path=resolved,
                message=f"Cannot write report: {exc}",
            )
        )
    return Ok(resolved)


def render_summary(console: Console, report: UsageReport, top_n: int) -> None:
    total = report.total_bytes
    table = Table(title="Largest Packages", header_style="bold cyan")
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Installs", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Share")

    for row in heapq.nlargest(top_n, report.rows, key=lambda r: r.total_bytes):
        table.add_row(
            row.name,
            row.version,
            f"{row.instance_count:,}",
            format_bytes(row.size_bytes),
            format_bytes(row.total_bytes),
            relative_bar(row.total_bytes, total),
        )

    table.add_section()
    installs = sum(row.instance_count for row in report.rows)
    table.add_row("[bold]Total[/bold]", "", f"[bold]{installs:,}[/bold]", "", f"[bold]{format_bytes(total)}[/bold]", "")
    table.add_section()
    table.add_row(f"[bold]{len(report.rows):,}[/bold] unique packages", "", "", "", "", "")
    table.add_row(f"[bold]{report.stats.projects_eligible:,}[/bold] projects", "", "", "", "", "")

    console.print(table)
