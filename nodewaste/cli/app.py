from __future__ import annotations

import logging
from dataclasses import replace
from typing import Annotated, NoReturn

import typer
from result import Err
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from nodewaste.config.defaults import default_config
from nodewaste.config.loader import load_config, sample_config_json
from nodewaste.engine import Aggregator
from nodewaste.models.usage import AnalysisError, AnalysisResult
from nodewaste.services.formatting import format_bytes
from nodewaste.services.report import render_summary, write_report

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _truncate_path(path: str, max_width: int = 60) -> str:
    if len(path) <= max_width:
        return path
    keep = max_width - 3
    return f"...{path[-keep:]}"


def _aggregate_with_progress(aggregator: Aggregator, path: str) -> AnalysisResult:
    with Progress(
        SpinnerColumn(style="bold #8abeb7"),
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Listing projects...", total=None)

        def on_progress(current_path: str, examined: int, total: int) -> None:
            if examined == 0:
                progress.console.print(f"found {total:,} projects to check")
            progress.update(
                task,
                completed=examined,
                total=total,
                description=escape(_truncate_path(current_path)),
            )

        return aggregator.aggregate(path, progress_callback=on_progress)


def _fail(error: AnalysisError) -> NoReturn:
    console.print(f"[red]{escape(error.message)}: {escape(error.path)}[/]")
    raise typer.Exit(1)


def run(
    path: Annotated[str | None, typer.Argument(help="Directory holding the projects to analyze.")] = None,
    output: Annotated[str | None, typer.Option("--output", "-o", help="Where to write the report.")] = None,
    workers: Annotated[int | None, typer.Option("--workers", "-w", help="Number of projects scanned at once.")] = None,
    keep_going: Annotated[
        bool, typer.Option("--keep-going", "-k", help="Record broken packages and projects instead of aborting.")
    ] = False,
    scoped: Annotated[bool, typer.Option("--scoped", help="Also count packages inside @scope directories.")] = False,
    summary: Annotated[bool, typer.Option("--summary", "-s", help="Show the largest packages.")] = False,
    top: Annotated[int | None, typer.Option("--top", help="Number of packages in the summary.")] = None,
    sample_config: Annotated[bool, typer.Option("--sample-config", help="Print sample config JSON.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    if sample_config:
        console.print(sample_config_json())
        raise typer.Exit(0)

    if not path:
        console.print("[red]No directory given, exiting...[/]")
        raise typer.Exit(1)

    _configure_logging(verbose)

    config_result = load_config()
    if isinstance(config_result, Err):
        console.print(f"[yellow]{escape(config_result.unwrap_err())} Using defaults.[/]")
        config = default_config()
    else:
        config = config_result.unwrap()

    overrides: dict[str, object] = {}
    if output is not None:
        overrides["report_path"] = output
    if workers is not None:
        overrides["workers"] = max(1, workers)
    if keep_going:
        overrides["strict"] = False
    if scoped:
        overrides["scoped_packages"] = True
    if top is not None:
        overrides["top_count"] = max(1, top)
        summary = True
    if overrides:
        config = replace(config, **overrides)

    scan_result = _aggregate_with_progress(Aggregator(config), path)
    if isinstance(scan_result, Err):
        _fail(scan_result.unwrap_err())
    report = scan_result.unwrap()

    console.print(f"processed {report.stats.entries_processed:,} entries in {report.stats.elapsed_seconds:.2f}s")
    if report.issues:
        console.print(f"[red]{len(report.issues):,} packages or projects could not be analyzed:[/red]")
        for issue in report.issues:
            console.print(f"[red]  {issue.scope.value} {escape(issue.path)}: {escape(issue.message)}[/red]")

    console.print("formatting results...")
    write_result = write_report(report, config.report_path)
    if isinstance(write_result, Err):
        _fail(write_result.unwrap_err())
    logger.info("Report written to %s", write_result.unwrap())

    if summary:
        render_summary(console, report, config.top_count)
    console.print(f"total space used: {format_bytes(report.total_bytes)}")


def cli() -> None:
    typer.run(run)


if __name__ == "__main__":
    cli()
