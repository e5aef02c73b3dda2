from __future__ import annotations

import logging
import posixpath
import queue
import threading
import time
from dataclasses import dataclass, field

from result import Err, Ok

from nodewaste.config.defaults import default_config
from nodewaste.config.schema import AppConfig
from nodewaste.engine.traverser import list_dir, traverse_packages
from nodewaste.models.enums import IssueScope
from nodewaste.models.usage import (
    AggregatedUsage,
    AnalysisError,
    AnalysisErrorCode,
    AnalysisResult,
    IdentityTable,
    ProgressCallback,
    Project,
    ScanIssue,
    ScanStats,
    UsageReport,
)
from nodewaste.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ProjectOutcome:
    table: IdentityTable
    eligible: bool = False
    entries: int = 0
    issues: list[ScanIssue] = field(default_factory=list)
    error: AnalysisError | None = None


def resolve_root(path: str, fs: FileSystem) -> str | AnalysisError:
    """Validate and resolve the directory holding the projects.

    The root itself may be a symlink; it is resolved to its target before
    being checked. Returns the resolved path, or an ``AnalysisError`` on failure.
    """
    resolved = fs.realpath(fs.absolute(fs.expanduser(path)))
    if not fs.exists(resolved):
        return AnalysisError(
            code=AnalysisErrorCode.NOT_FOUND,
            path=resolved,
            message="Path does not exist",
        )

    try:
        root_stat = fs.stat(resolved)
    except OSError as exc:
        return AnalysisError(
            code=AnalysisErrorCode.ROOT_STAT_FAILED,
            path=resolved,
            message=f"Cannot stat root: {exc}",
        )
    if not root_stat.is_dir:
        return AnalysisError(
            code=AnalysisErrorCode.NOT_DIRECTORY,
            path=resolved,
            message="Path is not a directory",
        )
    return resolved


def list_projects(root: str, fs: FileSystem) -> list[Project] | AnalysisError:
    entries = list_dir(root, fs)
    if isinstance(entries, AnalysisError):
        return entries
    return [
        Project(name=entry.name, path=entry.path)
        for entry in entries
        if entry.stat is not None and entry.stat.is_dir
    ]


def merge_tables(target: IdentityTable, source: IdentityTable) -> None:
    for identity, records in source.items():
        target.setdefault(identity, []).extend(records)


def finalize(table: IdentityTable) -> list[AggregatedUsage]:
    """Collapse *table* into report rows sorted by package name, then version.

    Each row is sized by its first discovered install.
    """
    rows = [
        AggregatedUsage(
            name=records[0].name,
            version=records[0].version,
            records=tuple(records),
            size_bytes=records[0].size_bytes,
        )
        for records in table.values()
        if records
    ]
    rows.sort(key=lambda row: (row.name, row.version))
    return rows


class Aggregator:
    def __init__(self, config: AppConfig | None = None, fs: FileSystem = DEFAULT_FS) -> None:
        self._config = config or default_config()
        self._fs = fs

    @property
    def workers(self) -> int:
        return max(1, self._config.workers)

    def _process(self, project: Project, table: IdentityTable) -> _ProjectOutcome:
        config = self._config
        outcome = _ProjectOutcome(table=table)

        entries = list_dir(project.path, self._fs)
        if isinstance(entries, AnalysisError):
            outcome.error = entries
            return outcome

        names = {entry.name for entry in entries}
        if config.project_marker not in names or config.dependency_dir not in names:
            logger.debug(
                "Project %s is missing %s or %s, skipping",
                project.path,
                config.project_marker,
                config.dependency_dir,
            )
            return outcome

        outcome.eligible = True
        result = traverse_packages(
            posixpath.join(project.path, config.dependency_dir),
            table,
            self._fs,
            manifest_name=config.manifest_name,
            scoped_packages=config.scoped_packages,
            issues=None if config.strict else outcome.issues,
        )
        if isinstance(result, Err):
            outcome.error = result.unwrap_err()
        else:
            outcome.entries = result.unwrap()
            logger.debug("Processed %d entries in %s", outcome.entries, project.path)
        return outcome

    def _process_guarded(self, project: Project, table: IdentityTable) -> _ProjectOutcome:
        try:
            return self._process(project, table)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unhandled failure while processing %s", project.path, exc_info=True)
            return _ProjectOutcome(
                table=table,
                error=AnalysisError(
                    code=AnalysisErrorCode.INTERNAL,
                    path=project.path,
                    message=f"Unhandled failure: {exc}",
                ),
            )

    def _run_sequential(
        self,
        projects: list[Project],
        table: IdentityTable,
        progress_callback: ProgressCallback | None,
    ) -> list[_ProjectOutcome | None]:
        outcomes: list[_ProjectOutcome | None] = []
        for idx, project in enumerate(projects):
            outcome = self._process_guarded(project, table)
            outcomes.append(outcome)
            if progress_callback is not None:
                progress_callback(project.path, idx + 1, len(projects))
            if outcome.error is not None and self._config.strict:
                break
        return outcomes

    def _run_threaded(
        self,
        projects: list[Project],
        table: IdentityTable,
        progress_callback: ProgressCallback | None,
    ) -> list[_ProjectOutcome | None]:
        outcomes: list[_ProjectOutcome | None] = [None] * len(projects)
        q: queue.Queue[int | None] = queue.Queue()
        for idx in range(len(projects)):
            q.put(idx)

        lock = threading.Lock()
        cancelled = threading.Event()
        examined = 0

        def run_worker() -> None:
            nonlocal examined
            while True:
                idx = q.get()
                if idx is None:
                    q.task_done()
                    break
                if cancelled.is_set():
                    q.task_done()
                    continue

                project = projects[idx]
                outcome = self._process_guarded(project, {})
                try:
                    outcomes[idx] = outcome
                    if outcome.error is not None and self._config.strict:
                        cancelled.set()
                    with lock:
                        examined += 1
                        done = examined
                    if progress_callback is not None:
                        progress_callback(project.path, done, len(projects))
                finally:
                    q.task_done()

        threads = [threading.Thread(target=run_worker, daemon=True) for _ in range(self.workers)]
        for thread in threads:
            thread.start()
        q.join()
        for _ in threads:
            q.put(None)
        for thread in threads:
            thread.join()

        # Merge on this thread in project order so discovery order matches a sequential run.
        for outcome in outcomes:
            if outcome is not None and outcome.error is None:
                merge_tables(table, outcome.table)
        return outcomes

    def aggregate(self, path: str, progress_callback: ProgressCallback | None = None) -> AnalysisResult:
        start = time.perf_counter()
        resolved = resolve_root(path, self._fs)
        if isinstance(resolved, AnalysisError):
            return Err(resolved)

        projects = list_projects(resolved, self._fs)
        if isinstance(projects, AnalysisError):
            return Err(projects)
        logger.info("found %d projects to check", len(projects))
        if progress_callback is not None:
            progress_callback(resolved, 0, len(projects))

        table: IdentityTable = {}
        if self.workers > 1 and len(projects) > 1:
            outcomes = self._run_threaded(projects, table, progress_callback)
        else:
            outcomes = self._run_sequential(projects, table, progress_callback)

        stats = ScanStats(projects_found=len(projects))
        issues: list[ScanIssue] = []
        for project, outcome in zip(projects, outcomes):
            if outcome is None:
                continue
            if outcome.error is not None:
                if self._config.strict:
                    return Err(outcome.error)
                logger.warning("Skipping project %s: %s", project.path, outcome.error.message)
                issues.append(outcome.error.as_issue(IssueScope.PROJECT))
            stats.projects_eligible += int(outcome.eligible)
            stats.entries_processed += outcome.entries
            issues.extend(outcome.issues)

        stats.elapsed_seconds = time.perf_counter() - start
        logger.info("processed %d entries in %.2fs", stats.entries_processed, stats.elapsed_seconds)
        return Ok(UsageReport(root=resolved, rows=finalize(table), stats=stats, issues=issues))
