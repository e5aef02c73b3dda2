from __future__ import annotations

import logging
from collections import deque

from result import Err, Ok, Result

from nodewaste.engine.manifest import MANIFEST_NAME, read_manifest
from nodewaste.engine.sizing import dir_size
from nodewaste.models.enums import IssueScope
from nodewaste.models.usage import (
    AnalysisError,
    AnalysisErrorCode,
    IdentityTable,
    ScanIssue,
    UsageRecord,
)
from nodewaste.services.fs import DEFAULT_FS, DirEntry, FileSystem, sorted_entries

logger = logging.getLogger(__name__)

SCOPE_PREFIX = "@"


def list_dir(path: str, fs: FileSystem) -> list[DirEntry] | AnalysisError:
    """Sorted listing of *path*, or a ``LIST_FAILED`` error."""
    try:
        return sorted_entries(fs, path)
    except OSError as exc:
        return AnalysisError(
            code=AnalysisErrorCode.LIST_FAILED,
            path=path,
            message=f"Cannot list directory: {exc}",
        )


def _candidates(entries: list[DirEntry]) -> list[DirEntry]:
    # Entries that could not be stat'ed are kept so they surface as errors.
    return [entry for entry in entries if entry.stat is None or entry.stat.is_dir]


def _measure(entry: DirEntry, fs: FileSystem) -> int | AnalysisError:
    try:
        return dir_size(entry.path, fs)
    except OSError as exc:
        return AnalysisError(
            code=AnalysisErrorCode.SIZE_FAILED,
            path=entry.path,
            message=f"Cannot measure package size: {exc}",
        )


def traverse_packages(
    dependency_dir: str,
    table: IdentityTable,
    fs: FileSystem = DEFAULT_FS,
    *,
    manifest_name: str = MANIFEST_NAME,
    scoped_packages: bool = False,
    issues: list[ScanIssue] | None = None,
) -> Result[int, AnalysisError]:
    """Record every package installed directly under *dependency_dir* into *table*.

    Nested dependency trees inside a package are not visited. Returns the
    number of entries listed, skipped ones included.

    When *issues* is given, a failing package is recorded there and the walk
    moves on; otherwise the first failure is returned and records already
    added to *table* stay in place.
    """
    entries = list_dir(dependency_dir, fs)
    if isinstance(entries, AnalysisError):
        return Err(entries)

    processed = len(entries)
    pending = deque(_candidates(entries))
    while pending:
        entry = pending.popleft()
        failure: AnalysisError | None = None

        if entry.stat is None:
            failure = AnalysisError(
                code=AnalysisErrorCode.LIST_FAILED,
                path=entry.path,
                message="Cannot stat package directory",
            )
        else:
            manifest_result = read_manifest(entry.path, fs, manifest_name)
            if isinstance(manifest_result, Err):
                failure = manifest_result.unwrap_err()
            elif (manifest := manifest_result.unwrap()) is None:
                if not (scoped_packages and entry.name.startswith(SCOPE_PREFIX)):
                    logger.debug("No %s in %s, skipping", manifest_name, entry.path)
                    continue
                scoped = list_dir(entry.path, fs)
                if isinstance(scoped, AnalysisError):
                    failure = scoped
                else:
                    processed += len(scoped)
                    pending.extendleft(reversed(_candidates(scoped)))
                    continue
            else:
                size = _measure(entry, fs)
                if isinstance(size, AnalysisError):
                    failure = size
                else:
                    record = UsageRecord(
                        name=manifest.name,
                        version=manifest.version,
                        location=entry.path,
                        size_bytes=size,
                    )
                    table.setdefault(record.identity, []).append(record)
                    continue

        if issues is None:
            return Err(failure)
        logger.warning("Skipping %s: %s", failure.path, failure.message)
        issues.append(failure.as_issue(IssueScope.PACKAGE))

    return Ok(processed)
