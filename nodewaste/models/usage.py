from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from result import Result

from nodewaste.models.enums import IssueScope


ProgressCallback = Callable[[str, int, int], None]


def identity_key(name: str, version: str) -> str:
    return f"{name}:{version}"


@dataclass(slots=True, frozen=True)
class Project:
    name: str
    path: str


@dataclass(slots=True, frozen=True)
class PackageManifest:
    name: str
    version: str

    @property
    def identity(self) -> str:
        return identity_key(self.name, self.version)


@dataclass(slots=True, frozen=True)
class UsageRecord:
    name: str
    version: str
    location: str
    size_bytes: int

    @property
    def identity(self) -> str:
        return identity_key(self.name, self.version)


IdentityTable = dict[str, list[UsageRecord]]


@dataclass(slots=True, frozen=True)
class AggregatedUsage:
    """All observed installs of one ``name@version``.

    ``size_bytes`` is the size of the first discovered install and stands in
    for every other install of the same identity; installs are not re-measured.
    """

    name: str
    version: str
    records: tuple[UsageRecord, ...]
    size_bytes: int

    @property
    def identity(self) -> str:
        return identity_key(self.name, self.version)

    @property
    def instance_count(self) -> int:
        return len(self.records)

    @property
    def total_bytes(self) -> int:
        return self.instance_count * self.size_bytes


@dataclass(slots=True)
class ScanStats:
    projects_found: int = 0
    projects_eligible: int = 0
    entries_processed: int = 0
    elapsed_seconds: float = 0.0


@dataclass(slots=True, frozen=True)
class ScanIssue:
    scope: IssueScope
    path: str
    message: str


@dataclass(slots=True, frozen=True)
class UsageReport:
    root: str
    rows: list[AggregatedUsage]
    stats: ScanStats
    issues: list[ScanIssue] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(row.total_bytes for row in self.rows)


class AnalysisErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_DIRECTORY = "not_directory"
    ROOT_STAT_FAILED = "root_stat_failed"
    LIST_FAILED = "list_failed"
    MANIFEST_UNREADABLE = "manifest_unreadable"
    INVALID_MANIFEST = "invalid_manifest"
    SIZE_FAILED = "size_failed"
    REPORT_WRITE_FAILED = "report_write_failed"
    INTERNAL = "internal"


@dataclass(slots=True, frozen=True)
class AnalysisError:
    code: AnalysisErrorCode
    path: str
    message: str

    def as_issue(self, scope: IssueScope) -> ScanIssue:
        return ScanIssue(scope=scope, path=self.path, message=self.message)


AnalysisResult = Result[UsageReport, AnalysisError]
