from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class AppConfig:
    project_marker: str = "package.json"
    dependency_dir: str = "node_modules"
    manifest_name: str = "package.json"
    report_path: str = "results.txt"
    workers: int = 1
    strict: bool = True
    scoped_packages: bool = False
    top_count: int = 15

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectMarker": self.project_marker,
            "dependencyDir": self.dependency_dir,
            "manifestName": self.manifest_name,
            "reportPath": self.report_path,
            "workers": self.workers,
            "strict": self.strict,
            "scopedPackages": self.scoped_packages,
            "topCount": self.top_count,
        }


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    return AppConfig(
        project_marker=str(data.get("projectMarker", defaults.project_marker)),
        dependency_dir=str(data.get("dependencyDir", defaults.dependency_dir)),
        manifest_name=str(data.get("manifestName", defaults.manifest_name)),
        report_path=str(data.get("reportPath", defaults.report_path)),
        workers=max(1, int(data.get("workers", defaults.workers))),
        strict=bool(data.get("strict", defaults.strict)),
        scoped_packages=bool(data.get("scopedPackages", defaults.scoped_packages)),
        top_count=max(1, int(data.get("topCount", defaults.top_count))),
    )
