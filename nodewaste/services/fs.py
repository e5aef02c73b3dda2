from __future__ import annotations

import os
import stat as statmod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol


@dataclass(slots=True, frozen=True)
class StatResult:
    size: int
    is_dir: bool


@dataclass(slots=True, frozen=True)
class DirEntry:
    path: str
    name: str
    stat: StatResult | None = None


class FileSystem(Protocol):
    def expanduser(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def absolute(self, path: str) -> str: ...

    def realpath(self, path: str) -> str: ...

    def stat(self, path: str) -> StatResult: ...

    def scandir(self, path: str) -> Iterable[DirEntry]: ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str: ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None: ...


def _to_stat(st: os.stat_result) -> StatResult:
    return StatResult(size=st.st_size, is_dir=statmod.S_ISDIR(st.st_mode))


class OsFileSystem:
    """Apart from ``realpath``, symlinks are never followed: a link is reported as a non-directory of its own size."""

    def expanduser(self, path: str) -> str:
        return str(Path(path).expanduser())

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def absolute(self, path: str) -> str:
        return str(Path(path).absolute())

    def realpath(self, path: str) -> str:
        return os.path.realpath(path)

    def stat(self, path: str) -> StatResult:
        return _to_stat(os.stat(path, follow_symlinks=False))

    def scandir(self, path: str) -> Iterable[DirEntry]:
        with os.scandir(path) as entries:
            for e in entries:
                try:
                    sr = _to_stat(e.stat(follow_symlinks=False))
                except OSError:
                    sr = None
                yield DirEntry(path=e.path, name=e.name, stat=sr)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        Path(path).write_text(content, encoding=encoding)


DEFAULT_FS: FileSystem = OsFileSystem()


def sorted_entries(fs: FileSystem, path: str) -> list[DirEntry]:
    """List *path* ordered by entry name, so discovery order is stable across platforms."""
    return sorted(fs.scandir(path), key=lambda entry: entry.name)
