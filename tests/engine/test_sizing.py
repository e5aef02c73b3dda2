from __future__ import annotations

import pytest

from nodewaste.engine.sizing import dir_size
from nodewaste.services.fs import DirEntry
from tests.fs_mock import MemoryFileSystem


def test_sums_files_recursively() -> None:
    fs = (
        MemoryFileSystem()
        .add_file("/pkg/a.js", size=100)
        .add_file("/pkg/lib/b.js", size=20)
        .add_file("/pkg/lib/deep/c.js", size=3)
    )

    assert dir_size("/pkg", fs) == 123


def test_empty_directory_is_zero() -> None:
    fs = MemoryFileSystem().add_dir("/pkg").add_dir("/pkg/empty")

    assert dir_size("/pkg", fs) == 0


def test_missing_directory_raises() -> None:
    fs = MemoryFileSystem()

    with pytest.raises(OSError):
        dir_size("/nope", fs)


def test_unlistable_subdirectory_aborts_walk() -> None:
    fs = MemoryFileSystem().add_file("/pkg/a.js", size=10).add_file("/pkg/private/b.js", size=10)
    fs.denied.add("/pkg/private")

    with pytest.raises(PermissionError):
        dir_size("/pkg", fs)


def test_unstatable_entry_aborts_walk() -> None:
    fs = MemoryFileSystem().add_file("/pkg/a.js", size=10)
    original_scandir = fs.scandir

    def patched_scandir(path: str) -> list[DirEntry]:
        entries = original_scandir(path)
        entries.append(DirEntry(path="/pkg/broken", name="broken", stat=None))
        return entries

    fs.scandir = patched_scandir  # type: ignore[assignment]

    with pytest.raises(OSError, match="broken"):
        dir_size("/pkg", fs)
