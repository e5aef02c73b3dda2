from __future__ import annotations

from nodewaste.services.fs import DEFAULT_FS, FileSystem


def dir_size(path: str, fs: FileSystem = DEFAULT_FS) -> int:
    """Sum the sizes of every non-directory entry below *path*.

    Directories count for nothing themselves. Symlinks are not followed, so a
    link contributes its own size. Any listing or stat failure raises
    ``OSError``; there is no partial result.
    """
    total = 0
    stack = [path]
    while stack:
        current = stack.pop()
        for entry in fs.scandir(current):
            st = entry.stat
            if st is None:
                raise OSError(f"Cannot stat '{entry.path}'")
            if st.is_dir:
                stack.append(entry.path)
            else:
                total += st.size
    return total
