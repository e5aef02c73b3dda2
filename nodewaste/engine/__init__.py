from __future__ import annotations

from nodewaste.engine.aggregator import Aggregator, finalize, list_projects, resolve_root
from nodewaste.engine.manifest import read_manifest
from nodewaste.engine.sizing import dir_size
from nodewaste.engine.traverser import traverse_packages

__all__ = [
    "Aggregator",
    "dir_size",
    "finalize",
    "list_projects",
    "read_manifest",
    "resolve_root",
    "traverse_packages",
]
