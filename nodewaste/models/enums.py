from __future__ import annotations

from enum import Enum


class IssueScope(str, Enum):
    PACKAGE = "package"
    PROJECT = "project"
