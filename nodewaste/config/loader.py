from __future__ import annotations

import json
from typing import Any

from result import Err, Ok, Result

from nodewaste.config.defaults import default_config
from nodewaste.config.schema import AppConfig, from_dict
from nodewaste.services.fs import DEFAULT_FS, FileSystem

CONFIG_PATH = "~/.config/nodewaste/config.json"

KNOWN_KEYS = frozenset(AppConfig().to_dict())

# These name a single entry inside a project or package directory.
_ENTRY_NAME_KEYS = ("projectMarker", "dependencyDir", "manifestName")


def validate_payload(payload: dict[str, Any]) -> str | None:
    """Return a description of the first problem in *payload*, or ``None``."""
    unknown = sorted(set(payload) - KNOWN_KEYS)
    if unknown:
        return f"unknown keys: {', '.join(unknown)}"
    for key in _ENTRY_NAME_KEYS:
        if key not in payload:
            continue
        value = payload[key]
        if not isinstance(value, str) or not value or "/" in value or value in (".", ".."):
            return f"'{key}' must be a plain file or directory name, got {value!r}"
    report_path = payload.get("reportPath")
    if report_path is not None and (not isinstance(report_path, str) or not report_path):
        return f"'reportPath' must be a non-empty string, got {report_path!r}"
    return None


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    resolved = path or fs.expanduser(CONFIG_PATH)
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        payload = json.loads(fs.read_text(resolved))
    except (OSError, ValueError) as exc:
        return Err(f"Failed reading config at {resolved}: {exc}.")
    if not isinstance(payload, dict):
        return Err(f"Config at {resolved} must be a JSON object.")

    problem = validate_payload(payload)
    if problem is not None:
        return Err(f"Invalid config at {resolved}: {problem}.")
    try:
        return Ok(from_dict(payload, default_config()))
    except (TypeError, ValueError) as exc:
        return Err(f"Invalid config at {resolved}: {exc}.")


def sample_config_json() -> str:
    return json.dumps(default_config().to_dict(), indent=2)
