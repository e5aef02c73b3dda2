from __future__ import annotations

import json
import posixpath
from typing import Any

from result import Err, Ok, Result

from nodewaste.models.usage import AnalysisError, AnalysisErrorCode, PackageManifest
from nodewaste.services.fs import DEFAULT_FS, FileSystem

MANIFEST_NAME = "package.json"

ManifestResult = Result[PackageManifest | None, AnalysisError]


def _invalid(path: str, message: str) -> Err[AnalysisError]:
    return Err(AnalysisError(code=AnalysisErrorCode.INVALID_MANIFEST, path=path, message=message))


def _required_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def read_manifest(
    package_dir: str,
    fs: FileSystem = DEFAULT_FS,
    manifest_name: str = MANIFEST_NAME,
) -> ManifestResult:
    """Read the manifest inside *package_dir*.

    ``Ok(None)`` means the directory has no manifest and should be skipped.
    Anything else that goes wrong, including ``name`` or ``version`` being
    absent or not strings, is an ``Err``.
    """
    path = posixpath.join(package_dir, manifest_name)
    try:
        raw = fs.read_text(path)
    except FileNotFoundError:
        return Ok(None)
    except OSError as exc:
        return Err(
            AnalysisError(
                code=AnalysisErrorCode.MANIFEST_UNREADABLE,
                path=path,
                message=f"Cannot read manifest: {exc}",
            )
        )
    except ValueError as exc:
        return _invalid(path, f"Manifest is not valid text: {exc}")

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        return _invalid(path, f"Manifest is not valid JSON: {exc}")
    if not isinstance(payload, dict):
        return _invalid(path, "Manifest must be a JSON object")

    name = _required_str(payload, "name")
    if name is None:
        return _invalid(path, "Manifest field 'name' is missing or not a string")
    version = _required_str(payload, "version")
    if version is None:
        return _invalid(path, "Manifest field 'version' is missing or not a string")
    return Ok(PackageManifest(name=name, version=version))
