from __future__ import annotations

import json
import tomllib
from typing import TYPE_CHECKING, Any

from semver import VersionInfo

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding='utf-8'))


def _load_toml(path: Path) -> Any:
    with path.open('rb') as fh:
        return tomllib.load(fh)


def _json_version(document: Any) -> Any:
    return document.get('version') if isinstance(document, dict) else None


def _pyproject_version(document: Any) -> Any:
    project = document.get('project') if isinstance(document, dict) else None
    return project.get('version') if isinstance(project, dict) else None


_READERS: dict[str, tuple[Callable[[Path], Any], Callable[[Any], Any]]] = {
    '.json': (_load_json, _json_version),
    '.toml': (_load_toml, _pyproject_version),
}


def parse_manifest_version(manifest: Path) -> str | None:
    """Read and validate the semantic version declared by a manifest file.

    `*.json` manifests (e.g. `package.json`) use the top-level `version` key;
    `*.toml` manifests (e.g. `pyproject.toml`) use `[project].version`.

    Returns:
        The normalized version string, or None if the file is unreadable,
        malformed, of an unknown kind, or declares no valid semantic version.
    """
    reader = _READERS.get(manifest.suffix)
    if reader is None:
        return None
    load, extract = reader
    try:
        document = load(manifest)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, tomllib.TOMLDecodeError):
        return None

    raw = extract(document)
    if not isinstance(raw, str):
        return None
    try:
        return str(VersionInfo.parse(raw.strip()))
    except ValueError:
        return None


def find_package_version(directory: Path, manifest_files: Sequence[str]) -> str | None:
    """Return the version of the package in `directory`, if any.

    The first manifest name in `manifest_files` that exists in `directory`
    decides; later names are not consulted even if the first is malformed.
    """
    for name in manifest_files:
        manifest = directory / name
        if manifest.is_file():
            return parse_manifest_version(manifest)
    return None
