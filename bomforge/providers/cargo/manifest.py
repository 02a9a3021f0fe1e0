"""Cargo.toml loading, project identity and ignore detection."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog

from bomforge.exceptions import (
    MalformedManifestError,
    ManifestNotFoundError,
    MissingProjectIdentityError,
)
from bomforge.ignore import contains_ignore_pattern
from bomforge.providers.base import ProjectInfo

log = structlog.get_logger("bomforge.provider.cargo")

MANIFEST_NAME = "Cargo.toml"

# Identity of a root that declares no version of its own.
DEFAULT_VERSION = "1.0.0"


@dataclass(frozen=True)
class CargoManifest:
    path: Path
    text: str
    data: dict[str, Any]


def load_manifest(path: Path) -> CargoManifest:
    """Read and parse *path*.

    Raises ``ManifestNotFoundError`` if it is not a regular file and
    ``MalformedManifestError`` if it is empty, not UTF-8 or not TOML.
    """
    path = Path(path)
    if not path.is_file():
        raise ManifestNotFoundError(f"{MANIFEST_NAME} not found: {path}")

    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedManifestError(f"Invalid {MANIFEST_NAME} encoding: {exc}") from exc
    except OSError as exc:
        raise ManifestNotFoundError(f"Cannot read {path}: {exc}") from exc

    if not text.strip():
        raise MalformedManifestError(f"Invalid {MANIFEST_NAME} format: file is empty ({path})")

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedManifestError(f"Invalid {MANIFEST_NAME} format: {exc}") from exc

    return CargoManifest(path=path, text=text, data=data)


def _table(data: dict[str, Any], *keys: str) -> dict[str, Any] | None:
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current if isinstance(current, dict) else None


def _workspace_version(data: dict[str, Any]) -> str | None:
    ws_package = _table(data, "workspace", "package")
    version = ws_package.get("version") if ws_package else None
    return version if isinstance(version, str) else None


def parse_project_info(manifest: CargoManifest) -> ProjectInfo:
    """Derive the project identity.

    ``[package]`` wins over ``[workspace]``. A package version of
    ``{ workspace = true }`` inherits ``[workspace.package].version``. A
    workspace without a package is named after its directory, since
    workspaces cannot declare a name.
    """
    data = manifest.data
    package = _table(data, "package")
    name = package.get("name") if package else None

    if isinstance(name, str):
        version_value = package.get("version")
        version: str | None = None
        if isinstance(version_value, str):
            version = version_value
        elif isinstance(version_value, dict) and version_value.get("workspace") is True:
            version = _workspace_version(data)
        info = ProjectInfo(name=name, version=version or DEFAULT_VERSION)
        log.debug("cargo.project_info", source="package", name=info.name, version=info.version)
        return info

    if isinstance(data.get("workspace"), dict):
        dir_name = manifest.path.resolve().parent.name
        info = ProjectInfo(name=dir_name, version=_workspace_version(data) or DEFAULT_VERSION)
        log.debug("cargo.project_info", source="workspace", name=info.name, version=info.version)
        return info

    raise MissingProjectIdentityError(
        f"Invalid {MANIFEST_NAME}: no [package] or [workspace] section found ({manifest.path})"
    )


def declared_dependency_names(manifest: CargoManifest) -> set[str]:
    """Names from ``[dependencies]``, ``[workspace.dependencies]`` and
    ``[target.<cfg>.dependencies]``."""
    data = manifest.data
    tables = [_table(data, "dependencies"), _table(data, "workspace", "dependencies")]
    targets = _table(data, "target") or {}
    tables.extend(_table(targets, cfg, "dependencies") for cfg in targets)

    names: set[str] = set()
    for table in tables:
        if table:
            names.update(table.keys())
    return names


def _line_declares(stripped: str, name: str) -> bool:
    # [dependencies.name] / [workspace.dependencies.name]
    if stripped.startswith("[") and f".{name}]" in stripped:
        return True
    # name = "1.0" / name= "1.0" / "name" = "1.0"
    return (
        stripped.startswith(f"{name} ")
        or stripped.startswith(f"{name}=")
        or stripped.startswith(f'"{name}"')
    )


def find_ignored_dependencies(manifest: CargoManifest) -> frozenset[str]:
    """Declared dependencies whose declaration line carries an ignore sentinel.

    tomllib drops comments, so this scans the raw text line by line.
    """
    declared = declared_dependency_names(manifest)
    ignored: set[str] = set()
    for line in manifest.text.splitlines():
        stripped = line.strip()
        if not stripped or not contains_ignore_pattern(line):
            continue
        ignored.update(name for name in declared if _line_declares(stripped, name))

    log.debug("cargo.ignored_dependencies", declared=len(declared), ignored=sorted(ignored))
    return frozenset(ignored)
