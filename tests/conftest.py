"""Shared pytest fixtures for bomforge tests."""

from __future__ import annotations

from typing import Any

import pytest

from bomforge.metadata import ResolvedMetadata

_REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"


class MetadataBuilder:
    """Build ``cargo metadata``-shaped documents for tests."""

    def __init__(self) -> None:
        self._packages: dict[str, dict[str, Any]] = {}
        self._nodes: dict[str, list[dict[str, Any]]] = {}

    def package(self, name: str, version: str = "1.0.0", *, node: bool = True) -> str:
        pkg_id = f"{_REGISTRY}#{name}@{version}"
        self._packages[pkg_id] = {
            "id": pkg_id,
            "name": name,
            "version": version,
            "license": "MIT",
            "source": _REGISTRY,
        }
        if node:
            self._nodes.setdefault(pkg_id, [])
        return pkg_id

    def depend(self, parent: str, child: str, *kinds: str | None, name: str | None = None) -> None:
        if name is None:
            name = child.split("#", 1)[1].split("@", 1)[0].replace("-", "_")
        dep_kinds = [{"kind": k, "target": None} for k in (kinds or (None,))]
        self._nodes.setdefault(parent, []).append({"name": name, "pkg": child, "dep_kinds": dep_kinds})

    def document(self, root: str | None = None, members: list[str] | None = None) -> dict[str, Any]:
        return {
            "packages": list(self._packages.values()),
            "workspace_members": members if members is not None else ([root] if root else []),
            "resolve": {
                "root": root,
                "nodes": [
                    {"id": node_id, "dependencies": [d["pkg"] for d in deps], "deps": deps, "features": []}
                    for node_id, deps in self._nodes.items()
                ],
            },
            "target_directory": "/tmp/target",
            "version": 1,
            "workspace_root": "/tmp/ws",
        }

    def build(self, root: str | None = None, members: list[str] | None = None) -> ResolvedMetadata:
        return ResolvedMetadata.model_validate(self.document(root, members))


@pytest.fixture
def builder() -> MetadataBuilder:
    return MetadataBuilder()
