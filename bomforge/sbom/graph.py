"""Append-only SBOM dependency graph and its CycloneDX serialization."""

from __future__ import annotations

import json
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any

from bomforge import __version__
from bomforge.sbom.purl import PackageURL

CYCLONEDX_MEDIA_TYPE = "application/vnd.cyclonedx+json"
CYCLONEDX_SPEC_VERSION = "1.4"


class SbomGraph:
    """Root package plus a deduplicated set of ``parent -> child`` edges.

    Nodes and edges are keyed by purl coordinates. Adding an edge that
    already exists is a no-op. One graph belongs to one analysis call.
    """

    def __init__(self) -> None:
        self._root: PackageURL | None = None
        self._nodes: dict[str, PackageURL] = {}
        # coordinates -> ordered child coordinates (dict used as ordered set)
        self._children: dict[str, dict[str, None]] = {}
        self._edge_count = 0

    @property
    def root(self) -> PackageURL | None:
        return self._root

    def set_root(self, purl: PackageURL) -> None:
        self._root = purl
        self._register(purl)

    def add_edge(self, parent: PackageURL, child: PackageURL) -> bool:
        """Record ``parent -> child``. Returns False if it was already present."""
        parent_key = self._register(parent)
        child_key = self._register(child)
        children = self._children[parent_key]
        if child_key in children:
            return False
        children[child_key] = None
        self._edge_count += 1
        return True

    def has_edge(self, parent: PackageURL, child: PackageURL) -> bool:
        return child.coordinates in self._children.get(parent.coordinates, {})

    @property
    def edge_count(self) -> int:
        return self._edge_count

    @property
    def edges(self) -> list[tuple[PackageURL, PackageURL]]:
        return [
            (self._nodes[parent], self._nodes[child])
            for parent, children in self._children.items()
            for child in children
        ]

    def children_of(self, purl: PackageURL) -> list[PackageURL]:
        return [self._nodes[c] for c in self._children.get(purl.coordinates, {})]

    def components(self) -> list[PackageURL]:
        """Every node reachable from the root, root excluded, in BFS order."""
        if self._root is None:
            return []
        root_key = self._root.coordinates
        seen = {root_key}
        order: list[PackageURL] = []
        queue = deque([root_key])
        while queue:
            for child in self._children.get(queue.popleft(), {}):
                if child not in seen:
                    seen.add(child)
                    order.append(self._nodes[child])
                    queue.append(child)
        return order

    # ── serialization ────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Build a CycloneDX JSON document."""
        if self._root is None:
            raise ValueError("SBOM graph has no root")

        bom: dict[str, Any] = {
            "bomFormat": "CycloneDX",
            "specVersion": CYCLONEDX_SPEC_VERSION,
            "serialNumber": f"urn:uuid:{uuid.uuid4()}",
            "version": 1,
            "metadata": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "tools": [{"vendor": "bomforge", "name": "bomforge", "version": __version__}],
                "component": _component(self._root, "application"),
            },
            "components": [_component(purl, "library") for purl in self.components()],
        }

        # every recorded edge is serialized, reachable or not; root first
        root_key = self._root.coordinates
        keys = [root_key, *(k for k in self._children if k != root_key)]
        bom["dependencies"] = [
            {"ref": key, "dependsOn": list(self._children[key])} for key in keys
        ]
        return bom

    def serialize(self) -> bytes:
        return json.dumps(self.to_dict(), indent=2).encode("utf-8")

    # ── internals ────────────────────────────────────────────────────────

    def _register(self, purl: PackageURL) -> str:
        key = purl.coordinates
        self._nodes.setdefault(key, purl)
        self._children.setdefault(key, {})
        return key


def _component(purl: PackageURL, component_type: str) -> dict[str, Any]:
    component: dict[str, Any] = {
        "type": component_type,
        "bom-ref": purl.coordinates,
        "name": purl.name,
        "purl": purl.coordinates,
    }
    if purl.version:
        component["version"] = purl.version
    if purl.namespace:
        component["group"] = purl.namespace
    return component


def new_graph() -> SbomGraph:
    return SbomGraph()
