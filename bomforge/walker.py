"""Walk resolved metadata from the project root(s) into an SBOM graph."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

import structlog

from bomforge.exceptions import PurlError
from bomforge.layout import ProjectLayout, classify_layout
from bomforge.metadata import NodeDependency, PackageInfo, ResolvedMetadata, ResolveNode
from bomforge.sbom import PackageURL, SbomGraph

log = structlog.get_logger("bomforge.walker")


class AnalysisType(Enum):
    COMPONENT = "component"  # direct dependencies only
    STACK = "stack"  # full transitive graph


def _no_aliases(name: str) -> Iterable[str]:
    return ()


class DependencyGraphWalker:
    """Populate *sbom* with edges from a :class:`ResolvedMetadata`.

    Every candidate edge goes through two filters, in order:

    1. the dependency name (or one of its ecosystem aliases) is in
       *ignored*  -> skip;
    2. every declared kind is dev or build -> skip. An edge with no
       declared kinds, or with at least one normal kind, is kept.

    In stack mode nodes are expanded at most once (keyed by resolver node
    id) and each ``parent -> child`` edge is recorded once (keyed by the
    purl coordinates of both ends).
    """

    def __init__(
        self,
        metadata: ResolvedMetadata,
        sbom: SbomGraph,
        root: PackageURL,
        ignored: Iterable[str],
        *,
        purl_type: str,
        aliases: Callable[[str], Iterable[str]] = _no_aliases,
    ) -> None:
        self._metadata = metadata
        self._sbom = sbom
        self._root = root
        self._ignored = frozenset(ignored)
        self._purl_type = purl_type
        self._aliases = aliases
        self._packages = metadata.package_index()
        self._nodes = metadata.node_index()

    def walk(self, analysis_type: AnalysisType) -> ProjectLayout:
        """Add edges for *analysis_type*; returns the layout that was walked.

        Raises :class:`~bomforge.exceptions.LayoutError` if the metadata has
        neither a root nor workspace members.
        """
        layout = classify_layout(self._metadata)
        log.debug(
            "walker.layout",
            layout=layout.value,
            analysis=analysis_type.value,
            root=self._metadata.root_id,
            workspace_members=len(self._metadata.workspace_members),
        )

        if layout is ProjectLayout.WORKSPACE_VIRTUAL:
            if analysis_type is AnalysisType.STACK:
                for member_id in self._metadata.workspace_members:
                    self._walk_member(member_id)
            else:
                self._add_direct(self._virtual_root_deps(), self._root)
            return layout

        # Workspace members only show up when the root actually depends on
        # them; most members (examples, tools) depend on the root instead.
        root_node = self._nodes.get(self._metadata.root_id or "")
        if root_node is None:
            log.warning("walker.root_node_missing", root=self._metadata.root_id)
            return layout
        if analysis_type is AnalysisType.STACK:
            self._walk_transitive(root_node, self._root, set(), set())
        else:
            self._add_direct(root_node.deps, self._root)
        return layout

    # ── filters ──────────────────────────────────────────────────────────

    def _should_skip(self, dep: NodeDependency) -> bool:
        if dep.name in self._ignored:
            return True
        if any(alias in self._ignored for alias in self._aliases(dep.name)):
            return True
        return not dep.is_normal()

    # ── modes ────────────────────────────────────────────────────────────

    def _add_direct(self, deps: Iterable[NodeDependency], parent: PackageURL) -> None:
        for dep in deps:
            if self._should_skip(dep):
                continue
            child = self._purl_for(dep.target_id, parent)
            if child is not None:
                self._sbom.add_edge(parent, child)

    def _virtual_root_deps(self) -> list[NodeDependency]:
        """Union of every member's kept direct deps by target id, first kept wins.

        Filters run before the merge, so the result is independent of member order.
        """
        union: dict[str, NodeDependency] = {}
        for member_id in self._metadata.workspace_members:
            node = self._nodes.get(member_id)
            if node is None:
                log.warning("walker.member_node_missing", member=member_id)
                continue
            for dep in node.deps:
                if not self._should_skip(dep):
                    union.setdefault(dep.target_id, dep)
        return list(union.values())

    def _walk_member(self, member_id: str) -> None:
        member = self._purl_for(member_id, self._root)
        if member is None:
            return
        self._sbom.add_edge(self._root, member)

        node = self._nodes.get(member_id)
        if node is None:
            log.warning("walker.member_node_missing", member=member_id)
            return
        self._walk_transitive(node, member, set(), set())

    def _walk_transitive(
        self,
        node: ResolveNode,
        parent: PackageURL,
        added_edges: set[tuple[str, str]],
        visited: set[str],
    ) -> None:
        if node.id in visited:
            return
        visited.add(node.id)

        for dep in node.deps:
            if self._should_skip(dep):
                continue
            child = self._purl_for(dep.target_id, parent)
            if child is None:
                continue

            key = (parent.coordinates, child.coordinates)
            if key in added_edges:
                continue
            added_edges.add(key)
            self._sbom.add_edge(parent, child)

            child_node = self._nodes.get(dep.target_id)
            if child_node is not None:
                self._walk_transitive(child_node, child, added_edges, visited)

    # ── helpers ──────────────────────────────────────────────────────────

    def _purl_for(self, package_id: str, parent: PackageURL) -> PackageURL | None:
        pkg: PackageInfo | None = self._packages.get(package_id)
        if pkg is None:
            log.warning("walker.dangling_package", package_id=package_id, parent=str(parent))
            return None
        try:
            return PackageURL(type=self._purl_type, name=pkg.name, version=pkg.version)
        except PurlError as exc:
            log.warning("walker.invalid_purl", package_id=package_id, error=str(exc))
            return None
