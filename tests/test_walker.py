"""Tests for the dependency graph walker — pure logic, no cargo needed."""

from __future__ import annotations

import pytest

from bomforge.layout import ProjectLayout
from bomforge.providers.cargo import CargoSupport
from bomforge.sbom import PackageURL, new_graph
from bomforge.walker import AnalysisType, DependencyGraphWalker

ROOT = PackageURL(type="cargo", name="project", version="1.0.0")


def _walk(metadata, analysis_type, ignored=()):
    sbom = new_graph()
    sbom.set_root(ROOT)
    walker = DependencyGraphWalker(
        metadata,
        sbom,
        ROOT,
        ignored,
        purl_type="cargo",
        aliases=CargoSupport().name_aliases,
    )
    layout = walker.walk(analysis_type)
    return sbom, layout


def _edges(sbom) -> set[tuple[str, str]]:
    return {(parent.name, child.name) for parent, child in sbom.edges}


def _edge_list(sbom) -> list[tuple[str, str]]:
    return [(parent.name, child.name) for parent, child in sbom.edges]


# ── Single package ───────────────────────────────────────────────────────


class TestSinglePackage:
    @pytest.fixture
    def metadata(self, builder):
        app = builder.package("app", "0.1.0")
        serde = builder.package("serde", "1.0.197")
        derive = builder.package("serde-derive", "1.0.197")
        tokio = builder.package("tokio", "1.36.0")
        builder.depend(app, serde)
        builder.depend(app, tokio)
        builder.depend(serde, derive)
        return builder.build(root=app)

    def test_stack_is_transitive(self, metadata):
        sbom, layout = _walk(metadata, AnalysisType.STACK)
        assert layout is ProjectLayout.SINGLE_PACKAGE
        assert _edges(sbom) == {
            ("project", "serde"),
            ("project", "tokio"),
            ("serde", "serde-derive"),
        }

    def test_component_is_direct_only(self, metadata):
        sbom, _ = _walk(metadata, AnalysisType.COMPONENT)
        assert _edges(sbom) == {("project", "serde"), ("project", "tokio")}

    def test_edges_hang_off_project_root(self, metadata):
        sbom, _ = _walk(metadata, AnalysisType.COMPONENT)
        assert {c.name for c in sbom.children_of(ROOT)} == {"serde", "tokio"}
        assert all(c.version for c in sbom.children_of(ROOT))


# ── Graph shape ──────────────────────────────────────────────────────────


class TestGraphShape:
    def test_diamond_recorded_once(self, builder):
        a = builder.package("a")
        b = builder.package("b")
        c = builder.package("c")
        d = builder.package("d")
        e = builder.package("e")
        builder.depend(a, b)
        builder.depend(a, c)
        builder.depend(b, d)
        builder.depend(c, d)
        builder.depend(d, e)

        sbom, _ = _walk(builder.build(root=a), AnalysisType.STACK)
        edges = _edge_list(sbom)
        assert edges.count(("b", "d")) == 1
        assert edges.count(("c", "d")) == 1
        assert edges.count(("d", "e")) == 1
        assert len(edges) == len(set(edges)) == 5

    def test_diamond_subtree_expanded_once(self, builder, monkeypatch):
        a, b, c, d = (builder.package(n) for n in "abcd")
        builder.depend(a, b)
        builder.depend(a, c)
        builder.depend(b, d)
        builder.depend(c, d)
        metadata = builder.build(root=a)

        expanded: list[str] = []
        original = DependencyGraphWalker._walk_transitive

        def spy(self, node, parent, added_edges, visited):
            if node.id not in visited:
                expanded.append(node.id)
            return original(self, node, parent, added_edges, visited)

        monkeypatch.setattr(DependencyGraphWalker, "_walk_transitive", spy)
        _walk(metadata, AnalysisType.STACK)
        assert expanded.count(d) == 1

    def test_cycle_terminates(self, builder):
        a, b, c = (builder.package(n) for n in "abc")
        builder.depend(a, b)
        builder.depend(b, c)
        builder.depend(c, b)
        sbom, _ = _walk(builder.build(root=a), AnalysisType.STACK)
        assert ("project", "b") in _edges(sbom)
        assert ("b", "c") in _edges(sbom)

    def test_self_reference_terminates(self, builder):
        a, b = builder.package("a"), builder.package("b")
        builder.depend(a, b)
        builder.depend(b, b)
        sbom, _ = _walk(builder.build(root=a), AnalysisType.STACK)
        assert ("project", "b") in _edges(sbom)

    def test_dangling_package_skipped(self, builder):
        a, b = builder.package("a"), builder.package("b")
        builder.depend(a, "registry+https://example#ghost@0.0.1", name="ghost")
        builder.depend(a, b)
        sbom, _ = _walk(builder.build(root=a), AnalysisType.STACK)
        assert _edges(sbom) == {("project", "b")}

    def test_dangling_package_skipped_in_component(self, builder):
        a, b = builder.package("a"), builder.package("b")
        builder.depend(a, "registry+https://example#ghost@0.0.1", name="ghost")
        builder.depend(a, b)
        sbom, _ = _walk(builder.build(root=a), AnalysisType.COMPONENT)
        assert _edges(sbom) == {("project", "b")}

    def test_package_without_node_is_leaf(self, builder):
        a = builder.package("a")
        leaf = builder.package("leaf", node=False)
        builder.depend(a, leaf)
        sbom, _ = _walk(builder.build(root=a), AnalysisType.STACK)
        assert _edges(sbom) == {("project", "leaf")}

    def test_missing_root_node_adds_nothing(self, builder):
        root = builder.package("app", node=False)
        sbom, layout = _walk(builder.build(root=root), AnalysisType.STACK)
        assert layout is ProjectLayout.SINGLE_PACKAGE
        assert sbom.edge_count == 0


# ── Filters ──────────────────────────────────────────────────────────────


class TestFilters:
    @pytest.fixture
    def metadata(self, builder):
        app = builder.package("app")
        both = builder.package("both")
        dev = builder.package("dev-only")
        build = builder.package("build-only")
        runtime = builder.package("runtime")
        below = builder.package("below-dev")
        builder.depend(app, both, None, "dev")
        builder.depend(app, dev, "dev")
        builder.depend(app, build, "build")
        builder.depend(app, runtime)
        builder.depend(dev, below)
        return builder.build(root=app)

    @pytest.mark.parametrize("analysis_type", list(AnalysisType))
    def test_any_normal_kind_wins(self, metadata, analysis_type):
        sbom, _ = _walk(metadata, analysis_type)
        children = {c.name for c in sbom.children_of(ROOT)}
        assert "both" in children
        assert "runtime" in children
        assert "dev-only" not in children
        assert "build-only" not in children

    def test_excluded_subtree_not_walked(self, metadata):
        sbom, _ = _walk(metadata, AnalysisType.STACK)
        assert "below-dev" not in {c.name for c in sbom.components()}

    @pytest.mark.parametrize("analysis_type", list(AnalysisType))
    def test_ignored_name(self, builder, analysis_type):
        app = builder.package("app")
        serde = builder.package("serde")
        log = builder.package("log")
        builder.depend(app, serde)
        builder.depend(app, log)
        sbom, _ = _walk(builder.build(root=app), analysis_type, ignored={"serde"})
        assert _edges(sbom) == {("project", "log")}

    def test_ignored_by_hyphen_alias(self, builder):
        app = builder.package("app")
        aho = builder.package("aho-corasick")
        builder.depend(app, aho)  # resolve graph reports "aho_corasick"
        sbom, _ = _walk(builder.build(root=app), AnalysisType.STACK, ignored={"aho-corasick"})
        assert sbom.edge_count == 0

    def test_ignored_by_crate_name(self, builder):
        app = builder.package("app")
        aho = builder.package("aho-corasick")
        builder.depend(app, aho)
        sbom, _ = _walk(builder.build(root=app), AnalysisType.STACK, ignored={"aho_corasick"})
        assert sbom.edge_count == 0

    def test_ignore_applies_transitively(self, builder):
        app, mid, deep = builder.package("app"), builder.package("mid"), builder.package("deep")
        builder.depend(app, mid)
        builder.depend(mid, deep)
        sbom, _ = _walk(builder.build(root=app), AnalysisType.STACK, ignored={"deep"})
        assert _edges(sbom) == {("project", "mid")}


# ── Workspaces ───────────────────────────────────────────────────────────


class TestWorkspaceWithRoot:
    def test_members_only_via_root_dependencies(self, builder):
        app = builder.package("app")
        core = builder.package("app-core")
        example = builder.package("app-example")
        anyhow = builder.package("anyhow")
        builder.depend(app, core)
        builder.depend(core, anyhow)
        builder.depend(example, app)

        metadata = builder.build(root=app, members=[app, core, example])
        sbom, layout = _walk(metadata, AnalysisType.STACK)
        assert layout is ProjectLayout.WORKSPACE_WITH_ROOT
        assert _edges(sbom) == {("project", "app-core"), ("app-core", "anyhow")}


class TestVirtualWorkspace:
    @pytest.fixture
    def metadata(self, builder):
        m1 = builder.package("m1", "0.1.0")
        m2 = builder.package("m2", "0.2.0")
        serde = builder.package("serde", "1.0.0")
        log = builder.package("log", "0.4.0")
        regex = builder.package("regex", "1.10.0")
        memchr = builder.package("memchr", "2.7.0")
        criterion = builder.package("criterion", "0.5.0")
        builder.depend(m1, serde)
        builder.depend(m1, log)
        builder.depend(m2, serde)
        builder.depend(m2, regex)
        builder.depend(m2, criterion, "dev")
        builder.depend(regex, memchr)
        return builder.build(root=None, members=[m1, m2])

    def test_stack_members_are_sub_roots(self, metadata):
        sbom, layout = _walk(metadata, AnalysisType.STACK)
        assert layout is ProjectLayout.WORKSPACE_VIRTUAL
        assert _edges(sbom) == {
            ("project", "m1"),
            ("project", "m2"),
            ("m1", "serde"),
            ("m1", "log"),
            ("m2", "serde"),
            ("m2", "regex"),
            ("regex", "memchr"),
        }

    def test_component_is_union_of_member_direct_deps(self, metadata):
        sbom, _ = _walk(metadata, AnalysisType.COMPONENT)
        edges = _edge_list(sbom)
        assert sorted(edges) == sorted(
            [("project", "serde"), ("project", "log"), ("project", "regex")]
        )

    @pytest.mark.parametrize("order", [("m1", "m2"), ("m2", "m1")])
    def test_component_union_normal_use_wins(self, builder, order):
        ids = {"m1": builder.package("m1"), "m2": builder.package("m2")}
        shared = builder.package("shared")
        builder.depend(ids["m1"], shared, "dev")
        builder.depend(ids["m2"], shared)
        members = [ids[name] for name in order]
        sbom, _ = _walk(builder.build(root=None, members=members), AnalysisType.COMPONENT)
        assert _edge_list(sbom) == [("project", "shared")]

    def test_component_union_all_dev_only_excluded(self, builder):
        m1, m2 = builder.package("m1"), builder.package("m2")
        shared = builder.package("shared")
        builder.depend(m1, shared, "dev")
        builder.depend(m2, shared, "build")
        sbom, _ = _walk(builder.build(root=None, members=[m1, m2]), AnalysisType.COMPONENT)
        assert sbom.edge_count == 0

    def test_component_ignored_dependency(self, metadata):
        sbom, _ = _walk(metadata, AnalysisType.COMPONENT, ignored={"serde"})
        assert _edges(sbom) == {("project", "log"), ("project", "regex")}

    def test_member_missing_from_catalog(self, builder):
        m1 = builder.package("m1")
        sbom, _ = _walk(builder.build(root=None, members=[m1, "path+file:///ws/ghost#0.1.0"]), AnalysisType.STACK)
        assert _edges(sbom) == {("project", "m1")}
