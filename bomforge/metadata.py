"""Resolved dependency metadata as reported by a native resolver.

The shape follows ``cargo metadata --format-version 1``; other ecosystems
map their resolver output onto the same models. Instances are frozen and
treated as read-only by everything downstream.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DependencyKind(str, Enum):
    NORMAL = "normal"
    DEV = "dev"
    BUILD = "build"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class PackageInfo(_Frozen):
    """One entry of the package catalog."""

    id: str
    name: str
    version: str


class DependencyKindInfo(_Frozen):
    kind: DependencyKind = DependencyKind.NORMAL
    target: str | None = None  # platform cfg, e.g. cfg(windows)

    @field_validator("kind", mode="before")
    @classmethod
    def _null_means_normal(cls, value: object) -> object:
        # cargo reports normal dependencies as "kind": null
        return DependencyKind.NORMAL if value is None else value


class NodeDependency(_Frozen):
    """An edge of the resolve graph: the dependent node references *pkg*."""

    name: str
    pkg: str
    dep_kinds: list[DependencyKindInfo] = Field(default_factory=list)

    @property
    def target_id(self) -> str:
        return self.pkg

    def is_normal(self) -> bool:
        """True unless every declared kind is dev or build.

        An edge used both as a normal and a dev dependency is normal.
        """
        if not self.dep_kinds:
            return True
        return any(k.kind is DependencyKind.NORMAL for k in self.dep_kinds)


class ResolveNode(_Frozen):
    id: str
    deps: list[NodeDependency] = Field(default_factory=list)


class ResolveGraph(_Frozen):
    root: str | None = None
    nodes: list[ResolveNode] = Field(default_factory=list)


class ResolvedMetadata(_Frozen):
    packages: list[PackageInfo] = Field(default_factory=list)
    resolve: ResolveGraph | None = None
    workspace_members: list[str] = Field(default_factory=list)

    @field_validator("packages", "workspace_members", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return [] if value is None else value

    @classmethod
    def from_json(cls, text: str | bytes) -> ResolvedMetadata:
        """Parse resolver output. Raises ``pydantic.ValidationError``."""
        return cls.model_validate_json(text)

    @property
    def root_id(self) -> str | None:
        return self.resolve.root if self.resolve is not None else None

    def package_index(self) -> dict[str, PackageInfo]:
        return {pkg.id: pkg for pkg in self.packages}

    def node_index(self) -> dict[str, ResolveNode]:
        if self.resolve is None:
            return {}
        return {node.id: node for node in self.resolve.nodes}
