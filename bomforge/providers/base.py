"""Provider contract and the shared graph-walking provider core."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import structlog

from bomforge.exceptions import (
    LayoutError,
    MalformedManifestError,
    ManifestNotFoundError,
    MissingLockFileError,
    PurlError,
)
from bomforge.metadata import ResolvedMetadata
from bomforge.sbom import CYCLONEDX_MEDIA_TYPE, PackageURL, SbomGraph, new_graph
from bomforge.walker import AnalysisType, DependencyGraphWalker

log = structlog.get_logger("bomforge.provider")


@dataclass(frozen=True)
class Content:
    """A serialized SBOM and its media type."""

    buffer: bytes
    media_type: str


@dataclass(frozen=True)
class ProjectInfo:
    """Identity of the analysed unit."""

    name: str
    version: str


class Provider(ABC):
    """Turns one manifest into component or stack SBOMs."""

    ecosystem: str

    def __init__(self, manifest: Path) -> None:
        self.manifest = Path(manifest)

    @abstractmethod
    def provide_component(self) -> Content:
        """SBOM of the direct dependencies."""
        ...

    @abstractmethod
    def provide_stack(self) -> Content:
        """SBOM of the full transitive dependency graph."""
        ...

    @abstractmethod
    def validate_lock_file(self, lock_file_dir: Path) -> None:
        """Raise :class:`MissingLockFileError` unless analysis can proceed."""
        ...


class EcosystemSupport(ABC):
    """The ecosystem-specific pieces a :class:`GraphProvider` needs."""

    ecosystem: str
    purl_type: str
    manifest_name: str
    lock_file_name: str
    lock_file_hint: str  # command that generates the lock file

    @abstractmethod
    def load_manifest(self, manifest: Path) -> Any:
        """Read and parse the manifest; raise a ConfigurationError on failure."""
        ...

    @abstractmethod
    def project_info(self, parsed: Any) -> ProjectInfo:
        ...

    @abstractmethod
    def ignored_dependencies(self, parsed: Any) -> frozenset[str]:
        """Names of dependencies whose declaration carries an ignore sentinel."""
        ...

    def name_aliases(self, name: str) -> Iterable[str]:
        """Alternative spellings under which *name* may be declared."""
        return ()


class Resolver(Protocol):
    def resolve(self, project_dir: Path) -> ResolvedMetadata | None: ...


class GraphProvider(Provider):
    """Shared provider core: manifest -> identity -> resolver -> walker -> SBOM.

    Resolution problems other than a timeout degrade to a root-only SBOM.
    """

    def __init__(self, manifest: Path, support: EcosystemSupport, resolver: Resolver) -> None:
        super().__init__(manifest)
        self.ecosystem = support.ecosystem
        self._support = support
        self._resolver = resolver
        log.info("provider.initialized", ecosystem=self.ecosystem, manifest=str(self.manifest))

    def provide_component(self) -> Content:
        return self._content(AnalysisType.COMPONENT)

    def provide_stack(self) -> Content:
        return self._content(AnalysisType.STACK)

    def validate_lock_file(self, lock_file_dir: Path) -> None:
        project_dir = self._outermost_manifest_dir(Path(lock_file_dir))
        lock_file = project_dir / self._support.lock_file_name
        if not lock_file.is_file():
            raise MissingLockFileError(
                f"{self._support.lock_file_name} does not exist or is not supported. "
                f"Execute '{self._support.lock_file_hint}' to generate it."
            )

    def create_sbom(self, analysis_type: AnalysisType) -> SbomGraph:
        """Build the SBOM graph without serializing it."""
        if not self.manifest.is_file():
            raise ManifestNotFoundError(f"{self._support.manifest_name} not found: {self.manifest}")

        parsed = self._support.load_manifest(self.manifest)
        info = self._support.project_info(parsed)
        try:
            root = PackageURL(type=self._support.purl_type, name=info.name, version=info.version)
        except PurlError as exc:
            raise MalformedManifestError(
                f"Invalid project identity in {self.manifest}: {exc}"
            ) from exc

        sbom = new_graph()
        sbom.set_root(root)
        ignored = self._support.ignored_dependencies(parsed)
        log.debug("provider.ignored_dependencies", ignored=sorted(ignored))

        metadata = self._resolver.resolve(self.manifest.parent)
        if metadata is None or metadata.resolve is None:
            log.warning(
                "provider.root_only_sbom",
                ecosystem=self.ecosystem,
                analysis=analysis_type.value,
                reason="no resolver data" if metadata is None else "no resolve graph",
            )
            return sbom

        walker = DependencyGraphWalker(
            metadata,
            sbom,
            root,
            ignored,
            purl_type=self._support.purl_type,
            aliases=self._support.name_aliases,
        )
        try:
            walker.walk(analysis_type)
        except LayoutError:
            log.error("provider.invalid_layout", manifest=str(self.manifest), exc_info=True)
            return sbom

        log.info(
            "provider.sbom_created",
            ecosystem=self.ecosystem,
            analysis=analysis_type.value,
            root=str(root),
            edges=sbom.edge_count,
        )
        return sbom

    def _content(self, analysis_type: AnalysisType) -> Content:
        sbom = self.create_sbom(analysis_type)
        return Content(buffer=sbom.serialize(), media_type=CYCLONEDX_MEDIA_TYPE)

    def _outermost_manifest_dir(self, start: Path) -> Path:
        """The highest ancestor of *start* (or *start*) holding a manifest."""
        outermost = start
        for parent in start.resolve().parents:
            if (parent / self._support.manifest_name).exists():
                outermost = parent
        return outermost
