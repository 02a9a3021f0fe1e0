"""Provider for Rust projects (Cargo.toml)."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from bomforge.providers.base import EcosystemSupport, GraphProvider, ProjectInfo
from bomforge.providers.cargo.manifest import (
    MANIFEST_NAME,
    CargoManifest,
    find_ignored_dependencies,
    load_manifest,
    parse_project_info,
)
from bomforge.providers.cargo.resolver import CargoMetadataResolver
from bomforge.providers.registry import register_provider


class CargoSupport(EcosystemSupport):
    ecosystem = "cargo"
    purl_type = "cargo"
    manifest_name = MANIFEST_NAME
    lock_file_name = "Cargo.lock"
    lock_file_hint = "cargo build"

    def load_manifest(self, manifest: Path) -> CargoManifest:
        return load_manifest(manifest)

    def project_info(self, parsed: CargoManifest) -> ProjectInfo:
        return parse_project_info(parsed)

    def ignored_dependencies(self, parsed: CargoManifest) -> frozenset[str]:
        return find_ignored_dependencies(parsed)

    def name_aliases(self, name: str) -> Iterable[str]:
        # the resolve graph reports crate names (underscores); Cargo.toml
        # usually declares the package name (hyphens)
        hyphenated = name.replace("_", "-")
        return (hyphenated,) if hyphenated != name else ()


class CargoProvider(GraphProvider):
    """Component and stack SBOMs for a Cargo.toml, resolved by ``cargo metadata``."""

    def __init__(self, manifest: Path, resolver: CargoMetadataResolver | None = None) -> None:
        super().__init__(manifest, CargoSupport(), resolver or CargoMetadataResolver())


register_provider(MANIFEST_NAME, CargoProvider)
