"""Provider registry — match manifest files to ecosystem providers."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from bomforge.exceptions import UnsupportedManifestError
from bomforge.providers.base import Provider

ProviderFactory = Callable[[Path], Provider]

PROVIDER_REGISTRY: dict[str, ProviderFactory] = {}


def register_provider(manifest_name: str, factory: ProviderFactory) -> None:
    """Register a provider factory for manifests named *manifest_name*."""
    PROVIDER_REGISTRY[manifest_name] = factory


def get_provider(manifest: Path) -> Provider:
    """Instantiate the provider registered for *manifest*'s file name."""
    manifest = Path(manifest)
    factory = PROVIDER_REGISTRY.get(manifest.name)
    if factory is None:
        raise UnsupportedManifestError(manifest.name, sorted(PROVIDER_REGISTRY))
    return factory(manifest)


def discover_manifests(root: Path) -> list[Path]:
    """Find every manifest under *root* that a registered provider handles."""
    matches: list[Path] = []
    for manifest_name in PROVIDER_REGISTRY:
        for hit in sorted(Path(root).glob(f"**/{manifest_name}")):
            if hit.is_file():
                matches.append(hit)
    return matches
