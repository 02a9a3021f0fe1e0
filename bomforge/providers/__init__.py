"""Ecosystem providers — auto-registered on import."""

from bomforge.providers import cargo  # noqa: F401
from bomforge.providers.base import Content, GraphProvider, ProjectInfo, Provider
from bomforge.providers.registry import (
    PROVIDER_REGISTRY,
    discover_manifests,
    get_provider,
    register_provider,
)

__all__ = [
    "PROVIDER_REGISTRY",
    "Content",
    "GraphProvider",
    "ProjectInfo",
    "Provider",
    "discover_manifests",
    "get_provider",
    "register_provider",
]
