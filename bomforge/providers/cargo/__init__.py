"""Rust / Cargo provider."""

from bomforge.providers.cargo.provider import CargoProvider, CargoSupport
from bomforge.providers.cargo.resolver import CargoMetadataResolver

__all__ = ["CargoMetadataResolver", "CargoProvider", "CargoSupport"]
