"""Package URL (purl) value type."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote

from bomforge.exceptions import PurlError

_TYPE_RE = re.compile(r"^[A-Za-z][A-Za-z0-9.+-]*$")


def _encode(segment: str) -> str:
    return quote(segment, safe="")


@dataclass(frozen=True)
class PackageURL:
    """A ``pkg:type/namespace/name@version`` identifier.

    Qualifiers and subpaths are not modelled; every provider emits plain
    coordinates.
    """

    type: str
    name: str
    version: str | None = None
    namespace: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not _TYPE_RE.match(self.type):
            raise PurlError(f"Invalid purl type: {self.type!r}")
        if not isinstance(self.name, str) or not self.name.strip():
            raise PurlError(f"Invalid purl name for type {self.type!r}: {self.name!r}")
        if self.version is not None and (not isinstance(self.version, str) or not self.version.strip()):
            raise PurlError(f"Invalid purl version for {self.name!r}: {self.version!r}")
        object.__setattr__(self, "type", self.type.lower())

    @property
    def coordinates(self) -> str:
        """Canonical string form; also the dedup key for SBOM edges."""
        parts = [f"pkg:{self.type}/"]
        if self.namespace:
            parts.append("/".join(_encode(p) for p in self.namespace.split("/") if p))
            parts.append("/")
        parts.append(_encode(self.name))
        if self.version:
            parts.append(f"@{_encode(self.version)}")
        return "".join(parts)

    def __str__(self) -> str:
        return self.coordinates
