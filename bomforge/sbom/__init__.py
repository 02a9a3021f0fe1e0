"""SBOM assembly — package URLs and the CycloneDX dependency graph."""

from bomforge.sbom.graph import CYCLONEDX_MEDIA_TYPE, SbomGraph, new_graph
from bomforge.sbom.purl import PackageURL

__all__ = ["CYCLONEDX_MEDIA_TYPE", "PackageURL", "SbomGraph", "new_graph"]
