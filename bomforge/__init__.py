"""bomforge: dependency-graph SBOMs from package manifests."""

__version__ = "0.1.0"

from bomforge.providers import Content, Provider, discover_manifests, get_provider  # noqa: E402
from bomforge.sbom import CYCLONEDX_MEDIA_TYPE, PackageURL, SbomGraph, new_graph  # noqa: E402
from bomforge.walker import AnalysisType  # noqa: E402

__all__ = [
    "CYCLONEDX_MEDIA_TYPE",
    "AnalysisType",
    "Content",
    "PackageURL",
    "Provider",
    "SbomGraph",
    "discover_manifests",
    "get_provider",
    "new_graph",
]
