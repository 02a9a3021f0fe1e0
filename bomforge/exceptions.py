"""Custom exceptions for bomforge."""


class BomforgeError(Exception):
    """Base exception for all bomforge errors."""


class ConfigurationError(BomforgeError, OSError):
    """The project cannot be analysed as configured (-> caller must fix input)."""


class ManifestNotFoundError(ConfigurationError):
    """Raised when the manifest path is missing or is not a regular file."""


class MalformedManifestError(ConfigurationError):
    """Raised when the manifest cannot be decoded or parsed."""


class MissingProjectIdentityError(ConfigurationError):
    """Raised when no project name/version can be derived from the manifest."""


class MissingLockFileError(ConfigurationError):
    """Raised when the lock file the native tool needs has not been generated."""


class UnsupportedManifestError(ConfigurationError):
    """Raised when no provider is registered for a manifest file name."""

    def __init__(self, manifest_name: str, supported: list[str]):
        self.manifest_name = manifest_name
        self.supported = supported
        super().__init__(
            f"Unsupported manifest '{manifest_name}'. Supported: {', '.join(supported) or 'none'}"
        )


class ResolverTimeoutError(BomforgeError, TimeoutError):
    """Raised when the native resolver does not finish within the timeout."""


class LayoutError(BomforgeError):
    """Raised when resolver metadata reports neither a root nor workspace members."""


class PurlError(BomforgeError, ValueError):
    """Raised when a package URL cannot be built from a name/version pair."""
