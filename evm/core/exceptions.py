"""
Centralized exception hierarchy for evm.

Every error the core raises derives from EvmError so the CLI can turn it
into a single descriptive failure and a non-zero exit code.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class EvmError(Exception):
    """Base exception for all evm errors."""

    pass


class ConfigError(EvmError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Catalog Exceptions
# ============================================================================


class CatalogError(EvmError):
    """Base exception for remote catalog errors."""

    pass


class CatalogUnavailable(CatalogError):
    """Raised when the catalog endpoint cannot be reached or answers with an error."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request '{url}' failed: {reason}")


class CatalogParseError(CatalogError):
    """Raised when the catalog payload does not have the expected shape."""

    pass


# ============================================================================
# Download Exceptions
# ============================================================================


class DownloadError(EvmError):
    """Base exception for artifact download errors."""

    pass


class DownloadFailed(DownloadError):
    """Raised when the artifact request fails."""

    def __init__(self, url: str, reason: str, status_code: int = 0):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Request '{url}' failed: {reason}")


class ChecksumMismatch(DownloadError):
    """Raised when downloaded content does not match the expected SHA-256."""

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Checksum mismatch for {filename}: expected {expected}, got {actual}"
        )


# ============================================================================
# Archive Exceptions
# ============================================================================


class ArchiveError(EvmError):
    """Base exception for archive handling errors."""

    pass


class UnknownArchiveFormat(ArchiveError):
    """Raised when the archive format cannot be determined from its name."""

    pass


class ExtractionFailed(ArchiveError):
    """Raised when an archive cannot be unpacked."""

    pass


class InsecureArchiveError(ExtractionFailed):
    """Raised when an archive member would be written outside the destination."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class VersionError(EvmError):
    """Base exception for version resolution errors."""

    pass


class VersionNotFound(VersionError):
    """Raised when no version matches the selector."""

    def __init__(self, selector: str, where: str = ""):
        self.selector = selector
        msg = f"Version not found: {selector}"
        if where:
            msg += f" ({where})"
        super().__init__(msg)


class NoArtifactForPlatform(VersionError):
    """Raised when a release has no artifact for the running OS/architecture."""

    def __init__(self, version: str, platform: str):
        self.version = version
        self.platform = platform
        super().__init__(f"No artifact of {version} available for {platform}")


class InvalidVersionSelector(VersionError):
    """Raised when a selector cannot name a directory under the versions root."""

    pass


# ============================================================================
# Link Exceptions
# ============================================================================


class LinkError(EvmError):
    """Raised when the active version link cannot be created or removed."""

    pass
