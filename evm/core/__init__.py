"""
Core functionality for evm.

This package contains the foundational modules the version operators
depend on: directory layout, platform matching, downloads and archives.
"""

from .directory import (
    get_user_home_dir,
    get_evm_home_dir,
    get_versions_dir,
    get_download_dir,
    get_config_path,
    DirectoryError,
)

from .platform import (
    PlatformInfo,
    PlatformMatcher,
    detect_platform,
    clear_platform_cache,
)

from .download import (
    download_file,
    verify_checksum,
)

from .filesystem import (
    extract_archive,
    atomic_write,
)

from .exceptions import (
    EvmError,
    ConfigError,
    CatalogError,
    CatalogUnavailable,
    CatalogParseError,
    DownloadError,
    DownloadFailed,
    ChecksumMismatch,
    ArchiveError,
    UnknownArchiveFormat,
    ExtractionFailed,
    InsecureArchiveError,
    VersionError,
    VersionNotFound,
    NoArtifactForPlatform,
    InvalidVersionSelector,
    LinkError,
)

__all__ = [
    "get_user_home_dir",
    "get_evm_home_dir",
    "get_versions_dir",
    "get_download_dir",
    "get_config_path",
    "DirectoryError",
    "PlatformInfo",
    "PlatformMatcher",
    "detect_platform",
    "clear_platform_cache",
    "download_file",
    "verify_checksum",
    "extract_archive",
    "atomic_write",
    "EvmError",
    "ConfigError",
    "CatalogError",
    "CatalogUnavailable",
    "CatalogParseError",
    "DownloadError",
    "DownloadFailed",
    "ChecksumMismatch",
    "ArchiveError",
    "UnknownArchiveFormat",
    "ExtractionFailed",
    "InsecureArchiveError",
    "VersionError",
    "VersionNotFound",
    "NoArtifactForPlatform",
    "InvalidVersionSelector",
    "LinkError",
]
