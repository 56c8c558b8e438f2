"""
Directory structure management for evm.

Directory Structure:
    evm home ({home}/.evm/):
        - versions/{toolchain}/{version} : Installed toolchain versions
        - versions/{toolchain}/current   : Link to the active version
        - downloads/                     : Checksum-verified artifact cache
        - config.yaml                    : Optional configuration
"""

import os
from pathlib import Path
from typing import Optional

from evm.core.exceptions import EvmError
from evm.core.filesystem import ensure_directory

EVM_HOME_DIRNAME = ".evm"
VERSIONS_DIRNAME = "versions"
DOWNLOADS_DIRNAME = "downloads"
CONFIG_FILENAME = "config.yaml"
CURRENT_VERSION_NAME = "current"


class DirectoryError(EvmError):
    """Raised when the evm directory layout cannot be determined."""

    pass


def get_user_home_dir() -> Path:
    """
    Get the user's home directory.

    Checks HOME first and USERPROFILE second so the same lookup works on
    Unix-like systems and on Windows.

    Raises:
        DirectoryError: If neither variable is set
    """
    for var in ("HOME", "USERPROFILE"):
        value = os.environ.get(var)
        if value:
            return Path(value)
    raise DirectoryError(
        "Neither HOME nor USERPROFILE is set. Cannot determine user home directory."
    )


def get_evm_home_dir(home: Optional[Path] = None) -> Path:
    """
    Get the evm home directory, creating it if needed.

    Args:
        home: Base directory (defaults to the user's home directory)

    Returns:
        Path to {home}/.evm

    Example:
        >>> get_evm_home_dir(Path('/home/user'))
        PosixPath('/home/user/.evm')
    """
    base = Path(home) if home is not None else get_user_home_dir()
    return ensure_directory(base / EVM_HOME_DIRNAME)


def get_versions_dir(toolchain: str, home: Optional[Path] = None) -> Path:
    """Get the versions root for a toolchain, creating it if needed."""
    return ensure_directory(get_evm_home_dir(home) / VERSIONS_DIRNAME / toolchain)


def get_download_dir(home: Optional[Path] = None) -> Path:
    """Get the download cache directory, creating it if needed."""
    return ensure_directory(get_evm_home_dir(home) / DOWNLOADS_DIRNAME)


def get_config_path(home: Optional[Path] = None) -> Path:
    """Get the default configuration file path (not created)."""
    base = Path(home) if home is not None else get_user_home_dir()
    return base / EVM_HOME_DIRNAME / CONFIG_FILENAME
