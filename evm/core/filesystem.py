"""
Cross-platform file system utilities for evm.

This module provides:
- Archive extraction into isolated temporary directories (.zip, .tar.gz)
- Directory link creation and removal (symlinks, Windows junctions)
- Safe file operations (atomic writes, guarded recursive deletion)
"""

import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import Optional, Union

from evm.core.exceptions import (
    ExtractionFailed,
    InsecureArchiveError,
    LinkError,
    UnknownArchiveFormat,
)

logger = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"

# FILE_ATTRIBUTE_REPARSE_POINT
_REPARSE_POINT = 0x400


# ============================================================================
# Path Utilities
# ============================================================================


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists (idempotent).

    Returns:
        Path object (resolved)
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path.resolve()


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check if path is located under parent."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def same_path(a: Union[str, Path], b: Union[str, Path]) -> bool:
    """
    Check if two paths name the same filesystem location.

    Compares normalized absolute spellings first, so paths that no longer
    exist (e.g. a just-deleted link target) still compare equal.
    """
    if os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b)):
        return True
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


# ============================================================================
# Link Handling
# ============================================================================


def is_junction(path: Path) -> bool:
    """Check if path is a Windows directory junction."""
    if not IS_WINDOWS:
        return False
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError:
        return False
    if hasattr(st, "st_file_attributes"):
        return bool(st.st_file_attributes & _REPARSE_POINT) and not path.is_symlink()
    return False


def is_link(path: Path) -> bool:
    """Check if path is a symlink or a junction (dangling ones included)."""
    return path.is_symlink() or is_junction(path)


def read_link(path: Path) -> Optional[Path]:
    """
    Get the target a symlink or junction points at, without requiring it to exist.

    Relative targets are resolved against the link's parent directory.
    Returns None if path is not a link.
    """
    if not is_link(path):
        return None
    try:
        target = Path(os.readlink(path))
    except OSError as e:
        logger.debug(f"Failed to read link {path}: {e}")
        return None
    if IS_WINDOWS and str(target).startswith("\\\\?\\"):
        target = Path(str(target)[4:])
    if not target.is_absolute():
        target = path.parent / target
    return target


def create_dir_link(target: Path, link_path: Path) -> None:
    """
    Create a directory link at link_path pointing to target.

    Uses a junction on Windows (no administrator rights needed) and a
    symbolic link elsewhere.

    Raises:
        LinkError: If link_path already exists or the link cannot be created
    """
    if link_path.exists() or is_link(link_path):
        raise LinkError(f"Link path already exists: {link_path}")

    try:
        if IS_WINDOWS:
            import _winapi

            _winapi.CreateJunction(str(target), str(link_path))
            logger.debug(f"Created junction: {link_path} -> {target}")
        else:
            os.symlink(target, link_path, target_is_directory=True)
            logger.debug(f"Created symlink: {link_path} -> {target}")
    except OSError as e:
        raise LinkError(f"Failed to create link {link_path} -> {target}: {e}") from e


def remove_link(link_path: Path) -> bool:
    """
    Remove a symlink, junction or pointer file.

    Junctions are removed with rmdir, everything else with unlink. Real
    directories are never touched.

    Returns:
        True if something was removed, False if nothing was there

    Raises:
        LinkError: If link_path is a real directory or removal fails
    """
    if not link_path.exists() and not is_link(link_path):
        return False

    try:
        if is_junction(link_path):
            os.rmdir(link_path)
        elif link_path.is_symlink() or link_path.is_file():
            link_path.unlink()
        else:
            raise LinkError(f"Refusing to remove real directory: {link_path}")
    except OSError as e:
        raise LinkError(f"Failed to remove link {link_path}: {e}") from e

    logger.debug(f"Removed link: {link_path}")
    return True


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(archive_path: Union[str, Path]) -> Path:
    """
    Extract an archive into a fresh temporary directory.

    .zip archives are walked entry by entry; anything else is treated as a
    gzip-compressed tarball. The caller owns the returned directory and is
    responsible for removing it.

    Args:
        archive_path: Path to the archive file

    Returns:
        Path to the temporary directory holding the extracted tree

    Raises:
        UnknownArchiveFormat: If the file name has no extension
        ExtractionFailed: If extraction fails

    Example:
        >>> tmp = extract_archive(Path('go1.22.0.linux-amd64.tar.gz'))
        >>> (tmp / 'go' / 'bin').exists()
        True
    """
    archive_path = Path(archive_path)

    if not archive_path.suffix:
        raise UnknownArchiveFormat(
            f"Cannot get extension from file: {archive_path}"
        )

    if not archive_path.is_file():
        raise ExtractionFailed(f"Archive not found: {archive_path}")

    temp_dir = Path(tempfile.mkdtemp(prefix="evm_"))
    logger.debug(f"Extracting {archive_path.name} into {temp_dir}")

    try:
        if archive_path.suffix.lower() == ".zip":
            _extract_zip(archive_path, temp_dir)
        else:
            _extract_tar_gz(archive_path, temp_dir)
    except Exception as e:
        shutil.rmtree(temp_dir, ignore_errors=True)
        if isinstance(e, ExtractionFailed):
            raise
        raise ExtractionFailed(f"Failed to extract {archive_path}: {e}") from e

    return temp_dir


def _extract_zip(archive_path: Path, destination: Path) -> None:
    """Extract a ZIP archive entry by entry."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        infos = zf.infolist()

        for info in infos:
            _validate_archive_path(info.filename, destination)

        for info in infos:
            out_path = destination / info.filename
            if info.is_dir():
                out_path.mkdir(parents=True, exist_ok=True)
                continue
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as src, open(out_path, "wb") as dst:
                shutil.copyfileobj(src, dst)
            # Keep the executable bits recorded by Unix zip tools
            mode = (info.external_attr >> 16) & 0o777
            if mode and not IS_WINDOWS:
                os.chmod(out_path, mode)


def _extract_tar_gz(archive_path: Path, destination: Path) -> None:
    """Extract a gzip-compressed tarball in one call."""
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            _validate_archive_path(member.name, destination)

        # Extract with filter for security (Python 3.12+)
        # For older Python, we've already validated paths above
        if sys.version_info >= (3, 12):
            tar.extractall(destination, filter="data")
        else:
            tar.extractall(destination)


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(file_path: Union[str, Path], content: bytes) -> None:
    """
    Write file atomically using temp file + rename.

    The file is never observable in a partially-written state under its
    final name. If the write fails, the original file (if any) is left as is.
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory (ensures same filesystem)
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        with open(temp_fd, "wb") as f:
            f.write(content)
        temp_path.replace(file_path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def safe_rmtree(path: Union[str, Path], require_prefix: Union[str, Path]) -> None:
    """
    Remove a directory tree that must live under require_prefix.

    Unlike a bare shutil.rmtree, the path is checked against the prefix
    before anything is deleted, and links are refused rather than followed.

    Raises:
        ValueError: If path is not under require_prefix
        FileNotFoundError: If path does not exist
        OSError: If deletion fails
    """
    path = Path(path)
    prefix = Path(require_prefix).resolve()
    parent = path.parent.resolve()

    if not is_relative_to(parent / path.name, prefix) or parent / path.name == prefix:
        raise ValueError(
            f"Refusing to delete '{path}': not under required prefix '{prefix}'"
        )

    if is_link(path):
        raise OSError(f"Refusing to delete link as directory tree: {path}")

    shutil.rmtree(path)


__all__ = [
    "ensure_directory",
    "is_relative_to",
    "same_path",
    "is_junction",
    "is_link",
    "read_link",
    "create_dir_link",
    "remove_link",
    "extract_archive",
    "atomic_write",
    "safe_rmtree",
]
