"""
Artifact download with checksum verification.

Downloads land in a checksum cache: a file is only ever served (from the
cache or from the network) after its SHA-256 digest matched the expected
value. Content is fetched whole into memory and verified before anything
is written, so a corrupt file never appears under its final name.
"""

import hashlib
import logging
import secrets
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

from evm.core.exceptions import ChecksumMismatch, DownloadFailed
from evm.core.filesystem import atomic_write

logger = logging.getLogger(__name__)


def compute_digest(content: bytes) -> str:
    """Compute the SHA-256 hex digest of in-memory content."""
    return hashlib.sha256(content).hexdigest()


def compute_file_digest(file_path: Path, chunk_size: int = 8192) -> str:
    """
    Compute the SHA-256 hex digest of a file, reading it in chunks.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def digests_match(actual: str, expected: str) -> bool:
    """Compare two hex digests case-insensitively in constant time."""
    return secrets.compare_digest(
        actual.lower().encode(), expected.strip().lower().encode()
    )


def verify_checksum(file_path: Path, expected_sha256: str) -> bool:
    """
    Verify file SHA256 checksum.

    Args:
        file_path: Path to file to verify
        expected_sha256: Expected SHA256 hash (hex string)

    Returns:
        True if checksum matches, False otherwise

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    return digests_match(compute_file_digest(file_path), expected_sha256)


def download_file(
    url: str,
    filename: str,
    checksum: str,
    download_dir: Path,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Fetch an artifact into the download cache and return its path.

    A cached file with the same name is reused when its digest matches;
    otherwise it is discarded and the artifact is downloaded again.

    Args:
        url: URL to download from
        filename: Cache file name (the artifact's original file name)
        checksum: Expected SHA-256 hex digest
        download_dir: Cache directory
        session: Optional requests session

    Returns:
        Path to the verified file inside download_dir

    Raises:
        DownloadFailed: If the request fails or answers with a non-success status
        ChecksumMismatch: If the downloaded content has the wrong digest

    Example:
        >>> path = download_file(
        ...     "https://go.dev/dl/go1.22.0.linux-amd64.tar.gz",
        ...     "go1.22.0.linux-amd64.tar.gz",
        ...     "f6c8a87a...",
        ...     Path("~/.evm/downloads").expanduser(),
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")
    if not filename or Path(filename).name != filename:
        raise ValueError(f"Invalid cache file name: {filename!r}")

    download_dir = Path(download_dir)
    download_dir.mkdir(parents=True, exist_ok=True)
    destination = download_dir / filename

    if destination.is_file():
        logger.debug(f"File exists, verifying checksum: {destination}")
        if verify_checksum(destination, checksum):
            logger.info(f"Using cached file '{destination}'")
            return destination
        logger.warning(f"Checksum mismatch for cached {filename}, re-downloading")
        destination.unlink()

    logger.info(f"Downloading from {url}")
    http = session or requests
    try:
        response = http.get(url, allow_redirects=True)
    except RequestException as e:
        raise DownloadFailed(url, str(e)) from e

    if not response.ok:
        raise DownloadFailed(
            url,
            f"status: {response.status_code} {response.reason}",
            status_code=response.status_code,
        )

    content = response.content
    actual = compute_digest(content)
    if not digests_match(actual, checksum):
        raise ChecksumMismatch(filename, checksum, actual)

    atomic_write(destination, content)
    logger.debug(f"Wrote {len(content)} bytes to {destination}")
    return destination
