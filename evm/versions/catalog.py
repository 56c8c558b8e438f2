"""
Remote release catalog.

A catalog is the list of releases a toolchain publishes, each with one
artifact per OS/architecture/kind. Fetchers turn whatever the upstream
serves (a JSON feed, an HTML listing) into CatalogEntry objects so the
operator never deals with upstream formats directly.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import requests
from requests.exceptions import RequestException

from evm.core.exceptions import CatalogUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactDescriptor:
    """One downloadable file of a release."""

    filename: str
    os: str
    arch: str
    version: str
    checksum: str
    """Hex SHA-256 of the file"""
    size_bytes: int
    kind: str
    """'archive', 'installer' or 'source'"""


@dataclass(frozen=True)
class CatalogEntry:
    """One release and its artifacts."""

    id: str
    stable: bool
    files: Tuple[ArtifactDescriptor, ...] = ()


class CatalogFetcher(ABC):
    """
    Abstract interface for retrieving a toolchain's release catalog.

    fetch_latest() is the cheap query used by default; fetch_archive() may
    be expensive and is only called when older releases are needed.
    """

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        """
        Initialize fetcher.

        Args:
            base_url: Catalog/download base URL (no trailing slash)
            session: Optional requests session
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    @abstractmethod
    def fetch_latest(self) -> List[CatalogEntry]:
        """
        Fetch the current releases.

        Raises:
            CatalogUnavailable: If the endpoint cannot be reached
            CatalogParseError: If the payload is malformed
        """
        pass

    @abstractmethod
    def fetch_archive(self) -> List[CatalogEntry]:
        """
        Fetch archived (older) releases.

        Raises:
            CatalogUnavailable: If the endpoint cannot be reached
            CatalogParseError: If the payload is malformed
        """
        pass

    def artifact_url(self, artifact: ArtifactDescriptor) -> str:
        """Get the download URL of an artifact."""
        return f"{self.base_url}/{artifact.filename}"

    def _get(self, url: str, **params) -> requests.Response:
        """
        GET a catalog URL, mapping every failure to CatalogUnavailable.

        No retries: the first failure is surfaced to the caller.
        """
        logger.debug(f"Fetching catalog: {url} {params or ''}")
        try:
            response = self.session.get(url, params=params or None)
        except RequestException as e:
            raise CatalogUnavailable(url, str(e)) from e

        if not response.ok:
            raise CatalogUnavailable(
                url, f"status: {response.status_code} {response.reason}"
            )
        return response
