"""
Version operator: the install/use/uninstall state machine.

VersionOperator composes the catalog fetcher, platform matcher, artifact
downloader, archive extractor and version store. Toolchain variants only
say where their catalog lives, what their artifact names look like and
how their platform tokens are spelled.

Every operation is a generator of printable status lines. Fatal errors
are raised from the generator; nothing happens until it is iterated.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import requests

from evm.config import EvmConfig
from evm.core.directory import get_download_dir, get_versions_dir
from evm.core.download import download_file
from evm.core.exceptions import (
    EvmError,
    ExtractionFailed,
    NoArtifactForPlatform,
    VersionNotFound,
)
from evm.core.filesystem import extract_archive, is_link, safe_rmtree, same_path
from evm.core.platform import PlatformInfo, PlatformMatcher
from evm.versions.catalog import ArtifactDescriptor, CatalogEntry, CatalogFetcher
from evm.versions.store import VersionStore

logger = logging.getLogger(__name__)

ACTIVE_MARKER = "* "
INACTIVE_MARKER = "  "


class VersionOperator(ABC):
    """
    Shared operations over one toolchain's catalog and versions root.

    Subclasses set:
        tag: Toolchain name; catalog ids and the archive's payload
            directory are named after it (e.g. 'go')
        default_url: Catalog/download base URL
        os_tokens: Canonical OS name -> artifact name token
        arch_tokens: Canonical CPU name -> artifact name token

    Example:
        >>> operator = GoOperator(home=Path.home())
        >>> for line in operator.install("1.22"):
        ...     print(line)
    """

    tag: str = ""
    default_url: str = ""
    os_tokens: Dict[str, str] = {}
    arch_tokens: Dict[str, str] = {}

    def __init__(
        self,
        home: Optional[Path] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        platform_info: Optional[PlatformInfo] = None,
    ):
        """
        Initialize operator.

        Args:
            home: Base storage directory (defaults to the user's home)
            base_url: Catalog/download base URL override (e.g. a mirror)
            session: Optional requests session shared by catalog and downloads
            platform_info: Host platform (auto-detected if None)
        """
        self.home = home
        self.session = session or requests.Session()
        self.catalog = self.create_catalog(base_url or self.default_url, self.session)
        self.matcher = PlatformMatcher(self.os_tokens, self.arch_tokens, platform_info)
        self.store = VersionStore(get_versions_dir(self.tag, home), prefix=self.tag)

    @classmethod
    def from_config(cls, config: EvmConfig, **kwargs) -> "VersionOperator":
        """Create an operator for the configured home and mirror."""
        return cls(home=config.home, base_url=config.mirror_for(cls.tag), **kwargs)

    @abstractmethod
    def create_catalog(
        self, base_url: str, session: requests.Session
    ) -> CatalogFetcher:
        """Create the catalog fetcher for this toolchain."""
        pass

    def version_name(self, version_id: str) -> str:
        """Strip the toolchain prefix from a catalog id ('go1.22.0' -> '1.22.0')."""
        if version_id.startswith(self.tag):
            return version_id[len(self.tag) :]
        return version_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_local(self) -> Iterator[str]:
        """Yield one line per installed version, the active one marked."""
        for version in sorted(self.store.list_installed(), key=lambda v: v.name):
            marker = ACTIVE_MARKER if version.active else INACTIVE_MARKER
            yield f"{marker}{version.name}"

    def list_remote(self, include_archive: bool = False) -> Iterator[str]:
        """
        Yield remote version names.

        Args:
            include_archive: Include archived releases
        """
        entries = self.catalog.fetch_latest()
        if include_archive:
            entries = entries + self.catalog.fetch_archive()

        seen = set()
        for entry in entries:
            if entry.id in seen:
                continue
            seen.add(entry.id)
            yield self.version_name(entry.id)

    def find_release(
        self, selector: str
    ) -> Tuple[CatalogEntry, ArtifactDescriptor]:
        """
        Find the release and artifact to install for a selector.

        The first entry whose id contains selector wins; the archive
        catalog is only fetched when the latest one has no match.

        Raises:
            VersionNotFound: If no catalog entry matches
            NoArtifactForPlatform: If the entry has no artifact for this host
        """
        if not selector:
            raise VersionNotFound(selector, "empty version")

        entry = _first_match(self.catalog.fetch_latest(), selector)
        if entry is None:
            logger.debug(f"{selector} not among latest releases, checking archive")
            entry = _first_match(self.catalog.fetch_archive(), selector)
        if entry is None:
            raise VersionNotFound(selector, "no such release")

        for artifact in entry.files:
            if self.matcher.matches(artifact.filename):
                return entry, artifact
        raise NoArtifactForPlatform(entry.id, self.matcher.token)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def install(self, selector: str) -> Iterator[str]:
        """
        Download, verify and install the release matching selector.

        An existing install of the same version is replaced, not merged.
        """
        entry, artifact = self.find_release(selector)
        yield f"Installing version {artifact.version}..."

        archive = download_file(
            self.catalog.artifact_url(artifact),
            artifact.filename,
            artifact.checksum,
            get_download_dir(self.home),
            session=self.session,
        )
        yield f"Download file completed '{archive}'"

        versions_dir = self.store.versions_dir()
        install_path = self.store.path_for(self.version_name(artifact.version))

        temp_dir = extract_archive(archive)
        try:
            payload = temp_dir / self.tag
            if not payload.is_dir():
                raise ExtractionFailed(
                    f"{archive.name} has no top-level '{self.tag}' directory"
                )
            if install_path.exists() or is_link(install_path):
                safe_rmtree(install_path, require_prefix=versions_dir)
                yield f"Extract path exists and delete '{install_path}'"
            shutil.move(str(payload), str(install_path))
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        logger.debug(f"Installed {entry.id} into {install_path}")
        yield f"Extract file to '{install_path}'"

    def use(self, selector: str) -> Iterator[str]:
        """
        Make an installed version the active one.

        Raises:
            VersionNotFound: If the version is not installed
        """
        install_path = self.store.path_for(selector)
        if not install_path.is_dir() or is_link(install_path):
            raise VersionNotFound(selector, "not installed")

        self.store.activate(install_path)
        yield f"Now using {self.tag} {install_path.name}"

    def uninstall(self, selectors: Iterable[str]) -> Iterator[str]:
        """
        Remove installed versions.

        Each selector is handled on its own: a failure is logged and the
        remaining selectors are still processed. Removing the active
        version also removes the 'current' link.
        """
        versions_dir = self.store.versions_dir()

        for selector in selectors:
            try:
                path = self.store.path_for(selector)
            except EvmError as e:
                logger.error(f"{selector}: {e}")
                continue

            try:
                safe_rmtree(path, require_prefix=versions_dir)
            except (OSError, ValueError) as e:
                logger.error(f"{path}: {e}")
            else:
                yield f"Uninstalled {self.tag} {path.name}"

            active = self.store.active_target()
            if active is not None and same_path(active, path):
                try:
                    self.store.deactivate()
                except EvmError as e:
                    logger.error(f"{path}: {e}")
                else:
                    yield f"Removed active version link to '{path}'"


def _first_match(entries: List[CatalogEntry], selector: str) -> Optional[CatalogEntry]:
    return next((e for e in entries if selector in e.id), None)
