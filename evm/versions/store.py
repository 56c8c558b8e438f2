"""
On-disk store of installed versions.

Layout of a versions root (one per toolchain):

    {versions_root}/
        1.21.5/          installed version (real directory)
        1.22.0/          installed version (real directory)
        current          link to the active version

'current' is a symlink on Unix-like systems and a junction on Windows.
Where no link can be created it is a plain file holding the active
version's directory name. In every form it points at exactly one
installed version, and it is never a real directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from evm.core.directory import CURRENT_VERSION_NAME
from evm.core.exceptions import InvalidVersionSelector, LinkError
from evm.core.filesystem import (
    atomic_write,
    create_dir_link,
    ensure_directory,
    is_link,
    read_link,
    remove_link,
    same_path,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledVersion:
    """An installed version directory."""

    name: str
    path: Path
    active: bool = False


class VersionStore:
    """Owns the versions root of one toolchain."""

    def __init__(self, root: Path, prefix: str = ""):
        """
        Initialize store.

        Args:
            root: Versions root directory (created on demand)
            prefix: Toolchain prefix stripped from selectors (e.g. 'go')
        """
        self._root = Path(root)
        self.prefix = prefix

    def versions_dir(self) -> Path:
        """Get the versions root, creating it if needed."""
        return ensure_directory(self._root)

    @property
    def current_link(self) -> Path:
        return self.versions_dir() / CURRENT_VERSION_NAME

    def normalize(self, selector: str) -> str:
        """
        Turn a selector into a version directory name.

        Raises:
            InvalidVersionSelector: If the selector cannot name a version directory
        """
        name = selector.strip()
        if self.prefix and name.startswith(self.prefix):
            name = name[len(self.prefix) :]
        if (
            not name
            or name in (".", "..", CURRENT_VERSION_NAME)
            or "/" in name
            or "\\" in name
        ):
            raise InvalidVersionSelector(f"Invalid version: {selector!r}")
        return name

    def path_for(self, selector: str) -> Path:
        """Get the install path a selector maps to (it may not exist)."""
        return self.versions_dir() / self.normalize(selector)

    def resolve(self, selector: str) -> Optional[InstalledVersion]:
        """Get the installed version matching selector, or None."""
        try:
            path = self.path_for(selector)
        except InvalidVersionSelector:
            return None
        if not path.is_dir() or is_link(path):
            return None
        active = self.active_target()
        return InstalledVersion(
            name=path.name,
            path=path,
            active=active is not None and same_path(active, path),
        )

    def list_installed(self) -> Iterator[InstalledVersion]:
        """
        Yield installed versions, flagging the active one.

        Only real directories count; the 'current' link and any stray
        files are skipped. Order is unspecified.
        """
        active = self.active_target()
        for entry in self.versions_dir().iterdir():
            if is_link(entry) or not entry.is_dir():
                continue
            yield InstalledVersion(
                name=entry.name,
                path=entry,
                active=active is not None and same_path(active, entry),
            )

    def active_target(self) -> Optional[Path]:
        """
        Get the path the 'current' link points at.

        The target is returned even if it no longer exists; None means no
        active version is set.
        """
        link = self.current_link
        if is_link(link):
            return read_link(link)
        if link.is_file():
            name = link.read_text(encoding="utf-8").strip()
            return self.versions_dir() / name if name else None
        return None

    def activate(self, install_path: Path) -> None:
        """
        Point 'current' at install_path, replacing any previous link.

        Raises:
            LinkError: If the link cannot be replaced
        """
        link = self.current_link
        self.deactivate()
        try:
            create_dir_link(install_path, link)
        except LinkError as e:
            logger.warning(f"{e}; recording active version in {link} instead")
            atomic_write(link, install_path.name.encode("utf-8"))

    def deactivate(self) -> bool:
        """Remove the 'current' link. Returns True if one was removed."""
        return remove_link(self.current_link)
