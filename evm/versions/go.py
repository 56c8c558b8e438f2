"""
Go toolchain support.

Releases come from https://go.dev/dl: the JSON feed (?mode=json) lists the
current releases and the HTML page lists every archived one. Artifacts are
named like go1.22.0.linux-amd64.tar.gz and unpack into a top-level 'go'
directory.
"""

import json
import logging
from html.parser import HTMLParser
from typing import Dict, List, Optional

from evm.core.exceptions import CatalogParseError
from evm.versions.catalog import ArtifactDescriptor, CatalogEntry, CatalogFetcher
from evm.versions.operator import VersionOperator

logger = logging.getLogger(__name__)

TAG = "go"
DOWNLOAD_URL = "https://go.dev/dl"

OS_TOKENS = {
    "windows": "windows",
    "macos": "darwin",
    "linux": "linux",
}

ARCH_TOKENS = {
    "x86": "386",
    "x86_64": "amd64",
    "arm": "armv6l",
    "aarch64": "arm64",
}

# Column order of the download tables on the archive page
_ROW_FIELDS = ("filename", "kind", "os", "arch", "size", "checksum")

_BYTES_PER_MB = 1024 * 1024

# Tags with no closing tag; taken from the HTML void element list
_VOID_TAGS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}


class GoCatalog(CatalogFetcher):
    """Catalog fetcher for go.dev/dl."""

    def fetch_latest(self) -> List[CatalogEntry]:
        response = self._get(f"{self.base_url}/", mode="json")
        try:
            data = json.loads(response.text)
        except json.JSONDecodeError as e:
            raise CatalogParseError(f"Invalid JSON from {response.url}: {e}") from e
        return parse_release_feed(data)

    def fetch_archive(self) -> List[CatalogEntry]:
        response = self._get(self.base_url)
        return parse_archive_page(response.text)


def parse_release_feed(data) -> List[CatalogEntry]:
    """
    Convert the decoded ?mode=json feed into catalog entries.

    Raises:
        CatalogParseError: If the feed does not have the expected shape
    """
    if not isinstance(data, list):
        raise CatalogParseError(
            f"Expected a JSON array of releases, got {type(data).__name__}"
        )

    entries = []
    try:
        for release in data:
            files = tuple(
                ArtifactDescriptor(
                    filename=f["filename"],
                    os=f["os"],
                    arch=f["arch"],
                    version=f["version"],
                    checksum=f["sha256"],
                    size_bytes=int(f["size"]),
                    kind=f["kind"],
                )
                for f in release["files"]
            )
            entries.append(
                CatalogEntry(
                    id=release["version"], stable=bool(release["stable"]), files=files
                )
            )
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogParseError(f"Malformed release feed: {e!r}") from e

    logger.debug(f"Parsed {len(entries)} releases from feed")
    return entries


def parse_size(text: str) -> int:
    """
    Convert a size cell such as '64MB' to bytes.

    Unparsable values become 0.
    """
    value = text.strip()
    if value.upper().endswith("MB"):
        value = value[:-2].strip()
    try:
        return int(float(value) * _BYTES_PER_MB)
    except ValueError:
        return 0


def parse_archive_page(html: str) -> List[CatalogEntry]:
    """
    Scrape archived releases from the go.dev/dl HTML page.

    Every div.toggle with an id, nested in an .expanded element under
    #archive, is a release; the rows of its table.downloadtable list the
    artifacts.

    Raises:
        CatalogParseError: If a download row is incomplete
    """
    parser = _ArchivePageParser()
    parser.feed(html)
    parser.close()
    entries = parser.fetch_entries()
    logger.debug(f"Parsed {len(entries)} archived releases")
    return entries


class _Element:
    """An open element on the parser stack."""

    __slots__ = ("tag", "id", "classes", "role")

    def __init__(self, tag: str, attrs: Dict[str, str]):
        self.tag = tag
        self.id = attrs.get("id", "")
        self.classes = set(attrs.get("class", "").split())
        self.role: Optional[str] = None


class _ArchivePageParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.stack: List[_Element] = []
        self.entries: List[CatalogEntry] = []
        self.release_id: Optional[str] = None
        self.files: List[ArtifactDescriptor] = []
        self.row: Optional[List[str]] = None
        self.cell: Optional[List[str]] = None

    def fetch_entries(self) -> List[CatalogEntry]:
        entries = self.entries
        self.entries = []
        return entries

    def handle_starttag(self, tag: str, attrs) -> None:
        element = _Element(tag, {k: v or "" for k, v in attrs})

        if self.release_id is None:
            if (
                tag == "div"
                and "toggle" in element.classes
                and element.id
                and self._in_archive_listing()
            ):
                element.role = "release"
                self.release_id = element.id
                self.files = []
        elif self.row is None:
            if tag == "tr" and self._in_download_table():
                element.role = "row"
                self.row = []
        elif tag == "td" and self.cell is None:
            element.role = "cell"
            self.cell = []

        if tag not in _VOID_TAGS:
            self.stack.append(element)

    def handle_endtag(self, tag: str) -> None:
        for i in range(len(self.stack) - 1, -1, -1):
            if self.stack[i].tag == tag:
                closed = self.stack[i:]
                del self.stack[i:]
                for element in reversed(closed):
                    self._close(element)
                break

    def handle_data(self, data: str) -> None:
        if self.cell is not None:
            self.cell.append(data)

    def close(self) -> None:
        super().close()
        while self.stack:
            self._close(self.stack.pop())

    def _close(self, element: _Element) -> None:
        if element.role == "cell" and self.row is not None:
            self.row.append("".join(self.cell or []).strip())
            self.cell = None
        elif element.role == "row":
            self._finish_row()
        elif element.role == "release":
            self.entries.append(
                CatalogEntry(id=self.release_id, stable=False, files=tuple(self.files))
            )
            self.release_id = None
            self.files = []

    def _finish_row(self) -> None:
        cells, self.row = self.row or [], None
        self.cell = None
        if not cells:
            # Header rows use <th> only
            return
        if len(cells) < len(_ROW_FIELDS):
            raise CatalogParseError(
                f"Incomplete download row for {self.release_id}: {cells!r}"
            )
        fields = dict(zip(_ROW_FIELDS, cells))
        self.files.append(
            ArtifactDescriptor(
                filename=fields["filename"],
                os=fields["os"],
                arch=fields["arch"],
                version=self.release_id,
                checksum=fields["checksum"],
                size_bytes=parse_size(fields["size"]),
                kind=fields["kind"].lower(),
            )
        )

    def _in_archive_listing(self) -> bool:
        """True inside an .expanded element nested under #archive."""
        seen_archive = False
        for element in self.stack:
            if element.id == "archive":
                seen_archive = True
            elif seen_archive and "expanded" in element.classes:
                return True
        return False

    def _in_download_table(self) -> bool:
        """True inside the current release's .expanded table.downloadtable."""
        in_release = in_expanded = False
        for element in self.stack:
            if element.role == "release":
                in_release = True
            elif in_release and "expanded" in element.classes:
                in_expanded = True
            elif in_expanded and element.tag == "table":
                if "downloadtable" in element.classes:
                    return True
        return False


class GoOperator(VersionOperator):
    """Version operator for the Go toolchain."""

    tag = TAG
    default_url = DOWNLOAD_URL
    os_tokens = OS_TOKENS
    arch_tokens = ARCH_TOKENS

    def create_catalog(self, base_url: str, session) -> CatalogFetcher:
        return GoCatalog(base_url, session=session)
