"""
Helpers for building catalog payloads in tests.
"""

import hashlib

GO_URL = "https://go.dev/dl"


def sha256(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def release(version: str, files, stable: bool = True) -> dict:
    """
    Build one release of the ?mode=json feed.

    Args:
        version: Release id, e.g. 'go1.22.0'
        files: List of (filename, os, arch, content) tuples
    """
    return {
        "version": version,
        "stable": stable,
        "files": [
            {
                "filename": filename,
                "os": os_name,
                "arch": arch,
                "version": version,
                "sha256": sha256(content),
                "size": len(content),
                "kind": "archive",
            }
            for filename, os_name, arch, content in files
        ],
    }


ARCHIVE_PAGE = """<!DOCTYPE html>
<html>
<body>
<div id="stable">
  <div class="toggleVisible" id="go1.22.0">
    <div class="expanded">
      <table class="downloadtable">
        <tr><td>go1.22.0.linux-amd64.tar.gz</td><td>Archive</td><td>Linux</td>
        <td>x86-64</td><td>65MB</td><td><tt>aaaa</tt></td></tr>
      </table>
    </div>
  </div>
</div>
<div class="toggle" id="archive">
  <div class="collapsed">
    <h3 class="toggleButton">Archived versions &#9656;</h3>
  </div>
  <div class="expanded">
    <h3 class="toggleButton">Archived versions &#9662;</h3>
    <div class="toggle" id="go1.21.5">
      <div class="collapsed">
        <h2 class="toggleButton">go1.21.5 &#9656;</h2>
      </div>
      <div class="expanded">
        <h2 class="toggleButton">go1.21.5 &#9662;</h2>
        <table class="downloadtable">
          <thead>
          <tr class="first">
            <th>File name</th><th>Kind</th><th>OS</th><th>Arch</th><th>Size</th>
            <th>SHA256 Checksum</th>
          </tr>
          </thead>
          <tr>
            <td class="filename"><a class="download" href="/dl/go1.21.5.src.tar.gz">go1.21.5.src.tar.gz</a></td>
            <td>Source</td>
            <td></td>
            <td></td>
            <td>25MB</td>
            <td><tt>{src_sha}</tt></td>
          </tr>
          <tr class="highlight">
            <td class="filename"><a class="download" href="/dl/go1.21.5.linux-amd64.tar.gz">go1.21.5.linux-amd64.tar.gz</a></td>
            <td>Archive</td>
            <td>Linux</td>
            <td>x86-64</td>
            <td>64MB</td>
            <td><tt>{linux_sha}</tt></td>
          </tr>
          <tr>
            <td class="filename"><a class="download" href="/dl/go1.21.5.windows-amd64.zip">go1.21.5.windows-amd64.zip</a></td>
            <td>Archive</td>
            <td>Windows</td>
            <td>x86-64</td>
            <td>n/a</td>
            <td><tt>{windows_sha}</tt></td>
          </tr>
        </table>
      </div>
    </div>
    <div class="toggle" id="go1.20.14">
      <div class="collapsed">
        <h2 class="toggleButton">go1.20.14 &#9656;</h2>
      </div>
      <div class="expanded">
        <h2 class="toggleButton">go1.20.14 &#9662;</h2>
        <table class="downloadtable">
          <tr>
            <td class="filename"><a class="download" href="/dl/go1.20.14.darwin-arm64.tar.gz">go1.20.14.darwin-arm64.tar.gz</a></td>
            <td>Archive</td>
            <td>macOS</td>
            <td>ARM64</td>
            <td>62MB</td>
            <td><tt>{darwin_sha}</tt></td>
          </tr>
        </table>
      </div>
    </div>
  </div>
</div>
</body>
</html>
"""


def archive_page(
    src_sha: str = "a" * 64,
    linux_sha: str = "b" * 64,
    windows_sha: str = "c" * 64,
    darwin_sha: str = "d" * 64,
) -> str:
    """Render a go.dev/dl-style page whose #archive lists go1.21.5 and go1.20.14."""
    return ARCHIVE_PAGE.format(
        src_sha=src_sha,
        linux_sha=linux_sha,
        windows_sha=windows_sha,
        darwin_sha=darwin_sha,
    )
