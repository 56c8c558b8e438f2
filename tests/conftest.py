"""
Pytest configuration and shared fixtures for evm tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from evm.core.platform import PlatformInfo, clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Keep platform detection from leaking between tests."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))
    monkeypatch.delenv("EVM_HOME", raising=False)

    return fake_home


@pytest.fixture
def linux_amd64() -> PlatformInfo:
    """A linux/x86_64 host."""
    return PlatformInfo(os="linux", arch="x86_64")


def _default_payload(version: str) -> Dict[str, bytes]:
    return {
        "go/VERSION": version.encode(),
        "go/bin/go": b"#!/bin/sh\necho " + version.encode() + b"\n",
        "go/src/runtime/runtime.go": b"package runtime\n",
    }


@pytest.fixture
def build_go_tarball() -> Callable[..., bytes]:
    """
    Build an in-memory gzip tarball laid out like an official Go archive.

    Usage: build_go_tarball("go1.22.0", files={"go/extra": b"..."})
    """

    def _build(version: str, files: Optional[Dict[str, bytes]] = None) -> bytes:
        members = files if files is not None else _default_payload(version)
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for name, data in members.items():
                info = tarfile.TarInfo(name)
                info.size = len(data)
                info.mode = 0o755 if "/bin/" in name else 0o644
                tar.addfile(info, io.BytesIO(data))
        return buffer.getvalue()

    return _build


@pytest.fixture
def build_go_zip() -> Callable[..., bytes]:
    """Build an in-memory zip laid out like an official Go Windows archive."""

    def _build(version: str, files: Optional[Dict[str, bytes]] = None) -> bytes:
        members = files if files is not None else _default_payload(version)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("go/", b"")
            for name, data in members.items():
                zf.writestr(name, data)
        return buffer.getvalue()

    return _build
