"""
Platform detection and artifact matching for evm.

The running platform is reduced to a canonical OS name ('linux', 'macos',
'windows') and a canonical CPU name ('x86', 'x86_64', 'arm', 'aarch64').
Each toolchain translates those into the tokens its artifact filenames use
(Go, for instance, calls macOS 'darwin' and x86_64 'amd64').

Usage:
    from evm.core.platform import PlatformMatcher

    matcher = PlatformMatcher(os_tokens={"linux": "linux"},
                              arch_tokens={"x86_64": "amd64"})
    matcher.matches("go1.22.0.linux-amd64.tar.gz")
"""

import functools
import platform
from dataclasses import dataclass
from typing import Dict, Optional

UNKNOWN = "unknown"


@dataclass(frozen=True)
class PlatformInfo:
    """
    Canonical description of a host.

    Attributes:
        os: Operating system ('linux', 'macos', 'windows' or 'unknown')
        arch: CPU architecture ('x86', 'x86_64', 'arm', 'aarch64' or 'unknown')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string.

        Example:
            >>> PlatformInfo('linux', 'x86_64').platform_string()
            'linux-x86_64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the running platform.

    Cached: detection only runs once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def clear_platform_cache() -> None:
    """Clear the cached detection result (used by tests)."""
    detect_platform.cache_clear()


def _detect_os() -> str:
    """Normalize platform.system() to a canonical OS name."""
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    elif system == "linux":
        return "linux"
    return UNKNOWN


def _detect_architecture() -> str:
    """Normalize platform.machine() to a canonical CPU name."""
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    elif machine in ("i386", "i486", "i586", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    return UNKNOWN


class PlatformMatcher:
    """
    Decides whether an artifact filename targets the running platform.

    A filename matches when it contains "{os}-{arch}" spelled with the
    toolchain's own tokens. Platforms missing from either table never
    match anything.
    """

    def __init__(
        self,
        os_tokens: Dict[str, str],
        arch_tokens: Dict[str, str],
        platform_info: Optional[PlatformInfo] = None,
    ):
        """
        Initialize matcher.

        Args:
            os_tokens: Canonical OS name -> toolchain token
            arch_tokens: Canonical CPU name -> toolchain token
            platform_info: Host to match for (auto-detected if None)
        """
        self.platform = platform_info or detect_platform()
        self.os_token = os_tokens.get(self.platform.os, UNKNOWN)
        self.arch_token = arch_tokens.get(self.platform.arch, UNKNOWN)

    @property
    def supported(self) -> bool:
        """True if both the OS and the architecture have a token."""
        return UNKNOWN not in (self.os_token, self.arch_token)

    @property
    def token(self) -> str:
        """The "{os}-{arch}" substring artifact names are searched for."""
        return f"{self.os_token}-{self.arch_token}"

    def matches(self, filename: str) -> bool:
        """Check if an artifact filename targets this platform."""
        if not self.supported:
            return False
        return self.token in filename
