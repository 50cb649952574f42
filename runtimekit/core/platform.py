"""
Platform detection for RuntimeKit.

This module detects the host operating system and CPU architecture and maps
architecture aliases onto the names runtime distributions publish under.

Usage:
    from runtimekit.core.platform import detect_platform, distribution_architecture

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}, arch: {platform_info.arch}")
    print(distribution_architecture("amd64"))  # x64
"""

import functools
import platform
from dataclasses import dataclass


# Architecture aliases to distribution-facing names. "amd64" is not something
# the host reports here but is a common explicit alias for "x64".
DISTRIBUTION_ARCH_ALIASES = {
    "amd64": "x64",
    "ia32": "x86",
    "arm64": "aarch64",
}


@dataclass
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm', ...)
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    @property
    def is_macos(self) -> bool:
        return self.os == "macos"

    def __str__(self) -> str:
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo instance with detected platform information
    """
    return PlatformInfo(os=_detect_os(), arch=_detect_architecture())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the lowered
        platform.system() value for anything else
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    elif system == "linux":
        return "linux"
    else:
        return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm', or the raw
        machine name for anything unknown
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


def distribution_architecture(architecture: str) -> str:
    """
    Map an architecture input to the name distributions publish under.

    Unrecognized values pass through unchanged.

    Example:
        >>> distribution_architecture("arm64")
        'aarch64'
        >>> distribution_architecture("s390x")
        's390x'
    """
    return DISTRIBUTION_ARCH_ALIASES.get(architecture, architecture)


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "DISTRIBUTION_ARCH_ALIASES",
    "detect_platform",
    "distribution_architecture",
    "clear_platform_cache",
]
