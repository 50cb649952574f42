"""
Core functionality for RuntimeKit.

This package contains the foundational modules that the installer workflow
and vendor distributions depend on.
"""

from .exceptions import (
    RuntimeKitError,
    InvalidVersionSpec,
    ToolCacheError,
    ToolCacheLockTimeout,
    DistributionError,
    UnknownDistributionError,
    ReleaseNotFoundError,
    ConfigError,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    distribution_architecture,
    clear_platform_cache,
)

from .tool_cache import ToolCache

from .versions import (
    VersionSpec,
    normalize_version,
    encode_cache_version,
    decode_cache_version,
    is_version_satisfies,
)

__all__ = [
    "RuntimeKitError",
    "InvalidVersionSpec",
    "ToolCacheError",
    "ToolCacheLockTimeout",
    "DistributionError",
    "UnknownDistributionError",
    "ReleaseNotFoundError",
    "ConfigError",
    "PlatformInfo",
    "detect_platform",
    "distribution_architecture",
    "clear_platform_cache",
    "ToolCache",
    "VersionSpec",
    "normalize_version",
    "encode_cache_version",
    "decode_cache_version",
    "is_version_satisfies",
]
