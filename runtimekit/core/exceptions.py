"""
Centralized exception hierarchy for RuntimeKit.

Transport and extraction failures raised beneath the installer ports are
never wrapped in these types; they reach the caller unchanged.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class RuntimeKitError(Exception):
    """Base exception for all RuntimeKit errors."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class InvalidVersionSpec(RuntimeKitError, ValueError):
    """Raised when a requested version is not a valid semantic-version range."""

    def __init__(self, raw: str, normalized: str = ""):
        self.raw = raw
        self.normalized = normalized or raw
        super().__init__(
            f"The string '{self.normalized}' is not valid SemVer notation for a "
            f"runtime version (requested '{raw}')"
        )


# ============================================================================
# Tool Cache Exceptions
# ============================================================================


class ToolCacheError(RuntimeKitError):
    """Raised when an installation cannot be registered in the tool cache."""

    pass


class ToolCacheLockTimeout(ToolCacheError):
    """Raised when a tool cache entry lock cannot be acquired within timeout."""

    pass


# ============================================================================
# Distribution Exceptions
# ============================================================================


class DistributionError(RuntimeKitError):
    """Base exception for distribution-related errors."""

    pass


class UnknownDistributionError(DistributionError):
    """Raised when no installer is registered for a distribution name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No supported distribution was found for input {name}")


class ReleaseNotFoundError(DistributionError):
    """Raised when a vendor catalog has no release satisfying the range."""

    def __init__(self, distribution: str, version_range: str, architecture: str = ""):
        self.distribution = distribution
        self.version_range = version_range
        self.architecture = architecture
        msg = f"Could not find satisfied version for SemVer '{version_range}'"
        if architecture:
            msg += f" ({distribution}, {architecture})"
        super().__init__(msg)


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(RuntimeKitError):
    """Configuration parsing or validation error."""

    pass
